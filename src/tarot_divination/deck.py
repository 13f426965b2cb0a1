"""Deck index: the card table and formation table loaded from the deck source.

The table is loaded once per process through ``init_deck`` and is read-only
afterwards, so it can be shared between concurrent requests.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from tarot_divination.exceptions import DataCorruptError
from tarot_divination.models import CardDefinition, Formation

logger = logging.getLogger(__name__)

DEFAULT_DECK_FILE = Path(__file__).parent / "data" / "tarot.json"

YAML_SUFFIXES = {".yaml", ".yml"}


class DeckIndex:
    """In-memory card and formation lookup."""

    def __init__(
        self,
        cards: Mapping[str, CardDefinition],
        formations: Optional[Mapping[str, Formation]] = None,
    ) -> None:
        self._cards = MappingProxyType(dict(cards))
        self._formations = MappingProxyType(dict(formations or {}))

    @classmethod
    def from_file(cls, path: Path) -> "DeckIndex":
        """Load a deck from a JSON or YAML file.

        Args:
            path: Path to the deck source

        Returns:
            The loaded DeckIndex

        Raises:
            DataCorruptError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() in YAML_SUFFIXES:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except OSError as e:
            raise DataCorruptError(f"Cannot read deck source: {e}", path) from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise DataCorruptError(f"Deck source is not parseable: {e}", path) from e

        try:
            deck = cls.from_mapping(data)
        except DataCorruptError as e:
            raise DataCorruptError(str(e), path) from e

        logger.info(f"Loaded {len(deck)} cards and {len(deck.formations())} formations from {path}")
        return deck

    @classmethod
    def from_mapping(cls, data: Any) -> "DeckIndex":
        """Build a deck from an already parsed deck source."""
        if not isinstance(data, Mapping):
            raise DataCorruptError("Deck source must be a mapping")

        raw_cards = data.get("cards")
        if not isinstance(raw_cards, Mapping):
            raise DataCorruptError("Deck source has no 'cards' table")

        cards: dict[str, CardDefinition] = {}
        for card_id, entry in raw_cards.items():
            card = _parse_card(str(card_id), entry)
            if card is not None:
                cards[card.card_id] = card

        raw_formations = data.get("formations") or {}
        if not isinstance(raw_formations, Mapping):
            raise DataCorruptError("Deck source 'formations' must be a mapping")

        formations: dict[str, Formation] = {}
        for name, entry in raw_formations.items():
            if not isinstance(entry, Mapping):
                raise DataCorruptError(f"Formation '{name}' must be a mapping")
            try:
                formations[str(name)] = Formation.model_validate({**entry, "name": str(name)})
            except ValidationError as e:
                raise DataCorruptError(f"Formation '{name}' is invalid: {e}") from e

        return cls(cards, formations)

    def all_cards(self) -> Mapping[str, CardDefinition]:
        """Return every card keyed by id, in source order."""
        return self._cards

    def get(self, card_id: str) -> Optional[CardDefinition]:
        return self._cards.get(card_id)

    def formations(self) -> Mapping[str, Formation]:
        return self._formations

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards


def _parse_card(card_id: str, entry: Any) -> Optional[CardDefinition]:
    # Incomplete or wrongly shaped cards load with those fields missing and
    # are rejected when rendered. A bare value carries no type, so no theme
    # could ever draw it.
    if not isinstance(entry, Mapping):
        logger.warning(f"Skipping card {card_id}: entry is not a mapping")
        return None
    card = CardDefinition.model_validate({**entry, "card_id": card_id})
    if not card.is_complete:
        logger.debug(f"Card {card_id} is missing {', '.join(card.missing_fields())}")
    return card


_deck: Optional[DeckIndex] = None


def init_deck(path: Optional[Path] = None) -> DeckIndex:
    """Load the process-wide deck once and return it.

    Later calls return the already loaded deck regardless of ``path``.
    """
    global _deck
    if _deck is None:
        _deck = DeckIndex.from_file(path or DEFAULT_DECK_FILE)
    return _deck


def get_deck() -> DeckIndex:
    """Return the process-wide deck loaded by ``init_deck``."""
    if _deck is None:
        raise RuntimeError("Deck is not loaded, call init_deck() first")
    return _deck


def reset_deck() -> None:
    """Forget the process-wide deck."""
    global _deck
    _deck = None
