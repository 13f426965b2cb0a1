"""Card sampling without replacement."""

import logging
import random
from typing import Optional

from tarot_divination.catalog import ResourceCatalog
from tarot_divination.deck import DeckIndex
from tarot_divination.exceptions import InsufficientCardsError, NoSubtypesError
from tarot_divination.models import CardDefinition

logger = logging.getLogger(__name__)


class Sampler:
    """Draw distinct cards valid for a theme."""

    def __init__(self, catalog: ResourceCatalog, rng: Optional[random.Random] = None) -> None:
        self.catalog = catalog
        self.rng = rng if rng is not None else random.Random()

    def valid_cards(self, deck: DeckIndex, theme: str) -> list[CardDefinition]:
        """Return the cards whose subtype the theme exposes, in deck order.

        Raises:
            NoSubtypesError: If the theme resolves to no subtypes
        """
        subtypes = set(self.catalog.list_subtypes(theme))
        if not subtypes:
            raise NoSubtypesError(theme)
        return [card for card in deck.all_cards().values() if card.subtype in subtypes]

    def sample(self, deck: DeckIndex, theme: str, count: int) -> list[CardDefinition]:
        """Draw ``count`` distinct cards for ``theme``.

        Args:
            deck: Deck to draw from
            theme: Theme whose subtypes restrict the draw
            count: Number of cards to draw

        Returns:
            The drawn cards in draw order

        Raises:
            NoSubtypesError: If the theme resolves to no subtypes
            InsufficientCardsError: If fewer than ``count`` cards are valid
        """
        if count < 1:
            raise ValueError(f"Card count must be at least 1, got {count}")

        pool = self.valid_cards(deck, theme)
        if len(pool) < count:
            raise InsufficientCardsError(theme, count, len(pool))

        drawn = partial_shuffle(pool, count, self.rng)
        logger.debug(f"Drew {[card.card_id for card in drawn]} from {len(pool)} {theme} cards")
        return drawn


def partial_shuffle(items: list, count: int, rng: random.Random) -> list:
    """Return ``count`` items chosen uniformly without replacement.

    Runs the first ``count`` steps of a Fisher-Yates shuffle on a copy of
    ``items``; the returned order is the draw order.
    """
    pool = list(items)
    for i in range(count):
        j = rng.randrange(i, len(pool))
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:count]
