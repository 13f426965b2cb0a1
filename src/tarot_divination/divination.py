"""Divination orchestrator.

Composes the catalog, sampler, renderer and formation selector into the two
readings a host can ask for: a single card, or a full spread. Output goes to
a ``ResponseSink`` so the engine never depends on a concrete chat runtime.
"""

import logging
import random
from collections.abc import Iterator, Sequence
from typing import Optional, Protocol, Union

from tarot_divination.catalog import ResourceCatalog
from tarot_divination.deck import DeckIndex
from tarot_divination.exceptions import InvalidFormationError
from tarot_divination.formations import FormationSelector, apply_cut
from tarot_divination.models import Formation, PresentationUnit, SpreadReading
from tarot_divination.renderer import ReadingRenderer
from tarot_divination.sampler import Sampler

logger = logging.getLogger(__name__)

SINGLE_DRAW_PREFIX = "回应是"


class ResponseSink(Protocol):
    """Where a reading is delivered."""

    def announce(self, text: str) -> None:
        ...

    def emit(self, unit: PresentationUnit) -> None:
        ...

    def emit_batch(self, units: Sequence[PresentationUnit]) -> None:
        ...


def spread_announcement(formation_name: str) -> str:
    return f"启用{formation_name}，正在洗牌中"


class Divination:
    """Entry points for single-card and spread readings."""

    def __init__(
        self,
        deck: DeckIndex,
        catalog: ResourceCatalog,
        rng: Optional[random.Random] = None,
        batch: bool = False,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            deck: Loaded card and formation tables
            catalog: Theme resources to draw images from
            rng: Random source shared by every component (default: unseeded)
            batch: Deliver spread cards in one batch instead of one by one
        """
        self.deck = deck
        self.catalog = catalog
        self.rng = rng if rng is not None else random.Random()
        self.batch = batch
        self.sampler = Sampler(catalog, self.rng)
        self.renderer = ReadingRenderer(catalog, self.rng)
        self.selector = FormationSelector(self.rng)

    def divine_once(
        self, sink: Optional[ResponseSink] = None, theme: Optional[str] = None
    ) -> PresentationUnit:
        """Draw and render a single card."""
        theme = theme or self.catalog.pick_theme(self.rng)
        [card] = self.sampler.sample(self.deck, theme, 1)
        unit = self.renderer.render(theme, card)
        logger.info(f"Single draw from {theme}: {card.card_id}")

        if sink is not None:
            sink.announce(SINGLE_DRAW_PREFIX)
            sink.emit(unit)
        return unit

    def _resolve_formation(self, name: Optional[str]) -> tuple[str, Formation]:
        formations = self.deck.formations()
        if name is None:
            return self.selector.pick_formation(formations)
        if name not in formations:
            raise InvalidFormationError(f"Unknown formation '{name}'")
        return name, formations[name]

    def _prepare_spread(
        self, theme: Optional[str], formation: Optional[str]
    ) -> tuple[str, Formation, list[str], str]:
        name, chosen = self._resolve_formation(formation)
        labels = apply_cut(self.selector.pick_labels(chosen), chosen)
        theme = theme or self.catalog.pick_theme(self.rng)
        logger.info(f"Spread {name} with {chosen.cards_num} cards from {theme}")
        return name, chosen, labels, theme

    def _render_spread(
        self, theme: str, formation: Formation, labels: list[str]
    ) -> Iterator[PresentationUnit]:
        cards = self.sampler.sample(self.deck, theme, formation.cards_num)
        for label, card in zip(labels, cards):
            yield self.renderer.render(theme, card).with_label(label)

    def iter_spread(
        self, theme: Optional[str] = None, formation: Optional[str] = None
    ) -> Iterator[Union[str, PresentationUnit]]:
        """Yield the spread announcement, then each rendered card in position order.

        Formation and labels are validated before any card is drawn.
        """
        name, chosen, labels, theme = self._prepare_spread(theme, formation)
        yield spread_announcement(name)
        yield from self._render_spread(theme, chosen, labels)

    def divine_spread(
        self,
        sink: Optional[ResponseSink] = None,
        theme: Optional[str] = None,
        formation: Optional[str] = None,
    ) -> SpreadReading:
        """Draw and render a full spread.

        The announcement reaches the sink before any card is rendered. Cards
        are emitted one by one, or all at once when batching is enabled.
        """
        name, chosen, labels, theme = self._prepare_spread(theme, formation)
        announcement = spread_announcement(name)
        if sink is not None:
            sink.announce(announcement)

        units: list[PresentationUnit] = []
        for unit in self._render_spread(theme, chosen, labels):
            units.append(unit)
            if sink is not None and not self.batch:
                sink.emit(unit)

        if sink is not None and self.batch:
            sink.emit_batch(units)

        return SpreadReading(theme=theme, formation=name, announcement=announcement, units=units)
