"""Errors raised by the divination engine.

Every error here is fatal to the current request. The engine never retries
and never substitutes another card; the host decides how to present the
failure.
"""

from pathlib import Path
from typing import Optional, Sequence


class DivinationError(Exception):
    """Base class for all divination engine errors."""


class DataCorruptError(DivinationError):
    """The deck source cannot be parsed into a card table."""

    def __init__(self, message: str, source: Optional[Path] = None):
        self.source = source
        if source is not None:
            message = f"{message} ({source})"
        super().__init__(message)


class NoSubtypesError(DivinationError):
    """A theme resolves to zero usable subtypes."""

    def __init__(self, theme: str):
        self.theme = theme
        super().__init__(f"Theme '{theme}' has no usable subtypes, check its resources")


class InsufficientCardsError(DivinationError):
    """Fewer valid cards exist for a theme than were requested."""

    def __init__(self, theme: str, requested: int, available: int):
        self.theme = theme
        self.requested = requested
        self.available = available
        super().__init__(
            f"Theme '{theme}' has {available} usable cards, {requested} requested"
        )


class MalformedCardError(DivinationError):
    """A drawn card is missing one of its required fields."""

    def __init__(self, card_id: str, missing: Sequence[str]):
        self.card_id = card_id
        self.missing = list(missing)
        super().__init__(
            f"Card '{card_id}' is incomplete, missing: {', '.join(self.missing)}"
        )


class AssetNotFoundError(DivinationError):
    """No image file matches a card's image key."""

    def __init__(self, theme: str, subtype: str, image_key: str):
        self.theme = theme
        self.subtype = subtype
        self.image_key = image_key
        super().__init__(f"Tarot image not found: {theme}/{subtype}/{image_key}")


class InvalidFormationError(DivinationError):
    """A formation is configured inconsistently."""
