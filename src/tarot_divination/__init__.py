"""Tarot divination engine."""

__version__ = "0.1.0"

from tarot_divination.catalog import ResourceCatalog
from tarot_divination.deck import DeckIndex, get_deck, init_deck
from tarot_divination.divination import Divination, ResponseSink
from tarot_divination.exceptions import (
    AssetNotFoundError,
    DataCorruptError,
    DivinationError,
    InsufficientCardsError,
    InvalidFormationError,
    MalformedCardError,
    NoSubtypesError,
)
from tarot_divination.models import (
    CardDefinition,
    DrawnCard,
    Formation,
    Orientation,
    PresentationUnit,
    SpreadReading,
    Theme,
)

__all__ = [
    "ResourceCatalog",
    "DeckIndex",
    "init_deck",
    "get_deck",
    "Divination",
    "ResponseSink",
    "DivinationError",
    "DataCorruptError",
    "NoSubtypesError",
    "InsufficientCardsError",
    "MalformedCardError",
    "AssetNotFoundError",
    "InvalidFormationError",
    "CardDefinition",
    "DrawnCard",
    "Formation",
    "Orientation",
    "PresentationUnit",
    "SpreadReading",
    "Theme",
]
