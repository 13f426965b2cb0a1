"""Data models for tarot cards, formations and rendered readings."""

import base64
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Subtype(str, Enum):
    """Enumeration of known card subtypes.

    The values double as resource directory names, so the historical
    ``Sowrds`` spelling is kept as is.
    """

    MAJOR_ARCANA = "MajorArcana"
    CUPS = "Cups"
    PENTACLES = "Pentacles"
    SWORDS = "Sowrds"
    WANDS = "Wands"

    @classmethod
    def names(cls) -> list[str]:
        """Return every subtype name in canonical order."""
        return [subtype.value for subtype in cls]


class Orientation(str, Enum):
    """Enumeration of card orientations."""

    UPRIGHT = "upright"
    REVERSED = "reversed"

    @property
    def label(self) -> str:
        """Return the display label used in reading text."""
        return "逆位" if self is Orientation.REVERSED else "正位"


def _as_text(value: Any) -> Optional[str]:
    """Keep strings, stringify numbers, and treat any other shape as missing."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class Meaning(BaseModel):
    """Upright and reversed interpretations of a card."""

    model_config = ConfigDict(frozen=True)

    up: Optional[str] = None
    down: Optional[str] = None

    @field_validator("up", "down", mode="before")
    @classmethod
    def _text_or_missing(cls, value: Any) -> Optional[str]:
        return _as_text(value)


class CardDefinition(BaseModel):
    """A single card as described by the deck source.

    Content fields are optional so that an incomplete entry still loads;
    completeness is checked when the card is rendered.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    card_id: str
    subtype: Optional[str] = Field(default=None, alias="type")
    image_key: Optional[str] = Field(default=None, alias="pic")
    display_name: Optional[str] = Field(default=None, alias="name_cn")
    meaning: Meaning = Field(default_factory=Meaning)

    @field_validator("subtype", "image_key", "display_name", mode="before")
    @classmethod
    def _text_or_missing(cls, value: Any) -> Optional[str]:
        return _as_text(value)

    @field_validator("meaning", mode="before")
    @classmethod
    def _meaning_or_missing(cls, value: Any) -> Any:
        if isinstance(value, (Mapping, Meaning)):
            return value
        return {}

    @property
    def meaning_upright(self) -> Optional[str]:
        return self.meaning.up

    @property
    def meaning_reversed(self) -> Optional[str]:
        return self.meaning.down

    def missing_fields(self) -> list[str]:
        """List the required fields that are absent or empty."""
        required = {
            "type": self.subtype,
            "pic": self.image_key,
            "name_cn": self.display_name,
            "meaning.up": self.meaning.up,
            "meaning.down": self.meaning.down,
        }
        return [name for name, value in required.items() if not value or not value.strip()]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


class Theme(BaseModel):
    """A deck style and the subtypes it exposes."""

    model_config = ConfigDict(frozen=True)

    name: str
    subtypes: tuple[str, ...] = ()
    builtin: bool = False

    @property
    def is_available(self) -> bool:
        return len(self.subtypes) > 0


class Formation(BaseModel):
    """A spread layout.

    Label-set lengths are not checked here; the formation selector rejects
    inconsistent label-sets when a reading is requested.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    cards_num: int = Field(..., ge=1)
    is_cut: bool = False
    representations: list[list[str]] = Field(default_factory=list)


class DrawnCard(BaseModel):
    """A card paired with the orientation it was drawn in."""

    model_config = ConfigDict(frozen=True)

    card: CardDefinition
    orientation: Orientation

    @property
    def is_reversed(self) -> bool:
        return self.orientation is Orientation.REVERSED

    @property
    def orientation_label(self) -> str:
        return self.orientation.label

    @property
    def meaning_text(self) -> Optional[str]:
        if self.is_reversed:
            return self.card.meaning_reversed
        return self.card.meaning_upright


class PresentationUnit(BaseModel):
    """Rendered output for one drawn card."""

    model_config = ConfigDict(frozen=True)

    label: Optional[str] = None
    text: str
    image: bytes = Field(repr=False)
    mime_type: str = "application/octet-stream"
    card_id: Optional[str] = None
    orientation: Optional[Orientation] = None

    @property
    def data_uri(self) -> str:
        """Return the image encoded as a base64 data URI."""
        payload = base64.b64encode(self.image).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"

    def with_label(self, label: Optional[str]) -> "PresentationUnit":
        return self.model_copy(update={"label": label})

    def __str__(self) -> str:
        if self.label:
            return f"{self.label}\n{self.text}"
        return self.text


class SpreadReading(BaseModel):
    """A complete spread: which formation was used and every rendered card."""

    theme: str
    formation: str
    announcement: str
    units: list[PresentationUnit] = Field(default_factory=list)

    @property
    def labels(self) -> list[Optional[str]]:
        return [unit.label for unit in self.units]
