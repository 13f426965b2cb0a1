"""Turn drawn cards into text and image presentation units."""

import io
import logging
import random
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from tarot_divination.catalog import ResourceCatalog
from tarot_divination.exceptions import AssetNotFoundError, MalformedCardError
from tarot_divination.models import CardDefinition, DrawnCard, Orientation, PresentationUnit

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class ReadingRenderer:
    """Render cards of a theme into presentation units."""

    def __init__(self, catalog: ResourceCatalog, rng: Optional[random.Random] = None) -> None:
        self.catalog = catalog
        self.rng = rng if rng is not None else random.Random()

    def validate(self, card: CardDefinition) -> None:
        missing = card.missing_fields()
        if missing:
            raise MalformedCardError(card.card_id, missing)

    def find_asset(self, theme: str, card: CardDefinition) -> Path:
        """Locate the image whose file stem equals the card's image key.

        Files without an extension are never matched.

        Raises:
            AssetNotFoundError: If the directory is missing or nothing matches
        """
        directory = self.catalog.asset_dir(theme, card.subtype)
        try:
            candidates = sorted(path for path in directory.iterdir() if path.is_file())
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")
            raise AssetNotFoundError(theme, card.subtype, card.image_key) from e

        for path in candidates:
            if path.suffix and path.stem == card.image_key:
                return path
        raise AssetNotFoundError(theme, card.subtype, card.image_key)

    def draw_orientation(self) -> Orientation:
        """Flip a fair coin for the card's orientation."""
        return Orientation.REVERSED if self.rng.random() < 0.5 else Orientation.UPRIGHT

    @staticmethod
    def compose_text(drawn: DrawnCard) -> str:
        return f"{drawn.card.display_name} {drawn.orientation_label}: {drawn.meaning_text}"

    def render(
        self,
        theme: str,
        card: CardDefinition,
        orientation: Optional[Orientation] = None,
    ) -> PresentationUnit:
        """Render one card.

        Args:
            theme: Theme whose images are used
            card: Card to render
            orientation: Fixed orientation (default: fair coin flip)

        Returns:
            The rendered PresentationUnit

        Raises:
            MalformedCardError: If a required card field is empty
            AssetNotFoundError: If the card's image cannot be found
        """
        self.validate(card)
        asset = self.find_asset(theme, card)
        try:
            image = asset.read_bytes()
        except OSError as e:
            raise AssetNotFoundError(theme, card.subtype, card.image_key) from e

        if orientation is None:
            orientation = self.draw_orientation()
        drawn = DrawnCard(card=card, orientation=orientation)
        logger.debug(f"Rendering {card.card_id} ({orientation.value}) from {asset}")

        return PresentationUnit(
            text=self.compose_text(drawn),
            image=image,
            mime_type=detect_mime_type(image),
            card_id=card.card_id,
            orientation=orientation,
        )


def detect_mime_type(image: bytes) -> str:
    """Return the MIME type Pillow reports for ``image``.

    Unidentified images and images Pillow refuses to open as decompression
    bombs fall back to ``DEFAULT_MIME_TYPE``.
    """
    try:
        with Image.open(io.BytesIO(image)) as img:
            return Image.MIME.get(img.format, DEFAULT_MIME_TYPE)
    except (UnidentifiedImageError, Image.DecompressionBombError):
        return DEFAULT_MIME_TYPE
