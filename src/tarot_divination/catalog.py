"""Resource catalog: which themes exist and which subtypes each one exposes.

Themes come from two places: a fixed registry of built-in themes and the
subdirectories of the resource root. Nothing here is cached, so adding a
theme directory takes effect on the next request.
"""

import logging
import random
from pathlib import Path
from typing import Mapping, Optional, Sequence

from tarot_divination.exceptions import DivinationError
from tarot_divination.models import Subtype, Theme

logger = logging.getLogger(__name__)

OFFICIAL_THEMES: dict[str, list[str]] = {
    "BilibiliTarot": Subtype.names(),
    "TouhouTarot": [Subtype.MAJOR_ARCANA.value],
}

ALL_SUB_TYPES: list[str] = Subtype.names()


class ResourceCatalog:
    """Read-only view over the themed image resources."""

    def __init__(
        self,
        resource_dir: Path,
        builtin_themes: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            resource_dir: Root directory holding one subdirectory per theme
            builtin_themes: Theme name to fixed subtype list (default: OFFICIAL_THEMES)
        """
        self.resource_dir = Path(resource_dir)
        if builtin_themes is None:
            builtin_themes = OFFICIAL_THEMES
        self.builtin_themes = {name: list(subtypes) for name, subtypes in builtin_themes.items()}

    def _subdirectories(self, directory: Path) -> list[str]:
        try:
            return sorted(entry.name for entry in directory.iterdir() if entry.is_dir())
        except OSError as e:
            logger.warning(f"Cannot read resource directory {directory}: {e}")
            return []

    def custom_themes(self) -> set[str]:
        """Return theme names discovered under the resource root."""
        return set(self._subdirectories(self.resource_dir))

    def list_themes(self) -> set[str]:
        """Return built-in and discovered theme names, duplicates collapsed."""
        return self.custom_themes() | set(self.builtin_themes)

    def list_subtypes(self, theme: str) -> list[str]:
        """Return the subtypes a theme exposes.

        Built-in themes answer from the registry. Custom themes expose the
        known subtypes present as subdirectories; anything else in the theme
        directory is ignored. An unreadable or missing directory yields an
        empty list.
        """
        if theme in self.builtin_themes:
            return list(self.builtin_themes[theme])

        theme_dir = self.resource_dir / theme
        try:
            exists = theme_dir.is_dir()
        except OSError as e:
            logger.warning(f"Cannot read resource directory {theme_dir}: {e}")
            return []
        if not exists:
            logger.debug(f"Theme directory does not exist: {theme_dir}")
            return []

        present = set(self._subdirectories(theme_dir))
        return [subtype for subtype in ALL_SUB_TYPES if subtype in present]

    def get_theme(self, name: str) -> Theme:
        return Theme(
            name=name,
            subtypes=tuple(self.list_subtypes(name)),
            builtin=name in self.builtin_themes,
        )

    def themes(self) -> list[Theme]:
        """Return every theme with its resolved subtypes, sorted by name."""
        return [self.get_theme(name) for name in sorted(self.list_themes())]

    def pick_theme(self, rng: Optional[random.Random] = None) -> str:
        """Pick a theme uniformly at random."""
        rng = rng or random.Random()
        names = sorted(self.list_themes())
        if not names:
            # Only reachable with an empty built-in registry and no custom themes.
            raise DivinationError("No tarot themes are available")
        theme = names[rng.randrange(len(names))]
        logger.debug(f"Picked theme {theme} out of {len(names)}")
        return theme

    def asset_dir(self, theme: str, subtype: str) -> Path:
        return self.resource_dir / theme / subtype
