"""Pytest configuration and fixtures."""

import random
from pathlib import Path

import pytest
from PIL import Image

from tarot_divination.catalog import ResourceCatalog
from tarot_divination.deck import DeckIndex, reset_deck
from tarot_divination.divination import Divination
from tarot_divination.models import CardDefinition, PresentationUnit

SUIT_SIZES = {
    "MajorArcana": 22,
    "Cups": 14,
    "Pentacles": 14,
    "Sowrds": 14,
    "Wands": 14,
}


def make_deck_data() -> dict:
    """Build a 78 card deck source with one spread layout."""
    cards = {}
    card_id = 0
    for subtype, size in SUIT_SIZES.items():
        for number in range(size):
            cards[str(card_id)] = {
                "type": subtype,
                "pic": f"{subtype.lower()}-{number:02d}",
                "name_cn": f"{subtype}{number}",
                "meaning": {"up": f"up meaning {card_id}", "down": f"down meaning {card_id}"},
            }
            card_id += 1
    return {
        "cards": cards,
        "formations": {
            "时间之流": {
                "cards_num": 3,
                "is_cut": True,
                "representations": [["过去", "现在", "未来"]],
            },
        },
    }


def write_image(path: Path, color: str = "purple") -> None:
    """Write a tiny image, format chosen from the file extension."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (2, 2), color).save(path)


@pytest.fixture(autouse=True)
def clean_deck():
    """Make sure every test starts without a process-wide deck."""
    reset_deck()
    yield
    reset_deck()


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source."""
    return random.Random(20240601)


@pytest.fixture
def deck_data() -> dict:
    return make_deck_data()


@pytest.fixture
def deck(deck_data) -> DeckIndex:
    """Provide a 78 card deck."""
    return DeckIndex.from_mapping(deck_data)


@pytest.fixture
def resource_dir(tmp_path, deck_data) -> Path:
    """Create a resource tree with built-in and custom themes.

    BilibiliTarot has images for every card, TouhouTarot only for the major
    arcana, PixelTarot is a custom theme with a Cups directory and an
    unrelated Extras directory.
    """
    root = tmp_path / "resource"
    for card in deck_data["cards"].values():
        write_image(root / "BilibiliTarot" / card["type"] / f"{card['pic']}.png")
        if card["type"] == "MajorArcana":
            write_image(root / "TouhouTarot" / "MajorArcana" / f"{card['pic']}.jpg")
        if card["type"] == "Cups":
            write_image(root / "PixelTarot" / "Cups" / f"{card['pic']}.png", "gold")
    (root / "PixelTarot" / "Extras").mkdir(parents=True)
    (root / "EmptyTarot").mkdir(parents=True)
    return root


@pytest.fixture
def catalog(resource_dir) -> ResourceCatalog:
    return ResourceCatalog(resource_dir)


@pytest.fixture
def divination(deck, catalog, rng) -> Divination:
    return Divination(deck, catalog, rng=rng)


@pytest.fixture
def sample_card() -> CardDefinition:
    """Provide a complete card whose image exists in BilibiliTarot."""
    return CardDefinition(
        card_id="0",
        subtype="MajorArcana",
        image_key="majorarcana-00",
        display_name="愚者",
        meaning={"up": "从零开始", "down": "不负责任"},
    )


class CollectingSink:
    """ResponseSink that records everything it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def announce(self, text: str) -> None:
        self.events.append(("announce", text))

    def emit(self, unit: PresentationUnit) -> None:
        self.events.append(("emit", unit))

    def emit_batch(self, units) -> None:
        self.events.append(("batch", list(units)))

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()
