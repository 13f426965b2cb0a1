"""Tests for the reading renderer."""

import io
import random

import pytest
from PIL import Image

from tarot_divination.exceptions import AssetNotFoundError, MalformedCardError
from tarot_divination.models import CardDefinition, Orientation
from tarot_divination.renderer import DEFAULT_MIME_TYPE, ReadingRenderer, detect_mime_type


@pytest.fixture
def renderer(catalog, rng) -> ReadingRenderer:
    return ReadingRenderer(catalog, rng)


class TestRender:
    """Test suite for ReadingRenderer.render."""

    def test_render_upright(self, renderer, sample_card, resource_dir) -> None:
        """Test that text and image are composed for an upright card."""
        unit = renderer.render("BilibiliTarot", sample_card, orientation=Orientation.UPRIGHT)
        expected = (resource_dir / "BilibiliTarot" / "MajorArcana" / "majorarcana-00.png").read_bytes()

        assert unit.text == "愚者 正位: 从零开始"
        assert unit.image == expected
        assert unit.mime_type == "image/png"
        assert unit.card_id == "0"
        assert unit.orientation is Orientation.UPRIGHT
        assert unit.label is None

    def test_render_reversed(self, renderer, sample_card) -> None:
        unit = renderer.render("BilibiliTarot", sample_card, orientation=Orientation.REVERSED)
        assert unit.text == "愚者 逆位: 不负责任"

    def test_render_is_deterministic_for_fixed_orientation(self, renderer, sample_card) -> None:
        first = renderer.render("TouhouTarot", sample_card, orientation=Orientation.REVERSED)
        second = renderer.render("TouhouTarot", sample_card, orientation=Orientation.REVERSED)
        assert first == second
        assert first.mime_type == "image/jpeg"

    def test_render_leaves_label_unset(self, renderer, sample_card) -> None:
        unit = renderer.render("BilibiliTarot", sample_card)
        assert unit.label is None
        assert unit.with_label("过去").label == "过去"

    def test_file_without_extension_is_ignored(self, renderer, resource_dir) -> None:
        """Test that a bare file named after the key is not an image match."""
        (resource_dir / "BilibiliTarot" / "Cups" / "bare").write_bytes(b"no extension")
        card = CardDefinition(
            card_id="z",
            subtype="Cups",
            image_key="bare",
            display_name="无名",
            meaning={"up": "u", "down": "d"},
        )
        with pytest.raises(AssetNotFoundError) as exc_info:
            renderer.render("BilibiliTarot", card)
        assert exc_info.value.image_key == "bare"

    def test_extension_does_not_matter(self, renderer, resource_dir) -> None:
        (resource_dir / "BilibiliTarot" / "Cups" / "special.webp").write_bytes(b"RIFF-not-really")
        card = CardDefinition(
            card_id="x",
            subtype="Cups",
            image_key="special",
            display_name="特别",
            meaning={"up": "u", "down": "d"},
        )
        unit = renderer.render("BilibiliTarot", card)
        assert unit.image == b"RIFF-not-really"
        assert unit.mime_type == DEFAULT_MIME_TYPE

    def test_prefix_of_another_key_does_not_match(self, renderer, resource_dir) -> None:
        """Test that 'cups-1' does not pick up 'cups-10.png'."""
        (resource_dir / "BilibiliTarot" / "Cups" / "cups-10.png").write_bytes(b"ten")
        card = CardDefinition(
            card_id="y",
            subtype="Cups",
            image_key="cups-1",
            display_name="圣杯",
            meaning={"up": "u", "down": "d"},
        )
        with pytest.raises(AssetNotFoundError):
            renderer.render("BilibiliTarot", card)


class TestRenderFailures:
    """Test suite for rendering errors."""

    @pytest.mark.parametrize(
        "field, value",
        [
            ("subtype", None),
            ("image_key", ""),
            ("display_name", None),
            ("meaning", {"up": "u", "down": ""}),
            ("meaning", {"up": None, "down": "d"}),
            ("meaning", "flat"),
            ("meaning", {"up": ["u"], "down": "d"}),
        ],
    )
    def test_incomplete_card_is_rejected(self, renderer, sample_card, field, value) -> None:
        if field == "meaning":
            card = CardDefinition.model_validate({**sample_card.model_dump(), "meaning": value})
        else:
            card = sample_card.model_copy(update={field: value})
        with pytest.raises(MalformedCardError) as exc_info:
            renderer.render("BilibiliTarot", card)
        assert exc_info.value.card_id == "0"
        assert exc_info.value.missing

    def test_validation_happens_before_file_access(self, catalog, sample_card) -> None:
        """Test that a malformed card fails even when the theme has no images."""
        renderer = ReadingRenderer(catalog, random.Random(1))
        card = sample_card.model_copy(update={"display_name": ""})
        with pytest.raises(MalformedCardError):
            renderer.render("NoSuchTarot", card)

    def test_missing_image(self, renderer, sample_card) -> None:
        card = sample_card.model_copy(update={"image_key": "no-such-image"})
        with pytest.raises(AssetNotFoundError) as exc_info:
            renderer.render("BilibiliTarot", card)
        assert exc_info.value.image_key == "no-such-image"

    def test_missing_subtype_directory(self, renderer, sample_card) -> None:
        with pytest.raises(AssetNotFoundError):
            renderer.render("PixelTarot", sample_card)


class TestOrientation:
    """Statistical checks on orientation."""

    def test_reversed_rate_converges_to_half(self) -> None:
        renderer = ReadingRenderer(catalog=None, rng=random.Random(2024))
        trials = 20000
        reversed_count = sum(
            renderer.draw_orientation() is Orientation.REVERSED for _ in range(trials)
        )
        assert abs(reversed_count / trials - 0.5) < 0.02

    def test_rendered_orientations_vary(self, renderer, sample_card) -> None:
        orientations = {renderer.render("BilibiliTarot", sample_card).orientation for _ in range(100)}
        assert orientations == {Orientation.UPRIGHT, Orientation.REVERSED}


class TestDetectMimeType:
    """Test suite for detect_mime_type."""

    def test_unknown_bytes(self) -> None:
        assert detect_mime_type(b"plain text") == DEFAULT_MIME_TYPE

    def test_png_bytes(self) -> None:
        buffer = io.BytesIO()
        Image.new("RGB", (2, 2), "gold").save(buffer, format="PNG")
        assert detect_mime_type(buffer.getvalue()) == "image/png"

    def test_decompression_bomb_falls_back(self, monkeypatch) -> None:
        """Test that an image over Pillow's pixel limit is served as opaque bytes."""
        buffer = io.BytesIO()
        Image.new("RGB", (2, 2), "gold").save(buffer, format="PNG")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1)
        assert detect_mime_type(buffer.getvalue()) == DEFAULT_MIME_TYPE
