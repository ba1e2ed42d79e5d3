"""Tests for the Pillow transform engine."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from easythumb.imaging import PillowEngine, format_for_path, target_size
from easythumb.keys import ResizeMode


@pytest.fixture
def engine() -> PillowEngine:
    return PillowEngine(background_color="00FF00", background_alpha=100)


class TestTargetSize:
    def test_both_given(self):
        assert target_size((200, 100), 50, 40) == (50, 40)

    def test_height_derived(self):
        assert target_size((200, 100), 50, None) == (50, 25)

    def test_width_derived(self):
        assert target_size((200, 100), None, 50) == (100, 50)

    def test_never_zero(self):
        assert target_size((1000, 1), 10, None) == (10, 1)


class TestResize:
    def test_outbound_is_exact(self, engine):
        image = Image.new("RGB", (200, 100), "red")
        assert engine.resize(image, 50, 50, ResizeMode.OUTBOUND).size == (50, 50)

    def test_outbound_crops_center(self, engine):
        image = Image.new("RGB", (300, 100), "blue")
        image.paste(Image.new("RGB", (100, 100), "red"), (100, 0))
        out = engine.resize(image, 10, 10, ResizeMode.OUTBOUND)
        r, g, b = out.getpixel((5, 5))
        assert r > 200 and b < 50

    def test_inset_pads_to_exact_size(self, engine):
        image = Image.new("RGB", (200, 100), "red")
        out = engine.resize(image, 50, 50, ResizeMode.INSET)
        assert out.size == (50, 50)
        # top and bottom bands are background, the middle is the image
        assert out.getpixel((25, 2)) == (0, 255, 0)
        assert out.getpixel((25, 25))[0] > 200

    def test_inset_with_transparent_background(self):
        engine = PillowEngine(background_color="#000", background_alpha=0)
        out = engine.resize(Image.new("RGB", (200, 100), "red"), 50, 50, ResizeMode.INSET)
        assert out.mode == "RGBA"
        assert out.getpixel((25, 2))[3] == 0

    def test_inset_box_keeps_aspect_without_padding(self, engine):
        out = engine.resize(Image.new("RGB", (200, 100), "red"), 50, 50, ResizeMode.INSET_BOX)
        assert out.size == (50, 25)

    def test_missing_dimension_follows_aspect_ratio(self, engine):
        out = engine.resize(Image.new("RGB", (200, 100), "red"), None, 20, ResizeMode.OUTBOUND)
        assert out.size == (40, 20)


class TestCodec:
    def test_decode_bytes_and_path(self, engine, make_image, jpeg_bytes):
        path = make_image("photo.png", size=(30, 20))
        assert engine.decode(path).size == (30, 20)
        assert engine.decode(jpeg_bytes((12, 8))).size == (12, 8)

    def test_decode_garbage(self, engine):
        with pytest.raises(OSError):
            engine.decode(b"not an image")

    def test_save_uses_suffix_format(self, engine, tmp_path: Path):
        path = tmp_path / "thumb.png"
        engine.save(Image.new("RGB", (10, 10), "red"), path, quality=50)
        with Image.open(path) as saved:
            assert saved.format == "PNG"

    def test_save_jpeg_flattens_alpha(self, engine, tmp_path: Path):
        path = tmp_path / "thumb.jpg"
        engine.save(Image.new("RGBA", (10, 10), (255, 0, 0, 0)), path, quality=80)
        with Image.open(path) as saved:
            assert saved.mode == "RGB"
            assert saved.getpixel((5, 5))[1] > 200

    def test_encode(self, engine):
        data = engine.encode(Image.new("RGB", (10, 10), "red"), quality=30)
        assert data[:2] == b"\xff\xd8"

    def test_unknown_extension(self):
        with pytest.raises(ValueError):
            format_for_path("thumb.unknownext")
        assert format_for_path("a.JPG") == "JPEG"
