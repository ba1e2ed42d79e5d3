"""Pillow-backed decode/resize/encode used to render thumbnails."""
import io
import logging
from pathlib import Path
from typing import Optional
from PIL import Image, ImageColor, ImageOps

from .keys import ResizeMode

logger = logging.getLogger(__name__)

RESAMPLE = Image.Resampling.LANCZOS
# Formats that cannot store an alpha channel
OPAQUE_FORMATS = {"JPEG", "BMP"}


def format_for_path(path: str | Path) -> str:
    """Pillow format name for a file suffix, e.g. ``.jpg`` -> ``JPEG``."""
    suffix = Path(path).suffix.lower()
    fmt = Image.registered_extensions().get(suffix)
    if fmt is None:
        raise ValueError(f"Unsupported thumbnail extension: {suffix or '(none)'}")
    return fmt


def target_size(source_size: tuple[int, int], width: Optional[int], height: Optional[int]) -> tuple[int, int]:
    """Fill in an unspecified dimension from the source aspect ratio.

    Args:
        source_size: (width, height) of the decoded source
        width: Requested width or None
        height: Requested height or None

    Returns:
        Concrete (width, height), each at least 1
    """
    src_w, src_h = source_size
    if width is None and height is None:
        return src_w, src_h
    if width is None:
        width = max(1, round(height * src_w / src_h))
    elif height is None:
        height = max(1, round(width * src_h / src_w))
    return width, height


class PillowEngine:
    """Image transform engine built on Pillow."""

    def __init__(self, background_color: str = "FFF", background_alpha: int = 100):
        """Initialize the engine.

        Args:
            background_color: INSET padding colour, hex with or without ``#``
            background_alpha: INSET padding opacity, 0 (transparent) to 100 (opaque)
        """
        color = background_color if background_color.startswith("#") else f"#{background_color}"
        self.background_rgb = ImageColor.getrgb(color)[:3]
        self.background_alpha = round(background_alpha * 255 / 100)

    def decode(self, source: bytes | str | Path) -> Image.Image:
        """Load an image fully into memory, applying EXIF orientation.

        Args:
            source: Raw image bytes or a file path

        Returns:
            Decoded image, detached from any open file
        """
        fp = io.BytesIO(source) if isinstance(source, bytes) else source
        with Image.open(fp) as image:
            image.load()
            transposed = ImageOps.exif_transpose(image)
            return transposed if transposed is not None else image.copy()

    def resize(self, image: Image.Image, width: Optional[int], height: Optional[int], mode: ResizeMode) -> Image.Image:
        """Fit an image into the requested box.

        Args:
            image: Decoded source
            width: Target width, None to derive from the aspect ratio
            height: Target height, None to derive from the aspect ratio
            mode: OUTBOUND crops to the exact box, INSET pads to it,
                INSET_BOX fits inside it without padding

        Returns:
            Resized image
        """
        size = target_size(image.size, width, height)

        if mode is ResizeMode.OUTBOUND:
            return ImageOps.fit(image, size, method=RESAMPLE)

        fitted = ImageOps.contain(image, size, method=RESAMPLE)
        if mode is ResizeMode.INSET_BOX:
            return fitted
        return self._pad(fitted, size)

    def encode(self, image: Image.Image, quality: int, fmt: str = "JPEG") -> bytes:
        """Serialize an image.

        Args:
            image: Image to encode
            quality: Encoder quality 0-100 (ignored by lossless formats)
            fmt: Pillow format name

        Returns:
            Encoded bytes
        """
        buffer = io.BytesIO()
        self._prepare(image, fmt).save(buffer, format=fmt, quality=quality)
        return buffer.getvalue()

    def save(self, image: Image.Image, path: str | Path, quality: int) -> None:
        """Write an image to disk in the format implied by its suffix."""
        fmt = format_for_path(path)
        self._prepare(image, fmt).save(path, format=fmt, quality=quality)

    def _pad(self, image: Image.Image, size: tuple[int, int]) -> Image.Image:
        """Center an image on a background canvas of exactly ``size``."""
        if self.background_alpha < 255 or image.mode in ("RGBA", "LA", "P"):
            image = image.convert("RGBA")
            color = (*self.background_rgb, self.background_alpha)
        else:
            image = image.convert("RGB")
            color = self.background_rgb

        canvas = Image.new(image.mode, size, color)
        offset = ((size[0] - image.width) // 2, (size[1] - image.height) // 2)
        canvas.paste(image, offset)
        return canvas

    def _prepare(self, image: Image.Image, fmt: str) -> Image.Image:
        if fmt in OPAQUE_FORMATS and image.mode not in ("RGB", "L"):
            # Flatten onto the background instead of letting alpha turn black
            if image.mode in ("RGBA", "LA", "P"):
                rgba = image.convert("RGBA")
                flat = Image.new("RGB", rgba.size, self.background_rgb)
                flat.paste(rgba, mask=rgba.getchannel("A"))
                return flat
            return image.convert("RGB")
        return image
