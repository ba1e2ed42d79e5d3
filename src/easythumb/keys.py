"""Thumbnail requests and the cache keys derived from them."""
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import InvalidConfiguration


class ResizeMode(str, Enum):
    """How the source is fitted into the requested box."""

    # Scale over the box and crop the excess: exact output size
    OUTBOUND = "outbound"
    # Scale into the box and pad with the background: exact output size
    INSET = "inset"
    # Scale into the box, no padding: one side may come out smaller
    INSET_BOX = "inset_box"


class FreshnessPolicy(str, Enum):
    """How a remote source is checked for changes. Local files always use mtime."""

    NONE = "none"
    CONTENT_HASH = "content_hash"
    REMOTE_HEADER = "remote_header"


def _coerce(enum_cls, value, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidConfiguration(f"Unknown {what}: {value!r}") from None


@dataclass(frozen=True)
class ThumbnailRequest:
    """One thumbnail lookup.

    Attributes:
        source: Local path, ``@alias`` path or http(s) URL
        width: Target width in pixels, None to derive it from the aspect ratio
        height: Target height in pixels, None to derive it from the aspect ratio
        mode: Resize mode (enum or its string value)
        quality: Encoder quality 0-100, None for the configured default
        freshness: Freshness policy for URL sources (enum or its string value)
    """

    source: str
    width: Optional[int] = None
    height: Optional[int] = None
    mode: ResizeMode = ResizeMode.OUTBOUND
    quality: Optional[int] = None
    freshness: FreshnessPolicy = FreshnessPolicy.NONE

    def __post_init__(self):
        object.__setattr__(self, "mode", _coerce(ResizeMode, self.mode, "resize mode"))
        object.__setattr__(self, "freshness", _coerce(FreshnessPolicy, self.freshness, "freshness policy"))

        if self.width is None and self.height is None:
            raise InvalidConfiguration("At least one of width and height is required")
        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value <= 0):
                raise InvalidConfiguration(f"{name} must be a positive integer, got {value!r}")
        if self.quality is not None and not 0 <= self.quality <= 100:
            raise InvalidConfiguration(f"quality must be within 0-100, got {self.quality}")


def build_key(request: ThumbnailRequest, identity: str, freshness_token: Optional[str] = None) -> str:
    """Derive the cache key for a request.

    Identical inputs always give the same key; any change to the size, the
    mode or the freshness token gives a different one, so stale entries are
    simply never looked up again.

    Args:
        request: The thumbnail request
        identity: Absolute source path or URL
        freshness_token: mtime, content hash or header value; None for no check

    Returns:
        32-character hex digest
    """
    parts = [
        identity,
        "" if request.width is None else str(request.width),
        "" if request.height is None else str(request.height),
        request.mode.value,
        freshness_token or "",
    ]
    return hashlib.md5("|".join(parts).encode("utf-8")).hexdigest()
