"""On-demand image thumbnails with a sharded filesystem cache."""
from .cache import CacheStore
from .config import ThumbnailConfig, configure_logging
from .errors import (
    CacheWriteFailed,
    InvalidConfiguration,
    RemoteUnavailable,
    SourceNotFound,
    ThumbnailError,
)
from .keys import FreshnessPolicy, ResizeMode, ThumbnailRequest, build_key
from .thumbnail import Thumbnailer, ThumbnailResult

__version__ = "0.1.0"

__all__ = [
    "CacheStore",
    "CacheWriteFailed",
    "FreshnessPolicy",
    "InvalidConfiguration",
    "RemoteUnavailable",
    "ResizeMode",
    "SourceNotFound",
    "ThumbnailConfig",
    "ThumbnailError",
    "ThumbnailRequest",
    "ThumbnailResult",
    "Thumbnailer",
    "build_key",
    "configure_logging",
]
