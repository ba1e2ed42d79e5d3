"""Immutable settings for the thumbnail cache."""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from platformdirs import user_cache_dir

from .errors import InvalidConfiguration

# XDG-compliant cache directory
# Can be overridden with EASYTHUMB_CACHE_DIR environment variable
DEFAULT_CACHE_ROOT = os.environ.get("EASYTHUMB_CACHE_DIR") or str(
    Path(user_cache_dir("easythumb")) / "thumbnails"
)
DEFAULT_CACHE_URL = "/assets/thumbnails"
DEFAULT_CACHE_ALIAS = "assets/thumbnails"
DEFAULT_QUALITY = 50
MKDIR_MODE = 0o755


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for applications embedding easythumb.

    Uses WARNING for normal runs, DEBUG only if EASYTHUMB_DEBUG is set.

    Args:
        level: Explicit level name, overrides the environment
    """
    if level is None:
        level = "DEBUG" if os.environ.get("EASYTHUMB_DEBUG") else "WARNING"
    logging.basicConfig(level=level)


@dataclass(frozen=True)
class ThumbnailConfig:
    """Settings shared by every lookup of one :class:`Thumbnailer`.

    The bare defaults write into the per-user platformdirs cache, which no
    web server publishes, so ``cache_base_url`` URLs only resolve once
    both fields point at the same served location. Use
    :meth:`for_web_root` to derive a matching pair from one web root.

    Attributes:
        cache_root: Directory where thumbnails are written, usually inside the web root
        cache_base_url: Public URL prefix that mirrors ``cache_root``
        cache_expire: Seconds a thumbnail stays valid (0 = never expire)
        default_quality: Encoder quality used when a request leaves it unset
        background_color: Padding colour for INSET mode (CSS-style hex, ``#`` optional)
        background_alpha: Padding opacity for INSET mode, 0-100
        http_timeout: Seconds passed to the HTTP transport for every request
        aliases: ``@alias`` -> directory mapping used to resolve local sources
    """

    cache_root: Path = Path(DEFAULT_CACHE_ROOT)
    cache_base_url: str = DEFAULT_CACHE_URL
    cache_expire: int = 0
    default_quality: int = DEFAULT_QUALITY
    background_color: str = "FFF"
    background_alpha: int = 100
    http_timeout: float = 5.0
    aliases: dict = field(default_factory=dict)

    def __post_init__(self):
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "cache_root", Path(self.cache_root))
        object.__setattr__(self, "aliases", dict(self.aliases))

        if self.cache_expire < 0:
            raise InvalidConfiguration(f"cache_expire must be >= 0, got {self.cache_expire}")
        if not 0 <= self.default_quality <= 100:
            raise InvalidConfiguration(f"default_quality must be within 0-100, got {self.default_quality}")
        if not 0 <= self.background_alpha <= 100:
            raise InvalidConfiguration(f"background_alpha must be within 0-100, got {self.background_alpha}")
        if self.http_timeout <= 0:
            raise InvalidConfiguration(f"http_timeout must be positive, got {self.http_timeout}")

    @classmethod
    def from_env(cls, **overrides) -> "ThumbnailConfig":
        """Build a config from EASYTHUMB_* environment variables.

        Args:
            **overrides: Field values that take precedence over the environment

        Returns:
            New configuration
        """
        values = {
            "cache_root": Path(os.environ.get("EASYTHUMB_CACHE_DIR") or DEFAULT_CACHE_ROOT),
            "cache_base_url": os.environ.get("EASYTHUMB_CACHE_URL") or DEFAULT_CACHE_URL,
        }
        expire = os.environ.get("EASYTHUMB_CACHE_EXPIRE")
        if expire:
            try:
                values["cache_expire"] = int(expire)
            except ValueError:
                raise InvalidConfiguration(f"EASYTHUMB_CACHE_EXPIRE is not an integer: {expire!r}") from None
        values.update(overrides)
        return cls(**values)

    @classmethod
    def for_web_root(
        cls,
        web_root: str | Path,
        web_url: str = "",
        cache_alias: str = DEFAULT_CACHE_ALIAS,
        **overrides,
    ) -> "ThumbnailConfig":
        """Build a config whose cache lives under a web-served directory.

        The cache directory is ``<web_root>/<cache_alias>`` and is published
        as ``<web_url>/<cache_alias>``. ``@webroot`` is registered as an
        alias so sources may be given as ``@webroot/images/photo.jpg``.

        Args:
            web_root: Filesystem directory served by the web server
            web_url: URL prefix the web root is served from ("" for site root)
            cache_alias: Cache directory relative to the web root
            **overrides: Any other ThumbnailConfig field

        Returns:
            New configuration
        """
        web_root = Path(web_root)
        cache_alias = cache_alias.strip("/")
        aliases = {"@webroot": str(web_root)}
        aliases.update(overrides.pop("aliases", {}))
        return cls(
            cache_root=web_root / cache_alias,
            cache_base_url=f"{web_url.rstrip('/')}/{cache_alias}",
            aliases=aliases,
            **overrides,
        )
