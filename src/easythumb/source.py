"""Classify and resolve thumbnail sources."""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import urlparse
from PIL import Image

from .errors import InvalidConfiguration, SourceNotFound

logger = logging.getLogger(__name__)

URL_PREFIXES = ("http://", "https://")
DEFAULT_REMOTE_EXT = ".jpg"


class PathResolver(Protocol):
    def resolve(self, alias_or_path: str) -> str: ...


class AliasResolver:
    """Resolve ``@alias/rest/of/path`` references to filesystem paths."""

    def __init__(self, aliases: Optional[dict] = None):
        """Initialize the resolver.

        Args:
            aliases: Mapping of alias (with or without leading ``@``) to directory
        """
        self.aliases: dict[str, str] = {}
        for name, target in (aliases or {}).items():
            if not name.startswith("@"):
                name = "@" + name
            self.aliases[name] = str(target).rstrip("/\\")

    def resolve(self, alias_or_path: str) -> str:
        """Expand a leading alias; plain paths pass through unchanged.

        Args:
            alias_or_path: Path such as ``@webroot/images/a.jpg`` or ``/srv/a.jpg``

        Returns:
            Path with the alias replaced by its directory
        """
        if not alias_or_path.startswith("@"):
            return alias_or_path

        name, sep, rest = alias_or_path.partition("/")
        if name not in self.aliases:
            raise InvalidConfiguration(f"Unknown path alias: {name}")
        target = self.aliases[name]
        return f"{target}/{rest}" if sep else target


@dataclass(frozen=True)
class ResolvedSource:
    """A source after classification and alias resolution.

    Attributes:
        identity: Absolute normalized path, or the URL as given
        ext: Extension of the cache entry, including the dot
        remote: True for http(s) sources
        path: Local file path, None for remote sources
    """

    identity: str
    ext: str
    remote: bool
    path: Optional[Path] = None

    def local_freshness_token(self) -> str:
        """Modification time of the local file in nanoseconds."""
        try:
            return str(os.stat(self.identity).st_mtime_ns)
        except FileNotFoundError:
            raise SourceNotFound(f"File {self.identity} doesn't exist") from None


def is_url(source: str) -> bool:
    """Check whether a source refers to a remote http(s) resource."""
    return source[:8].lower().startswith(URL_PREFIXES)


def remote_extension(url: str) -> str:
    """Entry extension for a URL source.

    The URL path suffix is kept only when Pillow can write that format;
    script or version suffixes (``.php``, ``.2``) fall back to ``.jpg``.
    """
    suffix = Path(urlparse(url).path).suffix
    if Image.registered_extensions().get(suffix.lower()) in Image.SAVE:
        return suffix
    return DEFAULT_REMOTE_EXT


def resolve_source(source: str, path_resolver: PathResolver) -> ResolvedSource:
    """Classify a source and resolve it to a stable identity.

    Args:
        source: Local path, ``@alias`` path or http(s) URL
        path_resolver: Object expanding aliases to filesystem paths

    Returns:
        The resolved source

    Raises:
        SourceNotFound: Local source is missing or not a regular file
    """
    if is_url(source):
        return ResolvedSource(identity=source, ext=remote_extension(source), remote=True)

    filename = os.path.normpath(os.path.abspath(path_resolver.resolve(source)))
    if not os.path.isfile(filename):
        logger.debug(f"Source missing: {filename}")
        raise SourceNotFound(f"File {filename} doesn't exist")

    path = Path(filename)
    return ResolvedSource(identity=filename, ext=path.suffix, remote=False, path=path)
