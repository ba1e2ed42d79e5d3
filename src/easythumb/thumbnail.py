"""Create and cache thumbnails on demand."""
import logging
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from PIL import Image

from .cache import CacheStore
from .config import ThumbnailConfig
from .errors import SourceNotFound, ThumbnailError
from .i18n import _
from .imaging import PillowEngine
from .keys import FreshnessPolicy, ThumbnailRequest, build_key
from .markup import img_tag
from .remote import RemoteFetcher, content_hash
from .source import AliasResolver, PathResolver, ResolvedSource, resolve_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThumbnailResult:
    """Outcome of a lookup that must not raise: a URL or the error it hit."""

    url: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Thumbnailer:
    """Public entry point: thumbnails as images, paths, URLs or ``<img>`` tags.

    Every call goes through the filesystem; the instance holds no cache
    state, so several instances (or processes) may share one cache root.
    """

    def __init__(
        self,
        config: Optional[ThumbnailConfig] = None,
        *,
        path_resolver: Optional[PathResolver] = None,
        engine: Optional[PillowEngine] = None,
        fetcher: Optional[RemoteFetcher] = None,
        transport=None,
    ):
        """Initialize the thumbnailer.

        Args:
            config: Cache settings (defaults to ThumbnailConfig.from_env())
            path_resolver: Alias resolver (defaults to the config's aliases)
            engine: Image transform engine (defaults to Pillow)
            fetcher: Remote fetcher (defaults to one built on ``transport``)
            transport: HTTP client for remote sources (defaults to requests.Session)
        """
        self.config = config if config is not None else ThumbnailConfig.from_env()
        self.path_resolver = path_resolver or AliasResolver(self.config.aliases)
        self.engine = engine or PillowEngine(self.config.background_color, self.config.background_alpha)
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or RemoteFetcher(transport, timeout=self.config.http_timeout)
        self.store = CacheStore(self.config.cache_root.absolute(), self.config.cache_expire)

    def close(self) -> None:
        """Release the HTTP session of the default remote fetcher."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def thumbnail(self, request: ThumbnailRequest) -> Image.Image:
        """Create (or reuse) a thumbnail and return it decoded.

        Args:
            request: What to render

        Returns:
            The cached thumbnail as a Pillow image
        """
        return self.engine.decode(self.thumbnail_file(request))

    def thumbnail_file(self, request: ThumbnailRequest) -> Path:
        """Create (or reuse) a thumbnail and return its absolute path.

        Args:
            request: What to render

        Returns:
            Path of the cache entry

        Raises:
            SourceNotFound: Local source missing
            RemoteUnavailable: Remote source unreachable or not a success status
            CacheWriteFailed: Entry could not be rendered or written
        """
        source = resolve_source(request.source, self.path_resolver)

        # Remote body is kept for the render so it is downloaded at most once
        body = None
        if not source.remote:
            token = source.local_freshness_token()
        elif request.freshness is FreshnessPolicy.CONTENT_HASH:
            body = self.fetcher.fetch_body(source.identity)
            token = content_hash(body)
        elif request.freshness is FreshnessPolicy.REMOTE_HEADER:
            token = self.fetcher.fetch_freshness_token(source.identity)
        else:
            token = None

        key = build_key(request, source.identity, token)
        path = self.store.resolve(key, source.ext)
        if self.store.lookup(path) is not None:
            return path

        def render(target: Path) -> None:
            data = body if body is not None else self._load(source)
            image = self.engine.decode(data)
            image = self.engine.resize(image, request.width, request.height, request.mode)
            self.engine.save(image, target, self._quality(request))

        logger.debug(f"Rendering {request.mode.value} {request.width}x{request.height} from {source.identity[:80]}")
        return self.store.store(path, render)

    def thumbnail_file_url(self, request: ThumbnailRequest) -> str:
        """Create (or reuse) a thumbnail and return its public URL.

        Args:
            request: What to render

        Returns:
            ``<cache_base_url>/<shard>/<file>``
        """
        path = self.thumbnail_file(request)
        return f"{self.config.cache_base_url.rstrip('/')}/{path.parent.name}/{path.name}"

    def try_thumbnail_file_url(self, request: ThumbnailRequest) -> ThumbnailResult:
        """Like :meth:`thumbnail_file_url`, but report failures instead of raising."""
        try:
            return ThumbnailResult(url=self.thumbnail_file_url(request))
        except Exception as e:
            return ThumbnailResult(error=e)

    def thumbnail_img(self, request: ThumbnailRequest, options: Optional[dict] = None) -> str:
        """Create (or reuse) a thumbnail and return an ``<img>`` tag for it.

        Never raises: a missing source becomes a short notice, anything else
        becomes ``Error <code>`` and is logged.

        Args:
            request: What to render
            options: Extra tag attributes; width/height default to the request's

        Returns:
            HTML markup or a display string
        """
        result = self.try_thumbnail_file_url(request)
        if not result.ok:
            return self._error_text(result.error, request)

        attributes = {"width": request.width, "height": request.height}
        attributes.update(options or {})
        return img_tag(result.url, attributes)

    def clear_cache(self) -> bool:
        """Remove every cached thumbnail.

        Returns:
            True if the empty cache directory was recreated
        """
        return self.store.wipe()

    def _load(self, source: ResolvedSource) -> bytes | Path:
        if source.remote:
            return self.fetcher.fetch_body(source.identity)
        return source.path

    def _quality(self, request: ThumbnailRequest) -> int:
        return request.quality if request.quality is not None else self.config.default_quality

    @staticmethod
    def _error_text(error: Exception, request: ThumbnailRequest) -> str:
        if isinstance(error, SourceNotFound):
            logger.debug(f"Thumbnail source missing: {error}")
            return _("file_missing")

        code = error.code if isinstance(error, ThumbnailError) else 0
        frames = traceback.extract_tb(error.__traceback__)
        origin = f"{frames[-1].filename}:{frames[-1].lineno}" if frames else "unknown"
        logger.warning(f"Failed to create thumbnail for {request.source[:80]}: {code}\n{error}\n{origin}")
        return _("error", code=code)
