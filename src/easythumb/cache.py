"""Sharded on-disk thumbnail cache."""
import os
import time
import shutil
import logging
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .config import MKDIR_MODE
from .errors import CacheWriteFailed, ThumbnailError

logger = logging.getLogger(__name__)

SHARD_PREFIX_LENGTH = 2


class CacheStore:
    """Store rendered thumbnails under ``<root>/<key[:2]>/<key><ext>``.

    The file tree is the whole cache state: an entry exists when its file
    exists, and its age is the file's mtime. Nothing is kept in memory.
    """

    def __init__(self, cache_root: str | Path, expire: int = 0):
        """Initialize the cache store.

        Args:
            cache_root: Directory owning all cache entries
            expire: Seconds an entry stays valid (0 = never expire)
        """
        self.cache_root = Path(cache_root)
        self.expire = expire

    def resolve(self, key: str, ext: str) -> Path:
        """Compute the sharded path of a cache entry.

        Args:
            key: Hex cache key
            ext: Entry extension including the dot

        Returns:
            Path of the entry (which may not exist yet)
        """
        return self.cache_root / key[:SHARD_PREFIX_LENGTH] / f"{key}{ext}"

    def lookup(self, path: Path) -> Optional[Path]:
        """Return the entry if it exists and has not expired.

        Expired entries are deleted on the way out.

        Args:
            path: Entry path from :meth:`resolve`

        Returns:
            The path on a hit, None on a miss
        """
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            logger.debug(f"ThumbnailCache miss: {path.name}")
            return None

        # Check if expired
        if self.expire == 0 or time.time() - mtime <= self.expire:
            logger.debug(f"ThumbnailCache hit: {path.name}")
            return path

        logger.debug(f"ThumbnailCache evicted expired entry: {path.name}")
        self._remove(path)
        return None

    def store(self, path: Path, render: Callable[[Path], None]) -> Path:
        """Render a new entry and publish it atomically.

        ``render`` receives a temporary path next to ``path`` carrying the
        same suffix and must write the finished image there. The file is
        then renamed onto ``path``, so readers never see a partial write and
        concurrent writers of the same key simply replace each other.

        Args:
            path: Entry path from :meth:`resolve`
            render: Callback writing the thumbnail to the path it is given

        Returns:
            The published path

        Raises:
            CacheWriteFailed: Shard directory or rendered file could not be written;
                any non-ThumbnailError raised by ``render`` is wrapped in it
        """
        try:
            path.parent.mkdir(mode=MKDIR_MODE, parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=path.suffix, dir=path.parent)
            os.close(fd)
        except OSError as e:
            raise CacheWriteFailed(f"Cannot create cache directory {path.parent}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            render(tmp_path)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except ThumbnailError:
            self._remove(tmp_path)
            raise
        except Exception as e:
            self._remove(tmp_path)
            raise CacheWriteFailed(f"Cannot write thumbnail {path.name}: {e}") from e
        except BaseException:
            self._remove(tmp_path)
            raise

        logger.debug(f"ThumbnailCache set: {path.name}")
        return path

    def wipe(self) -> bool:
        """Delete every entry and shard directory, then recreate the root.

        Deletion is best-effort: files vanishing mid-walk or refusing to go
        away do not abort the wipe.

        Returns:
            True if the empty root directory exists afterwards
        """
        shutil.rmtree(self.cache_root, ignore_errors=True)
        try:
            self.cache_root.mkdir(mode=MKDIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"ThumbnailCache could not recreate {self.cache_root}: {e}")
            return False

        logger.info(f"ThumbnailCache cleared {self.cache_root}")
        return True

    def _remove(self, path: Path) -> None:
        """Remove a file, ignoring failures."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug(f"ThumbnailCache could not remove {path.name}: {e}")
