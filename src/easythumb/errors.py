"""Exception hierarchy for easythumb."""

from __future__ import annotations


class ThumbnailError(Exception):
    """Base class for all errors raised by easythumb.

    ``code`` is the diagnostic number shown in place of the thumbnail when an
    error reaches the markup boundary.
    """

    code: int = 1


class SourceNotFound(ThumbnailError):
    """Raised when the source image cannot be located."""

    code = 404


class RemoteUnavailable(SourceNotFound):
    """Raised when a remote source answers with a non-success status or the
    transport fails."""

    code = 502


class InvalidConfiguration(ThumbnailError):
    """Raised for unknown modes, freshness policies, aliases or bad settings."""

    code = 400


class CacheWriteFailed(ThumbnailError):
    """Raised when a shard directory cannot be created or a thumbnail cannot
    be rendered and saved."""

    code = 500
