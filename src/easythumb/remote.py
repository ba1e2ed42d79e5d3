"""Remote image retrieval over a pluggable HTTP transport."""
import hashlib
import logging
import requests

from .errors import RemoteUnavailable

logger = logging.getLogger(__name__)

FRESHNESS_HEADERS = ("Last-Modified", "ETag")


def content_hash(body: bytes) -> str:
    """Checksum used as the freshness token of a downloaded body."""
    return hashlib.md5(body).hexdigest()


class RemoteFetcher:
    """Fetch remote bodies and freshness tokens.

    The transport is anything with requests-style ``get(url, timeout=...)``
    and ``head(url, timeout=..., allow_redirects=...)`` methods returning
    objects exposing ``status_code``, ``headers`` and ``content``.
    """

    def __init__(self, transport=None, timeout: float = 5.0):
        """Initialize the fetcher.

        Args:
            transport: HTTP client (defaults to a new requests.Session)
            timeout: Seconds passed to the transport on every request
        """
        self._owns_transport = transport is None
        self.transport = requests.Session() if transport is None else transport
        self.timeout = timeout

    def close(self) -> None:
        """Close the default session. Injected transports belong to the caller."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def fetch_body(self, url: str) -> bytes:
        """Download the full body of a remote image.

        Args:
            url: Image URL

        Returns:
            Raw response body
        """
        logger.debug(f"Downloading source from URL: {url[:80]}")
        response = self._request("get", url)
        return response.content

    def fetch_freshness_token(self, url: str) -> str:
        """Ask the server when the resource last changed, without the body.

        Args:
            url: Image URL

        Returns:
            Last-Modified header, ETag when absent, empty string when neither is sent
        """
        response = self._request("head", url, allow_redirects=True)
        for header in FRESHNESS_HEADERS:
            value = response.headers.get(header)
            if value:
                return value
        logger.debug(f"No freshness header for {url[:80]}")
        return ""

    def _request(self, method: str, url: str, **kwargs):
        try:
            response = getattr(self.transport, method)(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise RemoteUnavailable(f"{method.upper()} {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise RemoteUnavailable(f"{method.upper()} {url} returned HTTP {response.status_code}")
        return response
