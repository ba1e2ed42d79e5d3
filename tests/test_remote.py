"""Tests for RemoteFetcher."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from easythumb.errors import RemoteUnavailable, SourceNotFound
from easythumb.remote import RemoteFetcher, content_hash

URL = "https://example.com/cat.jpg"


class TestRemoteFetcher:
    def test_fetch_body(self, transport, respond):
        transport.responses[URL] = respond(200, b"image-bytes")
        fetcher = RemoteFetcher(transport, timeout=3.5)
        assert fetcher.fetch_body(URL) == b"image-bytes"
        assert transport.calls == [("get", URL, {"timeout": 3.5})]

    def test_freshness_token_uses_head_only(self, transport, respond):
        transport.responses[URL] = respond(200, b"image-bytes", {"Last-Modified": "Wed, 21 Oct 2015 07:28:00 GMT"})
        fetcher = RemoteFetcher(transport)
        assert fetcher.fetch_freshness_token(URL) == "Wed, 21 Oct 2015 07:28:00 GMT"
        assert transport.count("head") == 1
        assert transport.count("get") == 0

    def test_freshness_token_falls_back_to_etag(self, transport, respond):
        transport.responses[URL] = respond(200, b"", {"ETag": '"abc"'})
        assert RemoteFetcher(transport).fetch_freshness_token(URL) == '"abc"'

    def test_freshness_token_without_headers(self, transport, respond):
        transport.responses[URL] = respond(200, b"")
        assert RemoteFetcher(transport).fetch_freshness_token(URL) == ""

    @pytest.mark.parametrize("status", [301, 404, 500])
    def test_non_success_status(self, transport, respond, status):
        transport.responses[URL] = respond(status, b"")
        fetcher = RemoteFetcher(transport)
        with pytest.raises(RemoteUnavailable):
            fetcher.fetch_body(URL)
        with pytest.raises(RemoteUnavailable):
            fetcher.fetch_freshness_token(URL)

    def test_transport_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(RemoteUnavailable) as excinfo:
            RemoteFetcher(session).fetch_body(URL)
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)

    def test_remote_unavailable_is_source_not_found(self):
        assert issubclass(RemoteUnavailable, SourceNotFound)

    def test_default_transport_is_requests_session(self):
        assert isinstance(RemoteFetcher().transport, requests.Session)

    def test_close_default_session(self):
        fetcher = RemoteFetcher()
        with patch.object(fetcher.transport, "close") as close:
            with fetcher:
                pass
        close.assert_called_once()

    def test_close_leaves_injected_transport_open(self, transport):
        transport.close = MagicMock()
        RemoteFetcher(transport).close()
        transport.close.assert_not_called()


def test_content_hash():
    assert content_hash(b"abc") == "900150983cd24fb0d6963f7d28e17f72"
    assert content_hash(b"abc") != content_hash(b"abd")
