import io
import sys
from pathlib import Path

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from easythumb import ThumbnailConfig  # noqa: E402


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b"", headers: dict | None = None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}


class FakeTransport:
    """requests.Session stand-in serving canned responses and counting calls."""

    def __init__(self, responses: dict | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, str, dict]] = []

    def get(self, url, **kwargs):
        self.calls.append(("get", url, kwargs))
        return self.responses.get(url, FakeResponse(404))

    def head(self, url, **kwargs):
        self.calls.append(("head", url, kwargs))
        response = self.responses.get(url, FakeResponse(404))
        return FakeResponse(response.status_code, b"", response.headers)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


def image_bytes(size=(100, 100), color=(200, 30, 30), fmt="JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image(tmp_path: Path):
    def _make(name: str = "photo.jpg", size=(100, 100), color=(200, 30, 30)) -> Path:
        path = tmp_path / "images" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path)
        return path

    return _make


@pytest.fixture
def config(tmp_path: Path) -> ThumbnailConfig:
    return ThumbnailConfig(cache_root=tmp_path / "cache", cache_base_url="/assets/thumbnails")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def respond():
    """Build a FakeResponse: respond(200, body, {"Last-Modified": ...})."""
    return FakeResponse


@pytest.fixture
def jpeg_bytes():
    return image_bytes


@pytest.fixture(autouse=True)
def english_messages():
    from easythumb import i18n

    previous = i18n._current_lang
    i18n.set_language("en")
    yield
    i18n._current_lang = previous
