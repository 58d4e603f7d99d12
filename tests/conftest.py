import io
from typing import Any

import httpx
import pytest
import respx
from PIL import Image

from proxysheet.services.image_cache import ImageCache
from proxysheet.services.retry import RetryPolicy

PROXY = "https://proxy.test/.netlify/functions/swu"


def make_png(color: str = "#3366cc", size: tuple[int, int] = (25, 35)) -> bytes:
    """Small in-memory PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class ProxyStub:
    """
    respx side effect emulating the card proxy.

    Dispatches on the query string the way the real proxy does: `path` +
    `q` for search, `path` alone for the catalog, `path` + `format=image` for
    images, `url` for pass-through. Unknown searches return an empty list.
    """

    def __init__(self) -> None:
        self.searches: dict[str, Any] = {}
        self.catalog: Any = []
        self.images: dict[str, Any] = {}
        self.passthrough: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []
        self.router: respx.MockRouter | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params

        if "url" in params:
            return self._respond(self._next(self.passthrough, params["url"]))

        path = params.get("path", "")
        if params.get("format") == "image":
            return self._respond(self._next(self.images, path))
        if path == "/catalog/card-names":
            return self._respond(self.catalog)
        if path == "/cards/search":
            query = params.get("q", "")
            name = query.removeprefix('name:"').removesuffix('"')
            return self._respond(self.searches.get(name, []))
        return httpx.Response(404)

    @staticmethod
    def _next(table: dict[str, Any], key: str) -> Any:
        # A list of image responses is served in order, the last one repeating
        value = table.get(key, 404)
        if isinstance(value, list):
            return value.pop(0) if len(value) > 1 else value[0]
        return value

    @staticmethod
    def _respond(value: Any) -> httpx.Response:
        if isinstance(value, httpx.Response):
            return value
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return httpx.Response(value)
        if isinstance(value, bytes):
            return httpx.Response(200, content=value)
        return httpx.Response(200, json=value)

    def calls_for(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.params.get("path") == path)

    def searched_names(self) -> list[str]:
        return [
            r.url.params["q"].removeprefix('name:"').removesuffix('"')
            for r in self.requests
            if r.url.params.get("path") == "/cards/search"
        ]


@pytest.fixture
def proxy_url() -> str:
    return PROXY


@pytest.fixture
def png_factory():
    """Builds small in-memory PNGs."""
    return make_png


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def image_cache() -> ImageCache:
    """Fresh cache per test (never the process-wide one)."""
    return ImageCache()


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Four attempts, no backoff."""
    return RetryPolicy(max_attempts=4, backoff_step=0.0, timeout=5.0)


@pytest.fixture
def proxy_stub():
    """ProxyStub mounted on every request to the proxy host."""
    stub = ProxyStub()
    with respx.mock(assert_all_called=False) as router:
        router.get(host="proxy.test").mock(side_effect=stub)
        stub.router = router
        yield stub


@pytest.fixture
def sample_card_list() -> str:
    """Pasted list mixing quantity styles, comments and set hints."""
    return """# Aggro list
Leader
1 Darth Vader (SOR) 010
Deck
3 Stormtrooper
TIE Fighter x2
2x Admiral Piett
// sideboard notes
Death Trooper (2)"""
