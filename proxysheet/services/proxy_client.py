"""
Client for the SWU-DB CORS proxy.

The proxy is a single endpoint:

    ?path=/cards/search&q=...        JSON metadata, forwarded to api.swu-db.com
    ?path=/cards/SOR/010&format=image  card image as if requested from the CDN
    ?url=https://cdn.swu-db.com/...  opaque pass-through of an allow-listed host

Responses are either raw bytes or, when the function's base64 body is not
decoded by the host, base64 text. JSON list payloads arrive as a bare array
or wrapped in {"data": [...]}.
"""

import base64
import binascii
import logging
from types import TracebackType
from typing import Any
from urllib.parse import urlsplit

import httpx

from proxysheet.config import settings

logger = logging.getLogger(__name__)

SEARCH_PATH = "/cards/search"
CATALOG_PATH = "/catalog/card-names"

# Leading bytes of the formats Pillow is expected to decode
IMAGE_SIGNATURES = (
    b"\x89PNG\r\n\x1a\n",
    b"\xff\xd8\xff",
    b"GIF87a",
    b"GIF89a",
    b"RIFF",
    b"BM",
    b"II*\x00",
    b"MM\x00*",
)


def unwrap_list(payload: Any, keys: tuple[str, ...] = ("data",)) -> list[Any]:
    """
    Extract the result array from a variable response envelope.

    Args:
        payload: Parsed JSON
        keys: Envelope keys to check, in order

    Returns:
        The array, or an empty list if none is found
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


def looks_like_image(data: bytes) -> bool:
    """True if data starts with a known image signature (ISO-BMFF by its ftyp box)."""
    return data.startswith(IMAGE_SIGNATURES) or data[4:8] == b"ftyp"


def decode_image_body(content: bytes) -> bytes:
    """
    Return raw image bytes, decoding base64 bodies passed through as text.

    The proxy labels base64 bodies with the image's own content type, so only
    the payload can tell them apart: a body is decoded only when the result is
    itself an image. Anything else is returned untouched.
    """
    if looks_like_image(content):
        return content
    try:
        decoded = base64.b64decode(b"".join(content.split()), validate=True)
    except (binascii.Error, ValueError):
        return content
    return decoded if looks_like_image(decoded) else content


def host_in_domain(url: str, domain: str) -> bool:
    """True if url's host is `domain` or one of its subdomains."""
    host = (urlsplit(url).hostname or "").lower()
    domain = domain.lower().lstrip(".")
    return host == domain or host.endswith("." + domain)


class ProxyClient:
    """
    Thin async wrapper over the proxy endpoint.

    Owns an httpx.AsyncClient unless one is supplied. Use as an async context
    manager, or call aclose().
    """

    def __init__(
        self,
        proxy_url: str | None = None,
        *,
        upstream_domain: str | None = None,
        client: httpx.AsyncClient | None = None,
        metadata_timeout: float | None = None,
    ) -> None:
        """
        Initialize the proxy client.

        Args:
            proxy_url: Proxy endpoint. Defaults to settings.proxy_url.
            upstream_domain: Domain whose URLs must go through the proxy.
                Defaults to settings.upstream_domain.
            client: Shared httpx client. Created (and owned) if omitted.
            metadata_timeout: Timeout for JSON requests, in seconds.
        """
        self.proxy_url = proxy_url or settings.proxy_url
        self.upstream_domain = upstream_domain or settings.upstream_domain
        self.metadata_timeout = metadata_timeout or settings.metadata_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)

    async def __aenter__(self) -> "ProxyClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # -------------------------------------------------------------------------
    # URL building
    # -------------------------------------------------------------------------

    def api_url(self, path: str, **params: str) -> str:
        """Proxy URL for an upstream API path with forwarded query params."""
        return str(httpx.URL(self.proxy_url, params={"path": path, **params}))

    def image_url(self, image_path: str) -> str:
        """Proxy URL returning the image for an upstream card path."""
        return self.api_url(image_path, format="image")

    def passthrough_url(self, url: str) -> str:
        """Proxy URL fetching an external URL on our behalf."""
        return str(httpx.URL(self.proxy_url, params={"url": url}))

    def is_upstream(self, url: str) -> bool:
        return host_in_domain(url, self.upstream_domain)

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def get_json(self, path: str, **params: str) -> Any:
        """
        Fetch JSON metadata from the upstream API via the proxy.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: If the body is not JSON
        """
        url = self.api_url(path, **params)
        logger.debug("GET %s", url)
        response = await self._client.get(url, timeout=self.metadata_timeout)
        response.raise_for_status()
        return response.json()

    async def get_bytes(self, url: str) -> bytes:
        """
        Fetch binary content (image) from any URL.

        No timeout is set here; callers enforce one per attempt.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
        """
        logger.debug("GET %s", url)
        response = await self._client.get(url, timeout=None)
        response.raise_for_status()
        return decode_image_body(response.content)
