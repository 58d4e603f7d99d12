"""
Image fetching with retries and two-level caching.

ImageFetcher turns a ResolvedCard into a decoded Pillow image:

- set/number cards are requested from the proxy in image mode at
  /cards/{SET}/{NNN}
- direct URLs on the upstream domain go through the proxy's pass-through
- any other direct URL is fetched as-is

CardImageLoader puts the resolver in front and short-circuits on the
decoded-bitmap cache, so a cached name costs no network calls at all.
"""

import asyncio
import io
import logging
from collections.abc import Awaitable, Callable

import httpx
from PIL import Image, UnidentifiedImageError

from proxysheet.config import CARD_NUMBER_WIDTH
from proxysheet.models.card import ResolvedCard, bitmap_cache_key
from proxysheet.models.failure import FailureKind, FetchError
from proxysheet.models.sheet import CardArt
from proxysheet.services.card_resolver import CardResolver
from proxysheet.services.image_cache import ImageCache
from proxysheet.services.proxy_client import ProxyClient
from proxysheet.services.retry import (
    RetryExhaustedError,
    RetryPolicy,
    retry_async,
    retry_policy_from_settings,
)

logger = logging.getLogger(__name__)


def card_image_path(set_code: str, number: str) -> str:
    """
    Canonical upstream image path for a set/number pair.

    Set codes are upper-cased; purely numeric numbers are zero-padded
    ("7" -> "007"). Alphanumeric numbers ("T01", "5a") are kept as-is.
    """
    number = number.strip()
    if number.isdigit():
        number = number.zfill(CARD_NUMBER_WIDTH)
    return f"/cards/{set_code.strip().upper()}/{number}"


def decode_image(content: bytes, url: str) -> Image.Image:
    """
    Decode image bytes fully.

    Raises:
        FetchError: If Pillow cannot decode the content
    """
    try:
        image = Image.open(io.BytesIO(content))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise FetchError(url, attempts=1, cause=e, kind=FailureKind.UNDECODABLE_IMAGE) from e
    return image


class ImageFetcher:
    """Downloads and decodes card images; sole writer of the image caches."""

    def __init__(
        self,
        client: ProxyClient,
        cache: ImageCache,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            client: Proxy client used for every request
            cache: Shared image cache
            policy: Retry policy. Defaults to the configured policy.
            sleep: Backoff sleep, injectable for tests
        """
        self._client = client
        self._cache = cache
        self._policy = policy or retry_policy_from_settings()
        self._sleep = sleep

    def fetch_url(self, card: ResolvedCard) -> str:
        """
        The exact URL requested for a card (also its raw-cache key).

        Raises:
            FetchError: If the card's direct image URL cannot be parsed
        """
        if card.set_code and card.number:
            return self._client.image_url(card_image_path(card.set_code, card.number))

        image_ref = card.image_ref or ""
        try:
            upstream = self._client.is_upstream(image_ref)
        except ValueError as e:
            raise FetchError(image_ref, attempts=0, cause=e) from e
        if upstream:
            return self._client.passthrough_url(image_ref)
        return image_ref

    async def fetch_image(self, card: ResolvedCard) -> Image.Image:
        """
        Fetch and decode the artwork for a resolved card.

        The bitmap is cached under the card's requested name, not its URL.

        Raises:
            FetchError: After exhausting retries, or if the body is not an image
        """
        url = self.fetch_url(card)
        image = await self._fetch_decoded(url)
        self._cache.put_bitmap(card.cache_key, image)
        return image

    async def _fetch_decoded(self, url: str) -> Image.Image:
        async with self._cache.lock_for(url):
            content = self._cache.get_raw(url)
            if content is not None:
                logger.debug("Raw cache hit: %s", url)
                return decode_image(content, url)

            try:
                content = await retry_async(
                    lambda: self._client.get_bytes(url),
                    self._policy,
                    sleep=self._sleep,
                    label=f"GET {url}",
                )
            except RetryExhaustedError as e:
                logger.warning("Giving up on %s after %d attempts: %r", url, e.attempts, e.last_error)
                raise FetchError(url, e.attempts, e.last_error) from e.last_error
            except (httpx.InvalidURL, ValueError) as e:
                logger.warning("Cannot request %s: %s", url, e)
                raise FetchError(url, attempts=1, cause=e) from e

            image = decode_image(content, url)
            self._cache.put_raw(url, content)
            return image


class CardImageLoader:
    """Name in, artwork out: bitmap cache, then resolve, then fetch."""

    def __init__(self, resolver: CardResolver, fetcher: ImageFetcher, cache: ImageCache) -> None:
        self._resolver = resolver
        self._fetcher = fetcher
        self._cache = cache

    async def load(self, name: str) -> CardArt:
        """
        Load artwork for a requested card name.

        Raises:
            ResolutionError: If the name cannot be resolved
            FetchError: If the image cannot be downloaded or decoded
        """
        cached = self._cache.get_bitmap(bitmap_cache_key(name))
        if cached is not None:
            logger.debug("Bitmap cache hit for %r", name)
            return CardArt(name=name, image=cached)

        card = await self._resolver.resolve(name)
        image = await self._fetcher.fetch_image(card)
        return CardArt(name=name, image=image, card=card)
