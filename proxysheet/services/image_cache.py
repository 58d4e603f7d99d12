"""
Image cache service.

Two independent maps with process lifetime and no eviction:

- raw bytes, keyed by the exact fetch URL
- decoded bitmaps, keyed by bitmap_cache_key(requested name)

Values are immutable once stored, so a redundant concurrent store is harmless
(last write wins). Per-key locks let callers coalesce concurrent fetches of
the same URL. Inject one instance per process; tests build their own.
"""

import asyncio
import logging
from dataclasses import dataclass

from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheStats:
    raw_entries: int
    bitmap_entries: int
    raw_bytes: int


class ImageCache:
    """Raw-bytes and decoded-bitmap caches shared by concurrent fetches."""

    def __init__(self) -> None:
        self._raw: dict[str, bytes] = {}
        self._bitmaps: dict[str, Image.Image] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get_raw(self, url: str) -> bytes | None:
        return self._raw.get(url)

    def put_raw(self, url: str, content: bytes) -> None:
        self._raw[url] = content

    def get_bitmap(self, key: str) -> Image.Image | None:
        return self._bitmaps.get(key)

    def put_bitmap(self, key: str, image: Image.Image) -> None:
        self._bitmaps[key] = image

    def has_bitmap(self, key: str) -> bool:
        return key in self._bitmaps

    def lock_for(self, key: str) -> asyncio.Lock:
        """Lock serializing work on one cache key."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def clear(self) -> None:
        self._raw.clear()
        self._bitmaps.clear()
        self._locks.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            raw_entries=len(self._raw),
            bitmap_entries=len(self._bitmaps),
            raw_bytes=sum(len(v) for v in self._raw.values()),
        )


_default_cache: ImageCache | None = None


def get_image_cache() -> ImageCache:
    """Process-wide cache instance."""
    global _default_cache
    if _default_cache is None:
        _default_cache = ImageCache()
        logger.debug("Created process-wide image cache")
    return _default_cache
