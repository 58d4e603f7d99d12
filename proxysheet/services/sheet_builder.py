"""
Sheet Builder.

Turns ordered CardRequests plus a Geometry into fully resolved Sheets.

INVARIANTS:
1. Placement order is request order; quantity N gives N contiguous slots
2. Every non-trailing slot ends as CardArt or Failure, never unresolved
3. ResolutionError / FetchError become Failure markers, never abort the build
4. Each distinct name (case-insensitive) is loaded once per build; its
   placements share the same CardArt
5. Geometry is never modified by the build
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from proxysheet.config import settings
from proxysheet.models.card import CardRequest, bitmap_cache_key
from proxysheet.models.failure import FetchError, ResolutionError
from proxysheet.models.geometry import Geometry, LayoutConfig
from proxysheet.models.sheet import (
    BuildProgress,
    BuildResult,
    CardArt,
    Failure,
    Placement,
    Sheet,
    SlotContent,
)
from proxysheet.parsers.card_list import expand_requests, normalize_card_list
from proxysheet.services.card_resolver import CardResolver
from proxysheet.services.geometry import compute_geometry
from proxysheet.services.image_cache import ImageCache, get_image_cache
from proxysheet.services.image_fetcher import CardImageLoader, ImageFetcher
from proxysheet.services.proxy_client import ProxyClient
from proxysheet.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[BuildProgress], None]


def chunk(names: list[str], size: int) -> list[list[str]]:
    """Split names into consecutive groups of at most `size`."""
    return [names[i : i + size] for i in range(0, len(names), size)]


class SheetBuilder:
    """
    Builds sheets by loading artwork for every placement.

    Loads run concurrently, bounded by max_concurrency. Completions are
    written by name key, then laid out in request order.
    """

    def __init__(self, loader: CardImageLoader, max_concurrency: int | None = None) -> None:
        """
        Initialize the builder.

        Args:
            loader: Name -> CardArt loader (resolver + fetcher + cache)
            max_concurrency: In-flight load limit. Defaults to settings.max_concurrency.
        """
        self._loader = loader
        self.max_concurrency = max(1, max_concurrency or settings.max_concurrency)

    async def build(
        self,
        requests: list[CardRequest],
        geometry: Geometry,
        progress: ProgressCallback | None = None,
    ) -> list[Sheet]:
        """
        Build fully resolved sheets.

        Args:
            requests: Normalized requests in placement order
            geometry: Precomputed geometry (slots per sheet)
            progress: Called after each distinct name finishes

        Returns:
            One Sheet per rows*cols placements; empty list for no requests.
            Never raises for per-card failures.
        """
        if geometry.overflow is not None:
            logger.warning("Layout overflows the page: %s", geometry.overflow.message)

        names = expand_requests(requests)
        if not names:
            return []

        # First spelling of each key wins; later case variants share its result
        distinct: dict[str, str] = {}
        for name in names:
            distinct.setdefault(bitmap_cache_key(name), name)

        contents = await self._load_all(distinct, progress)

        sheets: list[Sheet] = []
        for sheet_index, group in enumerate(chunk(names, geometry.capacity)):
            placements: list[Placement] = []
            for slot in geometry.slots:
                if slot.index < len(group):
                    name = group[slot.index]
                    content: SlotContent = contents[bitmap_cache_key(name)]
                    placements.append(Placement(slot=slot, name=name, content=content))
                else:
                    placements.append(Placement(slot=slot, name=None, content=None))
            sheets.append(Sheet(index=sheet_index, placements=tuple(placements)))

        failed = sum(1 for content in contents.values() if isinstance(content, Failure))
        logger.info(
            "Built %d sheet(s): %d placements, %d distinct cards, %d failed",
            len(sheets),
            len(names),
            len(distinct),
            failed,
        )
        return sheets

    async def _load_all(
        self,
        distinct: dict[str, str],
        progress: ProgressCallback | None,
    ) -> dict[str, CardArt | Failure]:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        results: dict[str, CardArt | Failure] = {}
        total = len(distinct)

        async def load_one(key: str, name: str) -> None:
            async with semaphore:
                results[key] = await self._load_or_fail(name)
            if progress is not None:
                progress(
                    BuildProgress(
                        completed=len(results),
                        total=total,
                        name=name,
                        failed=isinstance(results[key], Failure),
                    )
                )

        await asyncio.gather(*(load_one(key, name) for key, name in distinct.items()))

        return results

    async def _load_or_fail(self, name: str) -> CardArt | Failure:
        try:
            return await self._loader.load(name)
        except (ResolutionError, FetchError) as e:
            failure = Failure(name=name, error=e)
            logger.warning("Card %r failed: %s", name, failure.reason)
            return failure


async def build_sheets_from_text(
    text: str,
    config: LayoutConfig,
    builder: SheetBuilder,
    progress: ProgressCallback | None = None,
) -> BuildResult:
    """
    Normalize a pasted list, compute geometry, and build sheets.

    Raises:
        ConfigError: Before any network access, if the layout is invalid
    """
    geometry = compute_geometry(config)
    requests = normalize_card_list(text)
    sheets = await builder.build(requests, geometry, progress)
    return BuildResult(sheets=sheets, geometry=geometry)


@asynccontextmanager
async def open_sheet_builder(
    *,
    proxy_url: str | None = None,
    cache: ImageCache | None = None,
    policy: RetryPolicy | None = None,
    max_concurrency: int | None = None,
) -> AsyncIterator[SheetBuilder]:
    """Wire client, resolver, fetcher and loader into a SheetBuilder."""
    cache = cache if cache is not None else get_image_cache()
    async with ProxyClient(proxy_url) as client:
        resolver = CardResolver(client)
        fetcher = ImageFetcher(client, cache, policy)
        loader = CardImageLoader(resolver, fetcher, cache)
        yield SheetBuilder(loader, max_concurrency)
