"""
Card Resolution Service.

Maps a free-text card name to a ResolvedCard via SWU-DB search.

Order of attempts:
1. Exact search with the literal name as a quoted name filter
2. Catalog match (case-insensitive exact, then substring), searched again
3. Title-cased guess of the requested name, searched again

Pure metadata: this module never downloads or decodes images.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx
from pydantic import ValidationError

from proxysheet.models.card import ResolvedCard, bitmap_cache_key
from proxysheet.models.card_record import CardRecord
from proxysheet.models.failure import ResolutionError
from proxysheet.services.proxy_client import CATALOG_PATH, SEARCH_PATH, ProxyClient, unwrap_list

logger = logging.getLogger(__name__)

CATALOG_ENVELOPE_KEYS = ("data", "values")
CATALOG_NAME_KEYS = ("name", "Name", "title")


def title_case(name: str) -> str:
    """Upper-case the first letter of every word, lower-case the rest."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split(" "))


def secure_url(url: str) -> str:
    """Normalize http:// and scheme-relative URLs to https://."""
    url = url.strip()
    if url.startswith("//"):
        return "https:" + url
    parts = urlsplit(url)
    if parts.scheme == "http":
        return urlunsplit(("https", *parts[1:]))
    return url


def match_catalog(name: str, catalog: list[str]) -> str | None:
    """
    Find the best catalog entry for a name.

    Returns the case-insensitive exact match if there is one, otherwise the
    first entry containing the name as a substring, otherwise None.
    """
    needle = name.lower().strip()
    if not needle:
        return None
    for entry in catalog:
        if entry.lower() == needle:
            return entry
    for entry in catalog:
        if needle in entry.lower():
            return entry
    return None


def _catalog_names(payload: Any) -> list[str]:
    names: list[str] = []
    for entry in unwrap_list(payload, CATALOG_ENVELOPE_KEYS):
        if isinstance(entry, str):
            names.append(entry)
        elif isinstance(entry, dict):
            for key in CATALOG_NAME_KEYS:
                value = entry.get(key)
                if isinstance(value, str) and value:
                    names.append(value)
                    break
    return names


class CardResolver:
    """
    Resolves card names through the SWU-DB proxy.

    The card-name catalog is fetched at most once per resolver (successful
    fetches only). Results are memoized per resolver by case-insensitive name.
    """

    def __init__(self, client: ProxyClient) -> None:
        self._client = client
        self._catalog: list[str] | None = None
        self._catalog_lock = asyncio.Lock()
        self._resolved: dict[str, ResolvedCard] = {}

    async def resolve(self, name: str) -> ResolvedCard:
        """
        Resolve a card name.

        Args:
            name: Requested card name, as typed

        Returns:
            ResolvedCard addressed by set/number or by direct image URL

        Raises:
            ResolutionError: If no strategy yields a usable hit
        """
        key = bitmap_cache_key(name)
        memo = self._resolved.get(key)
        if memo is not None:
            return memo

        hit = await self._search(name)
        if hit is None:
            candidate = await self._fallback_candidate(name)
            logger.info("No exact match for %r; retrying search as %r", name, candidate)
            hit = await self._search(candidate)

        if hit is None:
            raise ResolutionError(name, detail="no search hit after catalog fallback")

        card = self._to_resolved(name, hit)
        self._resolved[key] = card
        return card

    async def _search(self, name: str) -> dict[str, Any] | None:
        """First search hit for an exact name, or None."""
        try:
            payload = await self._client.get_json(SEARCH_PATH, q=f'name:"{name}"')
        except httpx.HTTPError as e:
            logger.warning("Search for %r failed: %s", name, e)
            return None
        except ValueError as e:
            logger.warning("Search for %r returned invalid JSON: %s", name, e)
            return None

        hits = unwrap_list(payload)
        if hits and isinstance(hits[0], dict):
            return hits[0]
        return None

    async def _fallback_candidate(self, name: str) -> str:
        catalog = await self._get_catalog()
        return match_catalog(name, catalog) or title_case(name)

    async def _get_catalog(self) -> list[str]:
        async with self._catalog_lock:
            if self._catalog is not None:
                return self._catalog
            try:
                payload = await self._client.get_json(CATALOG_PATH)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Card-name catalog unavailable: %s", e)
                return []
            self._catalog = _catalog_names(payload)
            logger.info("Loaded card-name catalog (%d names)", len(self._catalog))
            return self._catalog

    def _to_resolved(self, name: str, hit: dict[str, Any]) -> ResolvedCard:
        try:
            record = CardRecord.from_hit(hit)
        except ValidationError as e:
            raise ResolutionError(name, detail=f"unreadable search hit: {e}") from e

        display_name = record.name or name

        if record.has_set_number:
            return ResolvedCard(
                display_name=display_name,
                query=name,
                set_code=record.set_code,
                number=record.number,
            )

        if record.image_url:
            try:
                image_ref = secure_url(record.image_url)
            except ValueError as e:
                raise ResolutionError(name, detail=f"malformed image URL: {e}") from e
            return ResolvedCard(display_name=display_name, query=name, image_ref=image_ref)

        raise ResolutionError(name, detail="search hit has no set/number and no image URL")
