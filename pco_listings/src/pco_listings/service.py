"""
Listing pipeline: resolve endpoint, check cache, fetch, render, store.
"""

import hashlib
import math
import re
from functools import lru_cache
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool

from .client import PlanningCenterClient
from .config import get_settings
from .endpoints import normalize_type, resolve_endpoint
from .errors import PlanningCenterError
from .logging_conf import get_logger
from .renderer import (
    DEFAULT_DATE_FORMAT,
    LOAD_ERROR_HTML,
    UNSUPPORTED_TYPE_HTML,
    render_items,
)
from .store import CacheStore, MemoryStore, build_store

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "pcwp_cache_"
DEFAULT_CACHE_TTL = 3600

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_limit(value: Any) -> int:
    """
    Turn a user-supplied limit into a page size of at least 1.

    Strings are read up to the first non-digit ("10abc" -> 10); anything
    unreadable counts as 0 and is clamped to 1.
    """
    if isinstance(value, bool):
        number = int(value)
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float):
        number = int(value) if math.isfinite(value) else 0
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        number = int(match.group(1)) if match else 0
    else:
        number = 0
    return max(1, number)


def cache_key(content_type: str, limit: int) -> str:
    """Build the cache key for a type/limit pair."""
    digest = hashlib.md5(f"{content_type}_{limit}".encode()).hexdigest()
    return CACHE_KEY_PREFIX + digest


class ListingService:
    """
    Renders Planning Center listings with a short-lived cache.

    Only successful fetches are cached; a failed fetch is retried on the
    next request.
    """

    def __init__(
        self,
        client: PlanningCenterClient,
        store: Optional[CacheStore] = None,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        date_format: str = DEFAULT_DATE_FORMAT,
    ):
        self.client = client
        self.store = store if store is not None else MemoryStore()
        self.cache_ttl = cache_ttl
        self.date_format = date_format

    async def render_listing(self, content_type: Any, limit: Any) -> str:
        """
        Get the HTML fragment for a listing.

        Args:
            content_type: Type keyword (events, sermons, groups), any case
            limit: Requested number of items, coerced to an int >= 1

        Returns:
            The rendered list, or a fixed message paragraph when the type is
            unsupported or Planning Center could not be reached
        """
        normalized = normalize_type(content_type)
        page_size = coerce_limit(limit)

        endpoint = resolve_endpoint(normalized)
        if endpoint is None:
            logger.info("unsupported_listing_type", content_type=content_type)
            return UNSUPPORTED_TYPE_HTML

        key = cache_key(normalized, page_size)
        cached = await self._store_get(key)
        if cached is not None:
            logger.debug("listing_cache_hit", content_type=normalized, limit=page_size)
            return cached

        try:
            items = await self.client.fetch(endpoint, page_size)
        except PlanningCenterError as e:
            logger.warning(
                "planning_center_fetch_failed",
                content_type=normalized,
                code=e.code,
                error=e.message,
            )
            return LOAD_ERROR_HTML

        output = render_items(normalized, items, self.date_format)
        await self._store_set(key, output, self.cache_ttl)
        logger.info(
            "listing_rendered",
            content_type=normalized,
            limit=page_size,
            items=len(items),
        )
        return output

    async def _store_get(self, key: str) -> Optional[str]:
        if getattr(self.store, "blocking", False):
            return await run_in_threadpool(self.store.get, key)
        return self.store.get(key)

    async def _store_set(self, key: str, value: str, ttl_seconds: int) -> None:
        if getattr(self.store, "blocking", False):
            await run_in_threadpool(self.store.set, key, value, ttl_seconds)
        else:
            self.store.set(key, value, ttl_seconds)

    async def render_events(self, limit: Any) -> str:
        return await self.render_listing("events", limit)

    async def render_sermons(self, limit: Any) -> str:
        return await self.render_listing("sermons", limit)

    async def render_groups(self, limit: Any) -> str:
        return await self.render_listing("groups", limit)

    def invalidate(self, content_type: Any, limit: Any) -> None:
        """Drop the cached fragment for one type/limit pair."""
        self.store.delete(cache_key(normalize_type(content_type), coerce_limit(limit)))


@lru_cache
def get_listing_service() -> ListingService:
    """Get the settings-driven service instance."""
    settings = get_settings()
    client = PlanningCenterClient(
        app_id=settings.pco_app_id,
        app_secret=settings.pco_app_secret,
        timeout=settings.request_timeout,
    )
    return ListingService(
        client=client,
        store=build_store(settings),
        cache_ttl=settings.cache_ttl_seconds,
        date_format=settings.date_format,
    )
