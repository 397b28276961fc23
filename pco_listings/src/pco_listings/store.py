"""
Key-value stores with expiry for rendered listings.

The host only needs get / set-with-TTL; `delete` and `clear` exist for
cache invalidation from the CLI.
"""

import time
from typing import Callable, Optional, Protocol

from .config import Settings
from .db import SQLStore
from .logging_conf import get_logger

logger = get_logger(__name__)


class CacheStore(Protocol):
    """Interface every cache backend implements."""

    # True when calls do I/O; the service then runs them in a worker thread
    blocking: bool

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def clear(self) -> int:
        ...


class MemoryStore:
    """
    In-process TTL store.

    Each server worker holds its own copy, so a listing may be fetched once
    per worker. Use SQLStore to share a cache between processes.
    """

    blocking = False

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (self._clock() + ttl_seconds, value)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> int:
        removed = len(self._entries)
        self._entries.clear()
        return removed

    def __len__(self) -> int:
        return len(self._entries)


def build_store(settings: Settings) -> CacheStore:
    """Pick the cache backend from settings: SQL when DATABASE_URL is set."""
    if settings.database_url:
        return SQLStore(settings.database_url)
    logger.debug("using_memory_cache")
    return MemoryStore()
