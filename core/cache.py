# =============================================================================
# core/cache.py - In-process Memory Cache
# =============================================================================
# Small TTL cache for reference data that rarely changes (brands, types).
# Entries expire `ttl_seconds` after they were written.
# =============================================================================

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Hashable


class MemoryCache:
    """Time-based cache shared by all requests in the process."""

    def __init__(self, ttl_seconds: float = 30, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return default
        return value

    def set(self, key: Hashable, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = (self._clock() + ttl, value)

    def remove(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_create(
        self,
        key: Hashable,
        factory: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Return the cached value, or await `factory()` and cache its result."""
        missing = object()
        value = self.get(key, missing)
        if value is missing:
            value = await factory()
            self.set(key, value)
        return value

    def __contains__(self, key: object) -> bool:
        missing = object()
        return self.get(key, missing) is not missing  # type: ignore[arg-type]
