"""Key-value cache used for the token block-list and verified-payload memo.

TTLs are always expressed in milliseconds. Callers convert at the call site.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Minimal async key-value contract. Expiry is enforced by the store."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_ms: int | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryCacheStore:
    """Process-local cache with per-entry expiry.

    Entries expire lazily on read; ``cleanup_expired`` sweeps the rest and is
    driven by ``cache_cleanup_loop`` from the application lifespan.
    """

    def __init__(self, default_ttl_ms: int | None = None) -> None:
        self._entries: dict[str, tuple[Any, float | None]] = {}  # key -> (value, expires_at)
        self._lock = threading.Lock()
        self._default_ttl_ms = default_ttl_ms

    @staticmethod
    def _now() -> float:
        return time.monotonic()

    async def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._now() >= expires_at:
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: Any, ttl_ms: int | None = None) -> None:
        ttl = ttl_ms if ttl_ms is not None else self._default_ttl_ms
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl_ms must be positive, got {ttl}")
        expires_at = self._now() + ttl / 1000 if ttl is not None else None
        with self._lock:
            self._entries[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def ttl_remaining_ms(self, key: str) -> float | None:
        """Milliseconds until ``key`` expires; None if absent or without expiry."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or entry[1] is None:
            return None
        return max((entry[1] - self._now()) * 1000, 0.0)

    def cleanup_expired(self) -> int:
        """Remove expired entries. Returns count removed."""
        now = self._now()
        with self._lock:
            expired = [
                key
                for key, (_, expires_at) in self._entries.items()
                if expires_at is not None and now >= expires_at
            ]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


async def cache_cleanup_loop(store: InMemoryCacheStore, interval_seconds: float) -> None:
    """Periodically sweep expired cache entries to bound memory."""
    while True:
        try:
            await asyncio.sleep(interval_seconds)
            removed = store.cleanup_expired()
            if removed > 0:
                logger.debug(f"Cache cleanup: removed {removed} expired entries")
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.warning(f"Cache cleanup error: {e}")
