"""Process-local portion cache with per-entry expiration."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# Seconds between sweeps of expired entries
DEFAULT_SWEEP_INTERVAL = 600


class PortionCache(ABC):
    """Key/value store with a TTL per entry."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the live value for ``key`` or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""
        pass


class InMemoryPortionCache(PortionCache):
    """Dict-backed cache. Expired entries are dropped on access and by a
    periodic sweep run from ``set`` at most once per ``sweep_interval``.

    A ``ttl_seconds`` of zero or less stores the entry without expiry.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
    ):
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval
        # key -> (value, expires_at or None)
        self._entries: dict[str, tuple[Any, Optional[float]]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None
        return value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        now = self._clock()
        if now >= self._next_sweep:
            self.purge_expired()
            self._next_sweep = now + self._sweep_interval
        expires_at = now + ttl_seconds if ttl_seconds > 0 else None
        self._entries[key] = (value, expires_at)

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [
            key for key, (_, expires_at) in self._entries.items()
            if expires_at is not None and now >= expires_at
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left for ``key``; None if missing, expired or without expiry."""
        entry = self._entries.get(key)
        if entry is None or entry[1] is None:
            return None
        remaining = entry[1] - self._clock()
        return remaining if remaining > 0 else None

    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._entries)
