"""Generic key/value cache consumed by the lookup subsystem.

`CacheService` is the interface; `MemoryCache` is an in-process, thread-safe
implementation with per-entry TTLs. Keys follow a `<prefix>:<parts>`
convention (e.g. ``token:igdb``, ``barcode:012345678905``) so related entries
can be dropped together with `remove_by_pattern`.
"""

import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from common.logger import get_logger

from .cancellation import Clock

logger = get_logger(__name__)


class CacheService(ABC):
    """Abstract cache used by clients, the token service and metadata lookups."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss or expired entry."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store a value; `ttl` None means the cache's default TTL."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass

    @abstractmethod
    def remove_by_pattern(self, pattern: str) -> None:
        """Remove every key matching `pattern` (``*`` wildcard, case-insensitive)."""
        pass


@dataclass
class _Entry:
    value: Any
    expires_at: datetime


def pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a ``*`` wildcard pattern into an anchored case-insensitive regex.

    Example:
        >>> bool(pattern_to_regex("metadata:Books:*").match("metadata:books:genres"))
        True
    """
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE)


class MemoryCache(CacheService):
    """Thread-safe in-memory cache with expiring entries.

    Expired entries are dropped when read and swept on every `set`, so keys
    that are never read again do not accumulate.
    """

    def __init__(
        self,
        enabled: bool = True,
        default_ttl: timedelta = timedelta(minutes=10),
        clock: Clock | None = None,
    ):
        """Initialize cache.

        Args:
            enabled: When False every `get` misses and `set` is a no-op
            default_ttl: TTL for entries stored without one
            clock: Time source (default: real UTC clock)
        """
        self.enabled = enabled
        self.default_ttl = default_ttl
        self.clock = clock or Clock()
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self.clock.now() >= entry.expires_at:
                del self._entries[key]
                return None

        logger.debug(f"Cache hit for key: {key}")
        return entry.value

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        if not self.enabled:
            return

        now = self.clock.now()
        expires_at = now + (ttl if ttl is not None else self.default_ttl)
        with self._lock:
            self._purge_expired(now)
            self._entries[key] = _Entry(value, expires_at)
        logger.debug(f"Cached key {key} until {expires_at.isoformat()}")

    def _purge_expired(self, now: datetime) -> None:
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def remove_by_pattern(self, pattern: str) -> None:
        regex = pattern_to_regex(pattern)
        with self._lock:
            matched = [key for key in self._entries if regex.match(key)]
            for key in matched:
                del self._entries[key]
        logger.debug(f"Removed {len(matched)} cache entries matching pattern: {pattern}")
