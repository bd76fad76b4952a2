"""In-process TTL cache for bookmark reads.

Entries are per-process and expire after a TTL. A miss is always safe:
callers fall back to the bookmark store.
"""

import fnmatch
import logging
import time
from typing import Any, Callable, Optional
from urllib.parse import quote

from app.config import get_settings

logger = logging.getLogger(__name__)

# Singleton state
_cache: Optional["BookmarkCache"] = None


def _escape(value: str) -> str:
    # Percent-encodes key delimiters and glob metacharacters
    return quote(value, safe="")


def bookmarks_key(
    user_id: str,
    title: Optional[str] = None,
    tags: Optional[list[str]] = None,
    content_type: Optional[str] = None,
    platform: Optional[str] = None,
) -> str:
    """Key for a user's filtered bookmark list."""
    filters = [
        ("title", _escape(title) if title else None),
        ("tags", ",".join(_escape(t) for t in tags) if tags else None),
        ("type", _escape(content_type) if content_type else None),
        ("platform", _escape(platform) if platform else None),
    ]
    suffix = "&".join(f"{name}={value}" for name, value in filters if value)
    return f"bookmarks:{_escape(user_id)}:{suffix}"


def bookmark_key(user_id: str, bookmark_id: str) -> str:
    return f"bookmark:{_escape(user_id)}:{_escape(bookmark_id)}"


def user_bookmarks_pattern(user_id: str) -> str:
    return f"bookmarks:{_escape(user_id)}:*"


class BookmarkCache:
    """Key/value store with per-entry expiry and glob-pattern invalidation.

    Expired entries are swept on every write. When the cache is still full,
    the oldest entries are evicted first.
    """

    def __init__(
        self,
        default_ttl: int = 900,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            self._entries.pop(key, None)
            logger.debug(f"Cache expired for key: {key}")
            return None
        logger.debug(f"Cache hit for key: {key}")
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return False
        now = self._clock()
        self._purge_expired(now)

        # Re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        while self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Cache evicted key: {oldest}")

        self._entries[key] = (now + ttl, value)
        return True

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_pattern(self, pattern: str) -> int:
        """Drop every key matching a glob ``pattern``; returns how many."""
        matched = fnmatch.filter(list(self._entries), pattern)
        for key in matched:
            self._entries.pop(key, None)
        return len(matched)

    def clear(self) -> None:
        self._entries.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]


def get_bookmark_cache() -> BookmarkCache:
    """Get or create the singleton ``BookmarkCache``."""
    global _cache
    if _cache is None:
        _cache = BookmarkCache(default_ttl=get_settings().bookmark_cache_ttl)
    return _cache


def reset_bookmark_cache() -> None:
    """Reset cache for testing."""
    global _cache
    _cache = None
