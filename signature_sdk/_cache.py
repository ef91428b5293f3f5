from __future__ import annotations

import logging
import re
import time
import typing as tp
from collections import OrderedDict
from dataclasses import dataclass

from ._models import CacheStats

__all__ = ["CacheEntry", "EtagCache"]

logger = logging.getLogger("signature_sdk.cache")

DEFAULT_TTL = 300.0
DEFAULT_MAX_SIZE = 500


@dataclass
class CacheEntry:
    key: str
    etag: str
    body: tp.Any
    expires_at: float
    last_modified: tp.Optional[str] = None

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class EtagCache:
    """
    In-memory table of GET responses keyed by request path.

    Each entry keeps the server validator (``ETag``) so the next request for
    the same path can be sent conditionally. Entries expire after the
    response's ``max-age`` (or ``default_ttl`` seconds) and, once the table
    holds ``max_size`` entries, the oldest inserted entry is evicted to make
    room for a new key.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: tp.Callable[[], float] = time.time,
    ) -> None:
        if max_size <= 0:
            raise ValueError("Capacity must be positive")

        self.default_ttl = default_ttl
        self.max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, key: str) -> tp.Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for {key}")
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug(f"Expired entry for {key}")
            return None

        logger.debug(f"Cache hit for {key}: {entry.etag}")
        return entry

    def set(
        self,
        key: str,
        etag: str,
        body: tp.Any,
        max_age: tp.Optional[float] = None,
        last_modified: tp.Optional[str] = None,
    ) -> CacheEntry:
        ttl = max_age if max_age is not None else self.default_ttl

        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            evicted_key, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted oldest entry: {evicted_key}")

        entry = CacheEntry(
            key=key,
            etag=etag,
            body=body,
            expires_at=self._clock() + ttl,
            last_modified=last_modified,
        )
        self._entries[key] = entry
        logger.debug(f"Cached {key} with ETag {etag} (expires in {ttl}s)")
        return entry

    def invalidate(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            logger.debug(f"Invalidated {key}")

    def invalidate_pattern(self, pattern: tp.Union[str, tp.Pattern[str]]) -> int:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        matching = [key for key in self._entries if regex.search(key)]
        for key in matching:
            del self._entries[key]

        logger.debug(f"Invalidated {len(matching)} entries matching {regex.pattern}")
        return len(matching)

    def clear(self) -> None:
        size = len(self._entries)
        self._entries.clear()
        logger.debug(f"Cleared {size} entries")

    def cleanup(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug(f"Cleaned up {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> CacheStats:
        return CacheStats(size=len(self._entries), max_size=self.max_size)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> tp.Iterator[str]:
        yield from list(self._entries)
