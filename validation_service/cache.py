"""
Time-bounded memoization of validation results.

Keys are derived from the content being validated (see hashing.py), so two
writes for the same key always carry equivalent results. Entity-scoped keys
start with `assessment/<entity id>/`, which lets one entity be invalidated
by prefix without touching unrelated entries.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from questionnaire_validation import ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    result: ValidationResult
    timestamp: float


class ValidationCache:
    """
    TTL cache of ValidationResult snapshots.

    Scheduled validations run in worker threads, so every access goes
    through one lock.

    Attributes:
        ttl_seconds: Entry lifetime; reads past it are misses and drop the entry.

    Example:
        >>> cache = ValidationCache(ttl_seconds=300)
        >>> cache.put("questionnaire/abc", result)
        >>> cache.get("questionnaire/abc") is result
        True
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def entity_prefix(entity_id: str) -> str:
        """Key prefix shared by every entry belonging to one entity."""
        return f"assessment/{entity_id}/"

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def get(self, key: str) -> Optional[ValidationResult]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                logger.debug(f"Cache miss: {key}")
                return None

            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug(f"Cache entry expired: {key}")
                return None

            self._hits += 1
            logger.debug(f"Cache hit: {key}")
            return entry.result

    def put(self, key: str, result: ValidationResult):
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(result=result, timestamp=now)
            self._cleanup(now)

    def invalidate(self, prefix: str) -> int:
        """Remove every entry whose key starts with `prefix`. Returns the count removed."""
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for key in keys:
                del self._entries[key]
        if keys:
            logger.info(f"Invalidated {len(keys)} cached validation result(s) for '{prefix}'")
        return len(keys)

    def invalidate_entity(self, entity_id: str) -> int:
        return self.invalidate(self.entity_prefix(entity_id))

    def clear(self):
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared validation cache ({count} entries)")

    def _cleanup(self, now: float):
        """Drop expired entries. Caller holds the lock."""
        expired = [k for k, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    @property
    def hit_rate(self) -> float:
        lookups = self._hits + self._misses
        return self._hits / lookups if lookups else 0.0

    def stats(self) -> Dict[str, float]:
        with self._lock:
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hitRate": self.hit_rate,
            }
