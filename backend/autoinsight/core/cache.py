"""
Simple in-memory cache for analyzed datasets.

Engines are kept by a hash of their records so a later refresh can reuse
the already computed profile.
"""
import hashlib
import json
import logging
import time
from typing import Optional, Dict, Any, Mapping, Sequence
from dataclasses import dataclass
from threading import Lock

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cache entry with expiration."""
    data: Any
    timestamp: float
    ttl: float  # Time to live in seconds


class SimpleCache:
    """Thread-safe in-memory cache with TTL."""

    def __init__(self, default_ttl: float = 3600):  # 1 hour default
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = Lock()
        self.default_ttl = default_ttl

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if time.time() - entry.timestamp > entry.ttl:
                del self._cache[key]
                logger.debug(f"Cache entry expired: {key[:24]}...")
                return None

            logger.debug(f"Cache hit: {key[:24]}...")
            return entry.data

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        """Set value in cache with optional TTL."""
        with self._lock:
            self._cache[key] = CacheEntry(
                data=value,
                timestamp=time.time(),
                ttl=ttl or self.default_ttl
            )
            logger.debug(f"Cache set: {key[:24]}... (TTL: {ttl or self.default_ttl}s)")

    def clear(self):
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
            logger.info("Cache cleared")

    def _cleanup_expired_locked(self):
        now = time.time()
        expired_keys = [
            key for key, entry in self._cache.items()
            if now - entry.timestamp > entry.ttl
        ]
        for key in expired_keys:
            del self._cache[key]
        if expired_keys:
            logger.debug(f"Cleaned up {len(expired_keys)} expired cache entries")

    def cleanup_expired(self):
        """Remove expired entries."""
        with self._lock:
            self._cleanup_expired_locked()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            self._cleanup_expired_locked()
            return {
                'size': len(self._cache),
                'default_ttl': self.default_ttl
            }


# Global cache of analysis engines
_dataset_cache: Optional[SimpleCache] = None


def get_dataset_cache(default_ttl: float = 3600) -> SimpleCache:
    """Get the dataset cache, creating it with `default_ttl` on first use."""
    global _dataset_cache
    if _dataset_cache is None:
        _dataset_cache = SimpleCache(default_ttl=default_ttl)
    return _dataset_cache


def _json_default(value: Any) -> str:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def generate_dataset_id(rows: Sequence[Mapping[str, Any]]) -> str:
    """Stable id for a dataset based on its records' content."""
    payload = json.dumps(list(rows), sort_keys=True, default=_json_default)
    return hashlib.sha256(payload.encode()).hexdigest()


def dataset_cache_key(dataset_id: str) -> str:
    return f"dataset:{dataset_id}"
