"""
In-memory embedding cache for HybridRAG.

Maps exact input text to its computed vector for the lifetime of the
owning provider. Unbounded unless ``max_size`` is given, in which case the
least recently used entry is evicted first.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Optional, Any

import numpy as np


@dataclass
class CacheEntry:
    """Represents a cached vector with access metadata."""

    value: np.ndarray
    created_at: float
    accessed_at: float
    access_count: int = 0

    def touch(self):
        """Update access timestamp and count."""
        self.accessed_at = time.time()
        self.access_count += 1


class EmbeddingCache:
    """Thread-safe text → vector cache."""

    def __init__(self, max_size: Optional[int] = None):
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be positive or None")
        self.max_size = max_size
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[np.ndarray]:
        """Return a copy of the cached vector for ``key`` or None."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            entry.touch()
            self._cache.move_to_end(key)
            self._hits += 1
            return entry.value.copy()

    def set(self, key: str, value: np.ndarray) -> None:
        """Store a read-only copy of ``value`` under ``key``."""
        stored = np.array(value, dtype=np.float32)
        stored.setflags(write=False)
        now = time.time()
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            self._cache[key] = CacheEntry(value=stored, created_at=now, accessed_at=now)

            if self.max_size is not None:
                while len(self._cache) > self.max_size:
                    self._cache.popitem(last=False)
                    self._evictions += 1

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        """Clear all cached values."""
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            return {
                'size': len(self._cache),
                'max_size': self.max_size,
                'hits': self._hits,
                'misses': self._misses,
                'evictions': self._evictions,
            }
