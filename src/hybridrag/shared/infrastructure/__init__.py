"""
Shared infrastructure components for HybridRAG.

Provides the infrastructure services used by every retrieval component:
- Embedding cache with optional LRU bound
- Logging configuration
- Metrics collection
"""

from .cache import CacheEntry, EmbeddingCache
from .monitoring import (
    get_logger,
    setup_logging,
    MetricsCollector,
    timed_operation,
)

__all__ = [
    # Cache
    "CacheEntry",
    "EmbeddingCache",

    # Monitoring
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "timed_operation",
]
