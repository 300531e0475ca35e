"""
Cache infrastructure for HybridRAG.
"""

from .embedding_cache import CacheEntry, EmbeddingCache

__all__ = ["CacheEntry", "EmbeddingCache"]
