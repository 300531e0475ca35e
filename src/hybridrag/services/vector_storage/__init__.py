"""
Vector storage backends for HybridRAG.

Provides the vector store interface, the in-memory exact-search
implementation and the stored/retrieved document models.
"""

from .base import VectorStore, cosine_similarity
from .memory_store import InMemoryVectorStore
from .models import RetrievedChunk, VectorDocument

__all__ = [
    'VectorStore',
    'InMemoryVectorStore',
    'VectorDocument',
    'RetrievedChunk',
    'cosine_similarity',
]
