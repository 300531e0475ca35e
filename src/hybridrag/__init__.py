"""
HybridRAG - hybrid semantic/lexical text retrieval.
"""

__version__ = "1.0.0"

# Re-export main components for easy access
from .shared.config.settings import Settings, get_settings
from .shared.exceptions import HybridRagError, ConfigurationError, ValidationError
from .services.embeddings import EmbeddingTokenizer, TransformerEmbeddingProvider
from .services.vector_storage import InMemoryVectorStore, RetrievedChunk, VectorDocument
from .services.retrieval import HybridRetrievalService, QueryResult, RagStats

__all__ = [
    "Settings",
    "get_settings",
    "HybridRagError",
    "ConfigurationError",
    "ValidationError",
    "EmbeddingTokenizer",
    "TransformerEmbeddingProvider",
    "InMemoryVectorStore",
    "RetrievedChunk",
    "VectorDocument",
    "HybridRetrievalService",
    "QueryResult",
    "RagStats",
]
