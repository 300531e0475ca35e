"""
Base vector storage interface.

Defines the abstract interface for vector storage backends supporting
upsert-by-id and top-K similarity search.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import numpy as np

from .models import RetrievedChunk, VectorDocument

NORM_EPSILON = 1e-12


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when the lengths differ or either vector has (near-)zero norm.
    """
    if a.shape != b.shape:
        return 0.0

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a < NORM_EPSILON or norm_b < NORM_EPSILON:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


class VectorStore(ABC):
    """
    Abstract base class for vector storage backends.
    """

    @abstractmethod
    def upsert(self, document: VectorDocument) -> None:
        """
        Insert a document, replacing any stored document with the same id.

        Args:
            document: Document with embedding
        """
        pass

    @abstractmethod
    def search(self,
               query_vector: np.ndarray,
               top_k: int,
               min_score: float) -> List[RetrievedChunk]:
        """
        Find the most similar stored documents.

        Args:
            query_vector: Query embedding
            top_k: Maximum number of results
            min_score: Minimum similarity score

        Returns:
            Results sorted by descending score, each scoring at least ``min_score``
        """
        pass

    @abstractmethod
    def get(self, document_id: str) -> Optional[VectorDocument]:
        """Get a stored document by id."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored documents."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored document."""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        pass
