"""
In-memory vector storage.

Exact cosine search by linear scan, O(N·D) per query. Fine for small and
medium corpora; larger ones need an approximate index behind the same
interface.
"""

import threading
from typing import Any, Dict, List, Optional

import numpy as np

from ...shared import get_logger
from ...shared.exceptions import ValidationError
from .base import VectorStore, cosine_similarity
from .models import RetrievedChunk, VectorDocument


class InMemoryVectorStore(VectorStore):
    """
    Thread-safe in-memory vector store.

    Writes are atomic per document. Searches score a snapshot copied under
    the lock, so concurrent upserts may or may not be visible to a search
    already in flight.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()
        self._documents: Dict[str, VectorDocument] = {}

    def upsert(self, document: VectorDocument) -> None:
        if document is None:
            raise ValidationError("document must not be None")

        with self._lock:
            replaced = document.id in self._documents
            self._documents[document.id] = document

        self.logger.debug(f"{'Replaced' if replaced else 'Added'} document: {document.id}")

    def search(self,
               query_vector: np.ndarray,
               top_k: int,
               min_score: float) -> List[RetrievedChunk]:
        if query_vector is None:
            raise ValidationError("query_vector must not be None")
        if top_k <= 0:
            return []

        query = np.asarray(query_vector, dtype=np.float32)

        with self._lock:
            snapshot = list(self._documents.values())

        scored = []
        for document in snapshot:
            score = cosine_similarity(query, document.embedding)
            if score >= min_score:
                scored.append((score, document))

        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            RetrievedChunk(id=document.id, content=document.content, score=score)
            for score, document in scored[:top_k]
        ]

    def get(self, document_id: str) -> Optional[VectorDocument]:
        with self._lock:
            return self._documents.get(document_id)

    def count(self) -> int:
        with self._lock:
            return len(self._documents)

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()
        self.logger.info("Cleared in-memory vector store")

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        with self._lock:
            documents = list(self._documents.values())

        dimensions = sorted({doc.embedding.shape[0] for doc in documents})
        return {
            'store_type': 'in_memory',
            'document_count': len(documents),
            'dimensions': dimensions,
            'total_characters': sum(len(doc.content) for doc in documents),
        }
