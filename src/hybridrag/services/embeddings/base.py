"""
Abstract embedding provider interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np

from .tokenizer import EmbeddingTokenizer


class EmbeddingProvider(ABC):
    """
    Maps text to fixed-dimension vectors.

    Implementations report whether a vector came from their cache so callers
    can track hit rates.
    """

    tokenizer: Optional[EmbeddingTokenizer] = None

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of every vector this provider returns."""
        pass

    @abstractmethod
    def embed_with_cache_info(self, text: str) -> Tuple[np.ndarray, bool]:
        """
        Embed one text.

        Returns:
            Tuple of (vector, cache_hit)
        """
        pass

    def embed(self, text: str) -> np.ndarray:
        vector, _ = self.embed_with_cache_info(text)
        return vector

    def embed_batch(self, texts: List[str]) -> List[np.ndarray]:
        """Embed several texts; the default is a per-text loop."""
        return [self.embed(text) for text in texts]
