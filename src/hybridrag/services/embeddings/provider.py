"""
Transformer embedding provider.

Runs tokenized text through an inference backend, pools the per-token
output and L2-normalizes it. When no model can be loaded, or a call fails,
vectors are derived from a SHA-256 hash of the text instead, so callers
always receive a deterministic vector of the configured dimension.
"""

import threading
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ...shared import EmbeddingCache, Settings, get_logger, get_settings
from ...shared.config import PoolingStrategy
from ...shared.exceptions import ConfigurationError, InferenceError, ValidationError
from .backend import InferenceBackend, OnnxInferenceBackend
from .base import EmbeddingProvider
from .model_resolver import resolve_model_info
from .models import EmbeddingMode, EmbeddingModelInfo, TokenizedInput
from .pooling import hash_embedding, l2_normalize, pool_output
from .tokenizer import EmbeddingTokenizer


class TransformerEmbeddingProvider(EmbeddingProvider):
    """
    Embedding provider backed by an ONNX sentence-transformer model.

    Every collaborator can be injected; anything omitted is built from
    settings. The embedding mode is fixed at construction.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 tokenizer: Optional[EmbeddingTokenizer] = None,
                 backend: Optional[InferenceBackend] = None,
                 cache: Optional[EmbeddingCache] = None,
                 model_info: Optional[EmbeddingModelInfo] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

        self.model_info = model_info or resolve_model_info(self.settings)
        self.tokenizer = tokenizer or EmbeddingTokenizer(self.settings, self.model_info)
        self.cache = cache if cache is not None else EmbeddingCache(self.settings.embedding_cache_max_entries)

        self._dimension = self.settings.embedding_dimension
        self._pooling = PoolingStrategy(self.settings.pooling_strategy)
        self._fallback_lock = threading.Lock()
        self._fallback_count = 0

        self.backend = backend if backend is not None else self._load_backend()
        if self.backend is not None:
            self.mode = EmbeddingMode.MODEL
            self.logger.info(
                f"Embedding provider ready (dimension={self._dimension}, pooling={self._pooling.value}, "
                f"tokenizer={self.tokenizer.strategy.value})"
            )
        else:
            self.mode = EmbeddingMode.HASH_FALLBACK
            self.logger.warning(
                f"No embedding model available in {self.model_info.model_directory}; "
                "using hash fallback embeddings (degraded retrieval quality)"
            )
        self.logger.debug(f"Embedding configuration: {self.settings.embedding_config}")

    def _load_backend(self) -> Optional[InferenceBackend]:
        if not self.model_info.has_model_file:
            return None
        try:
            return OnnxInferenceBackend(self.model_info.model_file_path)
        except (ConfigurationError, InferenceError) as e:
            self.logger.warning(f"Could not load embedding model: {e}")
            return None

    # === Properties ===

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_fallback(self) -> bool:
        return self.mode == EmbeddingMode.HASH_FALLBACK

    @property
    def fallback_count(self) -> int:
        """Number of vectors produced by the hash fallback so far."""
        with self._fallback_lock:
            return self._fallback_count

    # === Embedding ===

    def embed_with_cache_info(self, text: str) -> Tuple[np.ndarray, bool]:
        if text is None:
            raise ValidationError("text must not be None")

        if not text.strip():
            return np.zeros(self._dimension, dtype=np.float32), False

        cached = self.cache.get(text)
        if cached is not None:
            return cached, True

        vector = self._compute([text])[0]
        self.cache.set(text, vector)
        return vector, False

    def embed_batch(self, texts: List[str]) -> List[np.ndarray]:
        """
        Embed several texts with one backend call for all cache misses.

        Returns:
            Vectors in input order
        """
        if texts is None:
            raise ValidationError("texts must not be None")

        results: List[Optional[np.ndarray]] = [None] * len(texts)
        pending: Dict[str, List[int]] = {}

        for index, text in enumerate(texts):
            if text is None:
                raise ValidationError("texts must not contain None")
            if not text.strip():
                results[index] = np.zeros(self._dimension, dtype=np.float32)
                continue
            cached = self.cache.get(text)
            if cached is not None:
                results[index] = cached
            else:
                pending.setdefault(text, []).append(index)

        if pending:
            unique_texts = list(pending)
            vectors = self._compute(unique_texts)
            for text, vector in zip(unique_texts, vectors):
                self.cache.set(text, vector)
                for index in pending[text]:
                    results[index] = vector.copy()

        return results

    def _compute(self, texts: List[str]) -> List[np.ndarray]:
        if self.backend is None:
            return [self._hash_fallback(text) for text in texts]

        inputs = self.tokenizer.tokenize_batch(texts, self.model_info.max_token_length)
        vectors: List[Optional[np.ndarray]] = [None] * len(texts)

        runnable = [i for i, item in enumerate(inputs) if not item.is_empty]
        for i in range(len(texts)):
            if inputs[i].is_empty:
                self.logger.debug("Tokenizer produced no ids; using hash fallback")
                vectors[i] = self._hash_fallback(texts[i])

        if runnable:
            try:
                inferred = self._infer([inputs[i] for i in runnable])
                for i, vector in zip(runnable, inferred):
                    vectors[i] = vector
            except Exception as e:
                self.logger.warning(f"Embedding inference failed, using hash fallback for {len(runnable)} text(s): {e}")
                for i in runnable:
                    vectors[i] = self._hash_fallback(texts[i])

        return vectors

    def _infer(self, inputs: List[TokenizedInput]) -> List[np.ndarray]:
        feeds, attention_mask = self._build_feeds(inputs)
        outputs = self.backend.run(feeds)
        if not outputs:
            raise InferenceError("Model returned no outputs")

        first_output = next(iter(outputs.values()))
        pooled = pool_output(first_output, attention_mask, self._pooling)

        if pooled.shape != (len(inputs), self._dimension):
            raise InferenceError(
                f"Model output shape {tuple(pooled.shape)} does not match "
                f"({len(inputs)}, {self._dimension})"
            )

        return [l2_normalize(row) for row in pooled]

    def _build_feeds(self, inputs: List[TokenizedInput]) -> Tuple[Dict[str, np.ndarray], np.ndarray]:
        """Right-pad to the batch max length and map arrays onto input names."""
        batch_size = len(inputs)
        max_len = max(len(item) for item in inputs)

        input_ids = np.zeros((batch_size, max_len), dtype=np.int64)
        attention_mask = np.zeros((batch_size, max_len), dtype=np.int64)
        token_type_ids = np.zeros((batch_size, max_len), dtype=np.int64)

        for row, item in enumerate(inputs):
            length = len(item)
            input_ids[row, :length] = item.input_ids
            attention_mask[row, :length] = item.attention_mask
            if item.token_type_ids:
                token_type_ids[row, :length] = item.token_type_ids

        feeds: Dict[str, np.ndarray] = {}
        for name in self.backend.input_names:
            lowered = name.lower()
            if "attention" in lowered or "mask" in lowered:
                feeds[name] = attention_mask
            elif "token_type" in lowered or "segment" in lowered:
                feeds[name] = token_type_ids
            elif "input" in lowered or "ids" in lowered:
                feeds[name] = input_ids

        return feeds, attention_mask

    def _hash_fallback(self, text: str) -> np.ndarray:
        with self._fallback_lock:
            self._fallback_count += 1
        return hash_embedding(text, self._dimension)

    def get_stats(self) -> Dict[str, Any]:
        """Provider mode, fallback usage and cache statistics."""
        return {
            'mode': self.mode.value,
            'dimension': self._dimension,
            'pooling': self._pooling.value,
            'tokenizer_strategy': self.tokenizer.strategy.value,
            'fallback_count': self.fallback_count,
            'cache': self.cache.get_stats(),
        }
