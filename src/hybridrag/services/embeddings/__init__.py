"""
Embedding service for HybridRAG.

Tokenization with graceful degradation (native tokenizer definition,
vocabulary WordPiece, empty), transformer inference through a pluggable
backend, pooling and normalization, and a deterministic hash fallback.
"""

from .base import EmbeddingProvider
from .backend import InferenceBackend, OnnxInferenceBackend
from .model_resolver import resolve_model_info
from .models import (
    EmbeddingMode,
    EmbeddingModelInfo,
    TokenDebugInfo,
    TokenizedInput,
    TokenizerStrategy,
)
from .pooling import hash_embedding, l2_normalize, pool_output
from .provider import TransformerEmbeddingProvider
from .tokenizer import EmbeddingTokenizer
from .wordpiece import Vocabulary, WordPieceEncoder

__all__ = [
    'EmbeddingProvider',
    'TransformerEmbeddingProvider',
    'InferenceBackend',
    'OnnxInferenceBackend',
    'EmbeddingTokenizer',
    'Vocabulary',
    'WordPieceEncoder',
    'resolve_model_info',
    'EmbeddingMode',
    'EmbeddingModelInfo',
    'TokenDebugInfo',
    'TokenizedInput',
    'TokenizerStrategy',
    'hash_embedding',
    'l2_normalize',
    'pool_output',
]
