"""
Embedding data models for HybridRAG.

Defines tokenizer output, tokenizer/embedding strategy tags and the
resolved model description.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import Field

from ...shared.config import PoolingStrategy
from ...shared.exceptions import TokenizationError
from ...shared.models import BaseModel


class TokenizerStrategy(str, Enum):
    """Tokenization strategies, in order of preference."""
    NATIVE = "native"
    WORDPIECE = "wordpiece"
    EMPTY = "empty"


class EmbeddingMode(str, Enum):
    """How the provider produces vectors."""
    MODEL = "model"
    HASH_FALLBACK = "hash_fallback"


@dataclass(frozen=True)
class TokenizedInput:
    """
    Tokenizer output for one text.

    ``input_ids``, ``attention_mask`` and (when present) ``token_type_ids``
    always have the same length.
    """
    input_ids: Tuple[int, ...]
    attention_mask: Tuple[int, ...]
    token_type_ids: Optional[Tuple[int, ...]] = None

    def __post_init__(self):
        if len(self.attention_mask) != len(self.input_ids):
            raise TokenizationError("attention_mask length differs from input_ids")
        if self.token_type_ids is not None and len(self.token_type_ids) != len(self.input_ids):
            raise TokenizationError("token_type_ids length differs from input_ids")

    def __len__(self) -> int:
        return len(self.input_ids)

    @property
    def is_empty(self) -> bool:
        return not self.input_ids


class TokenDebugInfo(BaseModel):
    """Tokenization details for offline quality checks."""

    original: str = Field(..., description="Input text")
    tokens: List[str] = Field(default_factory=list, description="Token strings, markers included")
    ids: List[int] = Field(default_factory=list, description="Token ids")
    unk_ratio: float = Field(default=0.0, ge=0.0, le=1.0, description="Unknown pieces / subword pieces")
    used_native: bool = Field(default=False, description="Produced by the imported tokenizer definition")
    strategy: TokenizerStrategy = Field(..., description="Strategy that produced the output")


class EmbeddingModelInfo(BaseModel):
    """Resolved location and shape of the embedding model."""

    model_directory: Path
    model_file_path: Optional[Path] = None
    tokenizer_file_path: Optional[Path] = None
    vocab_file_path: Optional[Path] = None
    embedding_dimension: int = Field(default=384, ge=1)
    max_token_length: int = Field(default=512, ge=1)
    pooling_strategy: PoolingStrategy = PoolingStrategy.MEAN

    @property
    def has_model_file(self) -> bool:
        return self.model_file_path is not None and self.model_file_path.is_file()

    @property
    def has_tokenizer_file(self) -> bool:
        return self.tokenizer_file_path is not None and self.tokenizer_file_path.is_file()

    @property
    def has_vocab_file(self) -> bool:
        return self.vocab_file_path is not None and self.vocab_file_path.is_file()
