"""
Centralized configuration management for HybridRAG.

All environment variables and settings are managed here so the tokenizer,
embedding provider and retrieval service read the same values.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional, Dict, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class PoolingStrategy(str, Enum):
    """How per-token model outputs are reduced to one vector."""
    MEAN = "mean"
    CLS = "cls"


class Settings(BaseSettings):
    """
    Centralized settings for HybridRAG.

    Values are loaded from ``HYBRIDRAG_*`` environment variables (or a
    ``.env`` file) with sensible defaults. Components accept an explicit
    instance so tests can run with isolated configuration.
    """

    # === Application Settings ===
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # === Embedding Model Settings ===
    model_directory: Path = Field(default=Path("models/all-MiniLM-L6-v2"), description="Directory holding model.onnx, tokenizer.json and vocab.txt")
    tokenizer_path: Optional[Path] = Field(default=None, description="Override for the serialized tokenizer definition")
    pooling_strategy: PoolingStrategy = Field(default=PoolingStrategy.MEAN, description="Pooling strategy for rank-3 model outputs")
    max_token_length: int = Field(default=512, ge=1, description="Model max sequence length")
    embedding_dimension: int = Field(default=384, ge=1, description="Embedding vector dimension")
    lowercase: bool = Field(default=True, description="Lowercase text before WordPiece lookup")
    embedding_cache_max_entries: Optional[int] = Field(default=None, ge=1, description="Embedding cache bound (None = unbounded)")

    # === Retrieval Settings ===
    enable_hybrid: bool = Field(default=True, description="Enable lexical re-ranking of vector candidates")
    hybrid_candidate_multiplier: int = Field(default=3, ge=1, description="Candidate over-fetch factor in hybrid mode")
    similarity_threshold: float = Field(default=0.30, ge=-1.0, le=1.0, description="Vector similarity threshold")
    lexical_per_token_boost: float = Field(default=0.02, description="Boost per overlapping query token")
    lexical_exact_boost: float = Field(default=0.10, description="One-time boost when every query token overlaps")
    no_lexical_penalty: float = Field(default=0.05, description="Penalty when no query token overlaps")
    max_retrieve: int = Field(default=8, ge=1, description="Maximum results per query")

    # === Ingestion Settings ===
    max_chunk_chars: int = Field(default=800, ge=1, description="Fixed chunk size in characters")

    # === Conversation Settings ===
    enable_conversation_memory: bool = Field(default=True, description="Record queries in per-user history")
    conversation_history_size: int = Field(default=50, ge=1, description="Turns kept per user")

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    # === Embedding Configuration ===
    @property
    def embedding_config(self) -> Dict[str, Any]:
        """Get embedding configuration."""
        return {
            'model_directory': str(self.model_directory),
            'pooling': self.pooling_strategy.value,
            'dimension': self.embedding_dimension,
            'max_tokens': self.max_token_length,
            'cache_max_entries': self.embedding_cache_max_entries,
        }

    # === Retrieval Configuration ===
    @property
    def retrieval_config(self) -> Dict[str, Any]:
        """Get retrieval configuration."""
        return {
            'hybrid': self.enable_hybrid,
            'candidate_multiplier': self.hybrid_candidate_multiplier,
            'threshold': self.similarity_threshold,
            'max_retrieve': self.max_retrieve,
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('pooling_strategy', mode='before')
    @classmethod
    def validate_pooling(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    model_config = {
        "env_prefix": "HYBRIDRAG_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per process.
    """
    return Settings()
