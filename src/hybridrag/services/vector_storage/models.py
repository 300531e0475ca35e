"""
Vector storage data models.
"""

import math

import numpy as np
from pydantic import Field, field_validator

from ...shared.models.base import BaseModel


class VectorDocument(BaseModel):
    """
    A stored chunk: identifier, original text and its embedding.

    The embedding length always equals the provider dimension used at
    ingestion time.
    """

    id: str = Field(..., min_length=1, description="Chunk identifier")
    content: str = Field(..., description="Original chunk text")
    embedding: np.ndarray = Field(..., description="Embedding vector")

    @field_validator('embedding', mode='before')
    @classmethod
    def validate_embedding(cls, v):
        array = np.array(v, dtype=np.float32)
        if array.ndim != 1:
            raise ValueError("embedding must be a one-dimensional vector")
        return array


class RetrievedChunk(BaseModel):
    """A ranked query result. Never persisted."""

    id: str = Field(..., description="Chunk identifier")
    content: str = Field(..., description="Chunk text")
    score: float = Field(..., description="Relevance score, higher is better")

    @field_validator('score')
    @classmethod
    def validate_score(cls, v):
        if not math.isfinite(v):
            raise ValueError("score must be finite")
        return v
