"""
Retrieval data models for HybridRAG.

Defines query results, usage statistics and conversation turns.
"""

from typing import List

from pydantic import Field

from ...shared.models.base import BaseModel, TimestampMixin
from ..vector_storage.models import RetrievedChunk


class QueryResult(BaseModel):
    """Ranked chunks for one query plus whether its embedding was cached."""

    results: List[RetrievedChunk] = Field(default_factory=list, description="Ranked chunks, best first")
    cached: bool = Field(default=False, description="Query embedding came from the cache")


class RagStats(BaseModel):
    """Snapshot of retrieval counters."""

    total_queries: int = Field(default=0, ge=0, description="Queries served")
    cache_hits: int = Field(default=0, ge=0, description="Queries whose embedding was cached")
    retrieval_misses: int = Field(default=0, ge=0, description="Queries that returned nothing")

    @property
    def cache_hit_rate(self) -> float:
        """Cache hits as a percentage of all queries."""
        if self.total_queries == 0:
            return 0.0
        return self.cache_hits / self.total_queries * 100.0


class ConversationTurn(BaseModel, TimestampMixin):
    """One recorded message in a user's history."""

    user_id: str = Field(..., description="User the turn belongs to")
    role: str = Field(default="user", description="Speaker role")
    content: str = Field(..., description="Message text")
