"""
Common data models for HybridRAG.
"""

from .base import BaseModel, TimestampMixin, utc_now

__all__ = ["BaseModel", "TimestampMixin", "utc_now"]
