"""
Base models and mixins for HybridRAG.
"""

from datetime import datetime, timezone
from pydantic import BaseModel as PydanticBaseModel, Field


class BaseModel(PydanticBaseModel):
    """
    Base model for all HybridRAG data structures.

    Provides common configuration and utilities.
    """

    model_config = {
        # Allow field population by name or alias
        "validate_by_name": True,
        # Validate assignments after object creation
        "validate_assignment": True,
        # Use enum values instead of enum names
        "use_enum_values": True,
        # numpy arrays are carried on vector documents
        "arbitrary_types_allowed": True,
        "extra": "forbid",
    }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin(PydanticBaseModel):
    """
    Mixin to add timestamp fields to models.
    """
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
