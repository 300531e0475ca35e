"""
Shared components for HybridRAG.

Contains common models, utilities, and infrastructure used across all services:

- Common data models and validation
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (embedding cache, logging, metrics)
"""

from .models import BaseModel, TimestampMixin, utc_now
from .config import PoolingStrategy, Settings, get_settings
from .exceptions import (
    HybridRagError,
    ConfigurationError,
    ValidationError,
    TokenizationError,
    InferenceError,
)
from .infrastructure import (
    CacheEntry,
    EmbeddingCache,
    get_logger,
    setup_logging,
    MetricsCollector,
    timed_operation,
)

__all__ = [
    # From models
    "BaseModel", "TimestampMixin", "utc_now",

    # From config
    "PoolingStrategy", "Settings", "get_settings",

    # From exceptions
    "HybridRagError", "ConfigurationError", "ValidationError",
    "TokenizationError", "InferenceError",

    # From infrastructure
    "CacheEntry", "EmbeddingCache",
    "get_logger", "setup_logging", "MetricsCollector", "timed_operation",
]
