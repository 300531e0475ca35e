"""
Monitoring infrastructure for HybridRAG.
"""

from .logger import get_logger, setup_logging
from .metrics import MetricsCollector, timed_operation

__all__ = [
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "timed_operation",
]
