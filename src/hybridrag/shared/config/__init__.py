"""
Configuration for HybridRAG.
"""

from .settings import PoolingStrategy, Settings, get_settings

__all__ = ["PoolingStrategy", "Settings", "get_settings"]
