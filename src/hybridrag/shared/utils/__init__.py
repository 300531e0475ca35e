"""
Utility helpers for HybridRAG.
"""

from .text import (
    basic_segments,
    is_all_cjk,
    is_cjk_char,
    split_cjk_runs,
    split_punctuation,
    split_whitespace,
)

__all__ = [
    "basic_segments",
    "is_all_cjk",
    "is_cjk_char",
    "split_cjk_runs",
    "split_punctuation",
    "split_whitespace",
]
