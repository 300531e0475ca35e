"""
Text splitting helpers shared by the WordPiece tokenizer and the lexical
re-ranker.

Both split on whitespace first and then isolate every Unicode punctuation
character, so a query and a document are always segmented the same way.
"""

from typing import List, Tuple

import regex

# CJK Unified Ideographs blocks (base, extensions A-F, compatibility)
_CJK_RANGES = (
    "\u4E00-\u9FFF"
    "\u3400-\u4DBF"
    "\U00020000-\U0002A6DF"
    "\U0002A700-\U0002B73F"
    "\U0002B740-\U0002B81F"
    "\U0002B820-\U0002CEAF"
    "\uF900-\uFAFF"
    "\U0002F800-\U0002FA1F"
)

_WHITESPACE = regex.compile(r"\s+")
_PUNCTUATION = regex.compile(r"(\p{P})")
_CJK_CHAR = regex.compile(f"[{_CJK_RANGES}]")
_CJK_RUN = regex.compile(f"([{_CJK_RANGES}]+)")
_ALL_CJK = regex.compile(f"[{_CJK_RANGES}]+")


def is_cjk_char(char: str) -> bool:
    """True if ``char`` is a CJK ideograph."""
    return bool(_CJK_CHAR.fullmatch(char))


def is_all_cjk(segment: str) -> bool:
    """True if ``segment`` is non-empty and made only of CJK ideographs."""
    return bool(segment) and bool(_ALL_CJK.fullmatch(segment))


def split_whitespace(text: str) -> List[str]:
    return [part for part in _WHITESPACE.split(text.strip()) if part]


def split_punctuation(part: str) -> List[str]:
    """Split ``part`` so that every punctuation character stands alone."""
    return [seg for seg in _PUNCTUATION.split(part) if seg and not seg.isspace()]


def basic_segments(text: str) -> List[str]:
    """Whitespace split followed by punctuation isolation."""
    if not text or text.isspace():
        return []

    segments: List[str] = []
    for part in split_whitespace(text):
        segments.extend(split_punctuation(part))
    return segments


def split_cjk_runs(segment: str) -> List[Tuple[str, bool]]:
    """
    Separate maximal CJK runs from the rest of a segment.

    Returns:
        Ordered ``(text, is_cjk)`` pairs covering the whole segment
    """
    return [
        (piece, is_all_cjk(piece))
        for piece in _CJK_RUN.split(segment)
        if piece
    ]
