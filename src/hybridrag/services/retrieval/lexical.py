"""
Lexical re-ranking for hybrid retrieval.

Vector candidates are re-scored by how many query tokens also appear in
the candidate text. Tokens come from the same whitespace/punctuation split
as the WordPiece tokenizer, but without any vocabulary.
"""

from typing import List, Set

from ...shared import get_logger
from ...shared.utils import basic_segments, is_all_cjk
from ..vector_storage.models import RetrievedChunk


def extract_lexical_tokens(text: str) -> Set[str]:
    """
    Build the lexical token set of a text.

    All-CJK segments contribute the whole segment and each character;
    every other segment (punctuation included) is lowercased.
    """
    tokens: Set[str] = set()
    if not text or not text.strip():
        return tokens

    for segment in basic_segments(text):
        if is_all_cjk(segment):
            tokens.add(segment)
            tokens.update(segment)
        else:
            tokens.add(segment.lower())
    return tokens


class LexicalReranker:
    """Adds token-overlap boosts to vector scores and re-ranks."""

    def __init__(self,
                 per_token_boost: float = 0.02,
                 exact_boost: float = 0.10,
                 no_overlap_penalty: float = 0.05):
        self.per_token_boost = per_token_boost
        self.exact_boost = exact_boost
        self.no_overlap_penalty = no_overlap_penalty
        self.logger = get_logger(__name__)

    def boost(self, query_tokens: Set[str], content: str) -> float:
        """Score adjustment for one candidate."""
        overlap = len(query_tokens & extract_lexical_tokens(content))

        boost = overlap * self.per_token_boost
        if overlap > 0 and overlap == len(query_tokens):
            boost += self.exact_boost
        if overlap == 0:
            boost -= self.no_overlap_penalty
        return boost

    def rerank(self,
               query_text: str,
               candidates: List[RetrievedChunk],
               top_k: int,
               min_score: float) -> List[RetrievedChunk]:
        """
        Re-score candidates, keep the best ``top_k``, then drop those below
        ``min_score``.
        """
        if not candidates:
            return []

        query_tokens = extract_lexical_tokens(query_text)
        rescored = [
            RetrievedChunk(
                id=candidate.id,
                content=candidate.content,
                score=candidate.score + self.boost(query_tokens, candidate.content),
            )
            for candidate in candidates
        ]
        rescored.sort(key=lambda chunk: chunk.score, reverse=True)

        kept = [chunk for chunk in rescored[:top_k] if chunk.score >= min_score]
        self.logger.debug(
            f"Lexical rerank: {len(candidates)} candidates, {len(query_tokens)} query tokens, {len(kept)} kept"
        )
        return kept
