import pytest

from hybridrag.services.retrieval import LexicalReranker, extract_lexical_tokens
from hybridrag.services.vector_storage import RetrievedChunk


def test_token_set_lowercases_and_expands_cjk() -> None:
    assert extract_lexical_tokens("Hello, 世界!") == {"hello", ",", "世界", "世", "界", "!"}
    assert extract_lexical_tokens("   ") == set()


@pytest.mark.parametrize(
    "content, expected",
    [
        ("the quick brown fox", 2 * 0.02 + 0.10),
        ("a quick dog", 0.02),
        ("nothing in common", -0.05),
    ],
)
def test_boost(content, expected) -> None:
    reranker = LexicalReranker()

    assert reranker.boost({"quick", "fox"}, content) == pytest.approx(expected)


def test_no_exact_bonus_for_empty_query() -> None:
    assert LexicalReranker().boost(set(), "anything") == pytest.approx(-0.05)


def test_rerank_prefers_lexical_match() -> None:
    candidates = [
        RetrievedChunk(id="vector", content="lazy dog", score=0.6),
        RetrievedChunk(id="lexical", content="the quick fox", score=0.5),
        RetrievedChunk(id="weak", content="unrelated", score=0.16),
    ]

    results = LexicalReranker().rerank("quick fox", candidates, top_k=8, min_score=0.15)

    assert [r.id for r in results] == ["lexical", "vector"]
    assert results[0].score == pytest.approx(0.64)
    assert results[1].score == pytest.approx(0.55)


def test_rerank_limits_before_filtering() -> None:
    candidates = [RetrievedChunk(id=str(i), content="fox", score=0.5 - i * 0.1) for i in range(5)]

    assert len(LexicalReranker().rerank("fox", candidates, top_k=2, min_score=0.0)) == 2
    assert LexicalReranker().rerank("fox", [], top_k=2, min_score=0.0) == []
