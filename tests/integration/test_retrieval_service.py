import math

import numpy as np
import pytest

from hybridrag.services.retrieval import HybridRetrievalService
from hybridrag.services.vector_storage import InMemoryVectorStore, VectorDocument
from hybridrag.shared.exceptions import ValidationError


@pytest.fixture
def fallback_service(make_settings, empty_model_dir):
    """Service over the hash fallback provider (no model files)."""
    return HybridRetrievalService(settings=make_settings(model_directory=empty_model_dir))


@pytest.mark.asyncio
async def test_ingest_short_text_is_one_document(fallback_service) -> None:
    ids = await fallback_service.ingest("The quick brown fox", external_id="doc1")

    assert len(ids) == 1
    assert ids[0].startswith("doc1:")
    assert fallback_service.vector_store.count() == 1
    assert fallback_service.vector_store.get(ids[0]).content == "The quick brown fox"


@pytest.mark.asyncio
async def test_ingest_long_text_is_chunked(fallback_service) -> None:
    content = "abcdefghij" * 200

    ids = await fallback_service.ingest(content)
    chunks = [fallback_service.vector_store.get(chunk_id).content for chunk_id in ids]

    assert [len(chunk) for chunk in chunks] == [800, 800, 400]
    assert "".join(chunks) == content
    assert all(fallback_service.vector_store.get(i).embedding.shape == (8,) for i in ids)


@pytest.mark.asyncio
async def test_repeated_external_id_never_overwrites(fallback_service) -> None:
    first = await fallback_service.ingest("first version", external_id="doc1")
    second = await fallback_service.ingest("second version", external_id="doc1")

    assert first != second
    assert fallback_service.vector_store.count() == 2


@pytest.mark.asyncio
async def test_ingest_blank_content_stores_nothing(fallback_service) -> None:
    assert await fallback_service.ingest("   ") == []
    assert fallback_service.vector_store.count() == 0

    with pytest.raises(ValidationError):
        await fallback_service.ingest(None)


@pytest.mark.asyncio
async def test_vector_only_query_returns_exact_score(make_settings, static_provider_factory) -> None:
    provider = static_provider_factory({
        "stored document": [0.9, math.sqrt(1 - 0.81)],
        "my query": [1.0, 0.0],
    })
    service = HybridRetrievalService(
        settings=make_settings(enable_hybrid=False, embedding_dimension=2),
        embedding_provider=provider,
    )
    await service.ingest("stored document", external_id="doc")

    result = await service.query("alice", "my query")

    assert len(result.results) == 1
    assert result.results[0].content == "stored document"
    assert result.results[0].score == pytest.approx(0.9, abs=1e-5)
    assert result.cached is False


@pytest.mark.asyncio
async def test_hybrid_query_ranks_exact_phrase_first(make_settings, static_provider_factory) -> None:
    provider = static_provider_factory({"quick fox": [1.0, 0.0]})
    store = InMemoryVectorStore()
    store.upsert(VectorDocument(id="lexical", content="the quick fox", embedding=[0.5, math.sqrt(0.75)]))
    store.upsert(VectorDocument(id="vector", content="lazy dog", embedding=[0.6, 0.8]))
    store.upsert(VectorDocument(id="weak", content="unrelated", embedding=[0.16, math.sqrt(1 - 0.16 ** 2)]))
    store.upsert(VectorDocument(id="opposite", content="quick fox", embedding=[-1.0, 0.0]))
    service = HybridRetrievalService(
        settings=make_settings(embedding_dimension=2),
        embedding_provider=provider,
        vector_store=store,
    )

    result = await service.query("alice", "quick fox")

    assert [chunk.id for chunk in result.results] == ["lexical", "vector"]
    assert result.results[0].score == pytest.approx(0.64, abs=1e-5)
    assert result.results[1].score == pytest.approx(0.55, abs=1e-5)


@pytest.mark.asyncio
async def test_hybrid_over_fetch_uses_multiplier(make_settings, static_provider_factory, mocker) -> None:
    provider = static_provider_factory({"fox": [1.0, 0.0]})
    store = InMemoryVectorStore()
    for i in range(10):
        store.upsert(VectorDocument(id=f"d{i}", content="fox", embedding=[1.0, 0.01 * i]))
    service = HybridRetrievalService(
        settings=make_settings(embedding_dimension=2, max_retrieve=2, hybrid_candidate_multiplier=3),
        embedding_provider=provider,
        vector_store=store,
    )
    spy = mocker.spy(store, "search")

    result = await service.query("alice", "fox")

    assert len(result.results) == 2
    assert spy.call_args.args[1] == 6
    assert spy.call_args.args[2] == pytest.approx(0.15)


@pytest.mark.asyncio
async def test_stats_count_queries_hits_and_misses(fallback_service) -> None:
    await fallback_service.query("alice", "nothing stored yet")
    await fallback_service.query("alice", "nothing stored yet")
    await fallback_service.query("bob", "another query")

    stats = fallback_service.get_stats()

    assert (stats.total_queries, stats.cache_hits, stats.retrieval_misses) == (3, 1, 3)
    assert stats.cache_hit_rate == pytest.approx(100 / 3)


@pytest.mark.asyncio
async def test_cached_flag_is_returned(fallback_service) -> None:
    first = await fallback_service.query("alice", "repeat me")
    second = await fallback_service.query("alice", "repeat me")

    assert first.cached is False
    assert second.cached is True


@pytest.mark.asyncio
async def test_history_recorded_when_enabled(fallback_service) -> None:
    await fallback_service.query("alice", "first question")
    await fallback_service.query("alice", "second question")

    history = fallback_service.get_history("alice")

    assert [turn.content for turn in history] == ["first question", "second question"]
    assert all(turn.role == "user" for turn in history)


@pytest.mark.asyncio
async def test_history_not_recorded_when_disabled(make_settings, empty_model_dir) -> None:
    service = HybridRetrievalService(
        settings=make_settings(model_directory=empty_model_dir, enable_conversation_memory=False)
    )

    await service.query("alice", "question")

    assert service.get_history("alice") == []


@pytest.mark.asyncio
async def test_query_rejects_none(fallback_service) -> None:
    with pytest.raises(ValidationError):
        await fallback_service.query(None, "question")
    with pytest.raises(ValidationError):
        await fallback_service.query("alice", None)


@pytest.mark.asyncio
async def test_bulk_ingest_reads_text_and_markdown(fallback_service, tmp_path) -> None:
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "a.txt").write_text("plain text", encoding="utf-8")
    (docs / "b.md").write_text("# markdown", encoding="utf-8")
    (docs / "c.MARKDOWN").write_text("more markdown", encoding="utf-8")
    (docs / "d.pdf").write_text("not ingested", encoding="utf-8")
    (docs / "bad.txt").write_bytes(b"\xff\xfe\xfa invalid utf-8")
    (docs / "nested").mkdir()
    (docs / "nested" / "e.txt").write_text("too deep", encoding="utf-8")

    ingested = await fallback_service.bulk_ingest_directory(docs)

    assert ingested == 3
    assert fallback_service.vector_store.count() == 3
    contents = {
        fallback_service.vector_store.get(doc_id).content
        for doc_id in fallback_service.vector_store._documents
    }
    assert contents == {"plain text", "# markdown", "more markdown"}


@pytest.mark.asyncio
async def test_bulk_ingest_missing_directory(fallback_service, tmp_path) -> None:
    assert await fallback_service.bulk_ingest_directory(tmp_path / "missing") == 0
    assert await fallback_service.bulk_ingest_directory("") == 0


def test_debug_tokenize_uses_provider_tokenizer(make_settings) -> None:
    service = HybridRetrievalService(settings=make_settings())

    info = service.debug_tokenize("hello 你好", max_tokens=16)

    assert info.tokens == ["[CLS]", "hello", "你", "好", "[SEP]"]
    assert info.unk_ratio == 0.0
    assert info.used_native is False


@pytest.mark.asyncio
async def test_fallback_embeddings_are_deterministic(fallback_service) -> None:
    await fallback_service.ingest("deterministic text", external_id="doc")

    result = await fallback_service.query("alice", "deterministic text")

    assert result.results[0].content == "deterministic text"
    assert result.results[0].score == pytest.approx(1.0 + 0.02 * 2 + 0.10, abs=1e-5)
    assert np.linalg.norm(fallback_service.embedding_provider.embed("deterministic text")) == pytest.approx(1.0, abs=1e-5)
