import logging

import numpy as np
import pytest

from hybridrag.services.embeddings import (
    EmbeddingMode,
    EmbeddingTokenizer,
    TransformerEmbeddingProvider,
    hash_embedding,
)
from hybridrag.shared import EmbeddingCache
from hybridrag.shared.exceptions import ValidationError

DIM = 8


def make_provider(settings, backend=None, **kwargs) -> TransformerEmbeddingProvider:
    return TransformerEmbeddingProvider(settings=settings, backend=backend, **kwargs)


def test_model_mode_produces_unit_vectors(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(), fake_backend)

    vector = provider.embed("hello world")

    assert provider.mode == EmbeddingMode.MODEL
    assert not provider.is_fallback
    assert vector.shape == (DIM,)
    assert np.linalg.norm(vector) == pytest.approx(1.0, abs=1e-5)


def test_cache_hit_is_reported(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(), fake_backend)

    first, first_hit = provider.embed_with_cache_info("hello")
    second, second_hit = provider.embed_with_cache_info("hello")

    assert (first_hit, second_hit) == (False, True)
    np.testing.assert_array_equal(first, second)
    assert len(fake_backend.calls) == 1


def test_mutating_returned_vector_leaves_cache_intact(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(), fake_backend)

    first = provider.embed("hello")
    expected = first.copy()
    first[:] = 0

    again = provider.embed("hello")
    again[:] = 0

    np.testing.assert_array_equal(provider.embed("hello"), expected)


def test_batch_duplicates_are_independent_arrays(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(), fake_backend)

    left, right = provider.embed_batch(["hello", "hello"])
    left[:] = 0

    assert np.linalg.norm(right) == pytest.approx(1.0, abs=1e-5)
    assert np.linalg.norm(provider.embed("hello")) == pytest.approx(1.0, abs=1e-5)


def test_blank_text_gives_uncached_zero_vector(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(), fake_backend)

    vector, hit = provider.embed_with_cache_info("   ")
    _, hit_again = provider.embed_with_cache_info("   ")

    np.testing.assert_array_equal(vector, np.zeros(DIM))
    assert not hit and not hit_again
    assert len(provider.cache) == 0
    assert fake_backend.calls == []


def test_none_text_is_rejected(make_settings, fake_backend) -> None:
    with pytest.raises(ValidationError):
        make_provider(make_settings(), fake_backend).embed(None)


def test_missing_model_uses_hash_fallback(make_settings, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        provider = make_provider(make_settings())

    vector = provider.embed("hello")
    provider.embed("hello")

    assert provider.mode == EmbeddingMode.HASH_FALLBACK
    assert provider.is_fallback
    np.testing.assert_allclose(vector, hash_embedding("hello", DIM))
    assert provider.fallback_count == 1
    assert any("hash fallback" in record.getMessage() for record in caplog.records)


def test_backend_failure_falls_back_per_call(make_settings, fake_backend_factory) -> None:
    backend = fake_backend_factory(error=RuntimeError("session crashed"))
    provider = make_provider(make_settings(), backend)

    vector = provider.embed("hello")

    assert provider.mode == EmbeddingMode.MODEL
    assert provider.fallback_count == 1
    np.testing.assert_allclose(vector, hash_embedding("hello", DIM))


def test_output_width_mismatch_falls_back(make_settings, fake_backend_factory) -> None:
    provider = make_provider(make_settings(), fake_backend_factory(width=DIM + 1))

    np.testing.assert_allclose(provider.embed("hello"), hash_embedding("hello", DIM))
    assert provider.fallback_count == 1


def test_rank_two_output_matches_mean_pooling(make_settings, fake_backend_factory) -> None:
    rank3 = make_provider(make_settings(), fake_backend_factory(rank=3))
    rank2 = make_provider(make_settings(), fake_backend_factory(rank=2))

    np.testing.assert_allclose(rank2.embed("hello world"), rank3.embed("hello world"), rtol=1e-6)


def test_cls_pooling(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(pooling_strategy="cls"), fake_backend)

    vector = provider.embed("hello world")

    # [CLS] has id 2, which the fake backend maps to column 2
    expected = np.zeros(DIM)
    expected[2] = 1.0
    np.testing.assert_allclose(vector, expected)


def test_empty_tokenization_falls_back(make_settings, empty_model_dir, fake_backend) -> None:
    settings = make_settings(model_directory=empty_model_dir)
    provider = make_provider(settings, fake_backend, tokenizer=EmbeddingTokenizer(settings))

    np.testing.assert_allclose(provider.embed("hello"), hash_embedding("hello", DIM))
    assert fake_backend.calls == []


def test_batch_pads_and_matches_single(make_settings, fake_backend, fake_backend_factory) -> None:
    provider = make_provider(make_settings(), fake_backend)

    vectors = provider.embed_batch(["hello", "hello world", "hello"])

    assert len(fake_backend.calls) == 1
    feeds = fake_backend.calls[0]
    assert feeds["input_ids"].shape == (2, 4)
    assert feeds["input_ids"].dtype == np.int64
    assert feeds["attention_mask"].tolist() == [[1, 1, 1, 0], [1, 1, 1, 1]]

    single = make_provider(make_settings(), fake_backend_factory()).embed("hello")
    np.testing.assert_allclose(vectors[0], single, rtol=1e-6)
    np.testing.assert_array_equal(vectors[0], vectors[2])


def test_batch_serves_cache_hits(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(), fake_backend)
    provider.embed("hello")

    provider.embed_batch(["hello", "world", ""])

    assert len(fake_backend.calls) == 2
    assert fake_backend.calls[1]["input_ids"].shape[0] == 1


def test_feeds_follow_backend_input_names(make_settings, fake_backend_factory) -> None:
    backend = fake_backend_factory(names=["input_ids", "attention_mask"])
    provider = make_provider(make_settings(), backend)

    provider.embed("hello")

    assert set(backend.calls[0]) == {"input_ids", "attention_mask"}


def test_bounded_cache_evicts(make_settings, fake_backend) -> None:
    provider = make_provider(make_settings(), fake_backend, cache=EmbeddingCache(max_size=1))

    provider.embed("hello")
    provider.embed("world")

    assert "hello" not in provider.cache
    assert provider.cache.get_stats()["evictions"] == 1
