"""
Shared fixtures for HybridRAG tests.
"""

from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pytest

from hybridrag.services.embeddings import EmbeddingProvider, InferenceBackend
from hybridrag.shared import Settings

TEST_DIMENSION = 8

# Line number = token id
TEST_VOCAB = [
    "[PAD]", "[UNK]", "[CLS]", "[SEP]",
    "hello", "world", "the", "quick", "brown", "fox",
    "un", "##believ", "##able",
    "你", "好", "世", "界",
    ",", "!",
]


def write_vocab(directory: Path, tokens: List[str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "vocab.txt"
    path.write_text("\n".join(tokens) + "\n", encoding="utf-8")
    return path


class FakeBackend(InferenceBackend):
    """
    Deterministic stand-in for an ONNX session.

    Emits rank-3 output where token ``id`` lights up column ``id % width``.
    """

    def __init__(self,
                 width: int = TEST_DIMENSION,
                 rank: int = 3,
                 error: Optional[Exception] = None,
                 names: Optional[List[str]] = None):
        self.width = width
        self.rank = rank
        self.error = error
        self.names = names or ["input_ids", "attention_mask", "token_type_ids"]
        self.calls: List[Dict[str, np.ndarray]] = []

    @property
    def input_names(self) -> List[str]:
        return list(self.names)

    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        self.calls.append(inputs)
        if self.error is not None:
            raise self.error

        ids = next(value for name, value in inputs.items() if "input" in name)
        batch, seq = ids.shape
        output = np.zeros((batch, seq, self.width), dtype=np.float32)
        for row in range(batch):
            for col in range(seq):
                output[row, col, ids[row, col] % self.width] += 1.0

        if self.rank == 2:
            return {"sentence_embedding": output.sum(axis=1)}
        return {"last_hidden_state": output}


class StaticEmbeddingProvider(EmbeddingProvider):
    """Returns preset vectors; a text counts as cached once it has been seen."""

    def __init__(self, vectors: Dict[str, List[float]], dimension: int = 2):
        self._dimension = dimension
        self.vectors = {text: np.asarray(vec, dtype=np.float32) for text, vec in vectors.items()}
        self._seen = set()

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed_with_cache_info(self, text: str):
        hit = text in self._seen
        self._seen.add(text)
        return self.vectors.get(text, np.zeros(self._dimension, dtype=np.float32)), hit


@pytest.fixture
def model_dir(tmp_path) -> Path:
    """Model directory holding only ``vocab.txt``."""
    directory = tmp_path / "model"
    write_vocab(directory, TEST_VOCAB)
    return directory


@pytest.fixture
def empty_model_dir(tmp_path) -> Path:
    directory = tmp_path / "empty_model"
    directory.mkdir()
    return directory


@pytest.fixture
def make_settings(model_dir):
    """Settings factory isolated from the environment's ``.env`` file."""
    def _make(**overrides) -> Settings:
        values = {
            "model_directory": model_dir,
            "embedding_dimension": TEST_DIMENSION,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def static_provider_factory():
    return StaticEmbeddingProvider


@pytest.fixture
def fake_backend_factory():
    return FakeBackend


@pytest.fixture
def test_vocab() -> List[str]:
    return list(TEST_VOCAB)
