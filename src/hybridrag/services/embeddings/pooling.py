"""
Vector math for embeddings: pooling, normalization and the hash fallback.
"""

import hashlib

import numpy as np

from ...shared.config import PoolingStrategy
from ...shared.exceptions import InferenceError

NORM_EPSILON = 1e-12


def pool_output(output: np.ndarray,
                attention_mask: np.ndarray,
                strategy: PoolingStrategy = PoolingStrategy.MEAN) -> np.ndarray:
    """
    Reduce a model output to one vector per batch item.

    Args:
        output: ``[batch, seq, hidden]`` per-token vectors or ``[batch, hidden]``
        attention_mask: ``[batch, seq]`` mask, 1 for real tokens
        strategy: Mean over real tokens, or the first (CLS) position

    Returns:
        ``[batch, hidden]`` float32 array
    """
    output = np.asarray(output, dtype=np.float32)

    if output.ndim == 2:
        return output

    if output.ndim != 3:
        raise InferenceError(f"Unsupported model output rank {output.ndim}")

    if strategy == PoolingStrategy.CLS:
        return output[:, 0, :]

    mask = np.asarray(attention_mask, dtype=np.float32)[:, :output.shape[1], None]
    summed = (output * mask).sum(axis=1)
    counts = np.maximum(mask.sum(axis=1), 1.0)
    return summed / counts


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    """Scale to unit length; near-zero vectors are returned unchanged."""
    vector = np.asarray(vector, dtype=np.float32)
    norm = float(np.linalg.norm(vector))
    if norm < NORM_EPSILON:
        return vector
    return vector / norm


def hash_embedding(text: str, dimension: int) -> np.ndarray:
    """
    Deterministic stand-in embedding derived from SHA-256 of the text.

    Digest bytes are repeated cyclically to fill ``dimension``, each mapped
    from [0, 255] to [-1, 1], then the vector is L2-normalized.
    """
    digest = np.frombuffer(hashlib.sha256(text.encode("utf-8")).digest(), dtype=np.uint8)
    values = digest[np.arange(dimension) % digest.size].astype(np.float32)
    return l2_normalize(values / 255.0 * 2.0 - 1.0)
