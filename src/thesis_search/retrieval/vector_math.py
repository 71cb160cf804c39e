"""
Vector math - the single source of truth for similarity semantics.

Stored vectors are normalized at ingestion time, so the dot product of a
normalized query against a stored row equals their cosine similarity
without a per-comparison square root. Bulk ranking therefore uses
dot_product / dot_product_matrix; cosine_similarity stays available as the
normalization-agnostic metric.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from thesis_search.core.errors import DimensionMismatch

VectorLike = Union[np.ndarray, Sequence[float]]


def _as_pair(a: VectorLike, b: VectorLike) -> tuple[np.ndarray, np.ndarray]:
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise DimensionMismatch(expected=va.size, actual=vb.size)
    return va, vb


def dot_product(a: VectorLike, b: VectorLike) -> float:
    """Sum of elementwise products."""
    va, vb = _as_pair(a, b)
    return float(np.dot(va, vb))


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine of the angle between a and b, in [-1, 1].

    Returns 0.0 when either vector has zero norm.
    """
    va, vb = _as_pair(a, b)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    # Rounding can push identical vectors a hair past 1
    return max(-1.0, min(1.0, similarity))


def euclidean_distance(a: VectorLike, b: VectorLike) -> float:
    va, vb = _as_pair(a, b)
    return float(np.linalg.norm(va - vb))


def normalize(v: VectorLike) -> np.ndarray:
    """Scale v to unit length. A zero vector is returned unchanged."""
    vec = np.asarray(v, dtype=np.float32)
    norm = np.linalg.norm(vec)
    if norm == 0:
        return vec
    return vec / norm


def dot_product_matrix(matrix: np.ndarray, v: VectorLike) -> np.ndarray:
    """
    Dot product of every row of matrix with v.

    Args:
        matrix: (n, D) array of stored vectors
        v: query vector of length D

    Returns:
        (n,) array of scores, in row order
    """
    vec = np.asarray(v, dtype=np.float64)
    rows = np.asarray(matrix, dtype=np.float64)
    if rows.size == 0:
        return np.zeros(0, dtype=np.float64)
    if rows.ndim != 2 or rows.shape[1] != vec.shape[0]:
        actual = rows.shape[1] if rows.ndim == 2 else rows.size
        raise DimensionMismatch(expected=vec.shape[0], actual=actual)
    return rows @ vec


def stack_vectors(vectors: Sequence[VectorLike], dim: int) -> np.ndarray:
    """
    Stack vectors into an (n, dim) matrix.

    Raises:
        DimensionMismatch: any vector is not dim long
    """
    rows = [np.asarray(v, dtype=np.float64) for v in vectors]
    for row in rows:
        if row.ndim != 1 or row.shape[0] != dim:
            raise DimensionMismatch(expected=dim, actual=row.size)
    if not rows:
        return np.zeros((0, dim), dtype=np.float64)
    return np.vstack(rows)
