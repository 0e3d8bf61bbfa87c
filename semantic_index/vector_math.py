# ---------------- Vector math ----------------
from typing import Sequence, Union

import numpy as np

from semantic_index.errors import DegenerateVector, DimensionMismatch

EPSILON = 1e-12

VectorLike = Union[np.ndarray, Sequence[float]]


def as_vector(values: VectorLike) -> np.ndarray:
    """Coerce a 1-D sequence of numbers into a float64 array."""
    vec = np.asarray(values, dtype=np.float64)
    if vec.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got an array with shape {vec.shape}")
    return vec


def check_dimension(vec: np.ndarray, dim: int) -> None:
    if vec.shape[0] != dim:
        raise DimensionMismatch(dim, vec.shape[0])


def similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity of two equal-length vectors.
    A zero-magnitude operand yields 0.0 instead of NaN.
    """
    a = as_vector(a)
    b = as_vector(b)
    check_dimension(b, a.shape[0])
    denom = np.linalg.norm(a) * np.linalg.norm(b)
    return float(np.dot(a, b) / denom) if denom > 0 else 0.0


def distance(a: VectorLike, b: VectorLike) -> float:
    """Canonical cosine distance in [0, 2]; smaller is more similar."""
    return 1.0 - similarity(a, b)


def normalize(vec: VectorLike) -> np.ndarray:
    vec = as_vector(vec)
    norm = np.linalg.norm(vec)
    if norm < EPSILON:
        raise DegenerateVector("Cannot normalize a zero-magnitude vector")
    return vec / norm


# ---------- Batch helpers ----------
def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """L2-normalize every row; zero rows stay zero."""
    matrix = np.asarray(matrix, dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    safe = np.where(norms > EPSILON, norms, 1.0)
    return matrix / safe


def distances(query: VectorLike, matrix: np.ndarray) -> np.ndarray:
    """Cosine distance from one vector to every row of a matrix."""
    query = as_vector(query)
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got an array with shape {matrix.shape}")
    check_dimension(query, matrix.shape[1])
    q_norm = np.linalg.norm(query)
    if q_norm < EPSILON:
        return np.ones(matrix.shape[0])
    return 1.0 - normalize_rows(matrix) @ (query / q_norm)
