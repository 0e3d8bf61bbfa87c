from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np

from semantic_index.vector_math import VectorLike, as_vector, check_dimension, normalize


class VectorIndex(ABC):
    """
    Abstract base class for an in-memory vector index.
    Defines the interface every indexing strategy implements.

    Vectors are stored L2-normalized; the first insertion fixes the dimension
    unless it was given up front. Results are (uid, cosine distance) pairs,
    best first.
    """

    def __init__(self, dimension: Optional[int] = None):
        self.dimension = dimension

    @abstractmethod
    def insert(self, vector: VectorLike, uid: int) -> None:
        """Add a vector under a caller-assigned, unique, non-negative id."""

    @abstractmethod
    def search(self, query: VectorLike, k: int = 5, **kwargs) -> List[Tuple[int, float]]:
        """Return up to k (uid, distance) pairs closest to the query."""

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def __contains__(self, uid: int) -> bool:
        pass

    # ---------- Shared validation ----------
    def _prepare(self, vector: VectorLike) -> np.ndarray:
        """Coerce, dimension-check and normalize. Never mutates the index."""
        vec = as_vector(vector)
        if self.dimension is not None:
            check_dimension(vec, self.dimension)
        return normalize(vec)

    def _check_uid(self, uid: int) -> int:
        if isinstance(uid, bool) or not isinstance(uid, (int, np.integer)) or uid < 0:
            raise ValueError(f"Ids must be non-negative integers, got {uid!r}")
        if uid in self:
            raise ValueError(f"Id {uid} is already indexed")
        return int(uid)

    @staticmethod
    def _check_k(k: int) -> None:
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
