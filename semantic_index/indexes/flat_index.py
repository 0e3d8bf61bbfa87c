# ---------------- Flat (brute-force) index ----------------
import threading
from typing import Dict, List, Optional, Tuple

import numpy as np

from semantic_index.indexes.base import VectorIndex
from semantic_index.vector_math import VectorLike, distances


class FlatIndex(VectorIndex):
    """
    Exact cosine scan over every stored vector.
    Used as the "brute" strategy and as ground truth when measuring recall.
    """

    def __init__(self, dimension: Optional[int] = None):
        super().__init__(dimension)
        self.uids: List[int] = []
        self.positions: Dict[int, int] = {}
        self._rows: List[np.ndarray] = []
        self._matrix: Optional[np.ndarray] = None
        self.lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.uids)

    def __contains__(self, uid: int) -> bool:
        return uid in self.positions

    def insert(self, vector: VectorLike, uid: int) -> None:
        with self.lock:
            vec = self._prepare(vector)
            uid = self._check_uid(uid)
            if self.dimension is None:
                self.dimension = vec.shape[0]
            self.positions[uid] = len(self.uids)
            self.uids.append(uid)
            self._rows.append(vec)
            self._matrix = None

    def vector(self, uid: int) -> np.ndarray:
        return self._rows[self.positions[uid]]

    def search(self, query: VectorLike, k: int = 5, **kwargs) -> List[Tuple[int, float]]:
        self._check_k(k)
        if not self.uids:
            return []
        q = self._prepare(query)

        if self._matrix is None:
            self._matrix = np.vstack(self._rows)
        dists = distances(q, self._matrix)

        k = min(k, len(self.uids))
        top = np.argpartition(dists, k - 1)[:k]
        top = top[np.argsort(dists[top], kind="stable")]
        return [(self.uids[i], float(dists[i])) for i in top]
