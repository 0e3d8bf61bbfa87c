# ---------------- Cluster (k-means bucket) index ----------------
import logging
import threading
from typing import Dict, List, Optional, Tuple

import numpy as np

from semantic_index import config
from semantic_index.indexes.base import VectorIndex
from semantic_index.quantization.kmeans import KMeans, Seed, assign, make_rng
from semantic_index.vector_math import VectorLike, distances

logger = logging.getLogger(__name__)


class ClusterIndex(VectorIndex):
    """
    One-level coarse index: k-means centroids, each owning a bucket of members.
    Buckets are rebuilt from scratch by build(); inserts only mark the index stale
    and the next search retrains it.
    """

    def __init__(
        self,
        num_clusters: int = config.CLUSTER_COUNT,
        max_iterations: int = config.CLUSTER_MAX_ITERATIONS,
        n_probe: int = config.CLUSTER_N_PROBE,
        dimension: Optional[int] = None,
        seed: Seed = None,
    ):
        super().__init__(dimension)
        if num_clusters < 1:
            raise ValueError("num_clusters must be at least 1")
        if n_probe < 1:
            raise ValueError("n_probe must be at least 1")
        self.num_clusters = num_clusters
        self.max_iterations = max_iterations
        self.n_probe = n_probe
        self.rng = make_rng(seed)

        self.uids: List[int] = []
        self.positions: Dict[int, int] = {}
        self._rows: List[np.ndarray] = []

        self.centroids: Optional[np.ndarray] = None
        self.buckets: Dict[int, List[int]] = {}  # centroid index -> uids
        self.stale = False
        self.lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.uids)

    def __contains__(self, uid: int) -> bool:
        return uid in self.positions

    # ---------- Core methods ----------
    def insert(self, vector: VectorLike, uid: int) -> None:
        with self.lock:
            vec = self._prepare(vector)
            uid = self._check_uid(uid)
            if self.dimension is None:
                self.dimension = vec.shape[0]
            self.positions[uid] = len(self.uids)
            self.uids.append(uid)
            self._rows.append(vec)
            self.stale = True

    def build(self) -> None:
        """Retrain centroids over every stored vector and refill the buckets."""
        with self.lock:
            if not self.uids:
                return
            points = np.vstack(self._rows)
            k = min(self.num_clusters, len(self.uids))
            kmeans = KMeans(k, max_iterations=self.max_iterations, metric="cosine", seed=self.rng)
            self.centroids = kmeans.fit(points)
            self.buckets = {
                c: [self.uids[i] for i in members]
                for c, members in assign(points, self.centroids, metric="cosine").items()
            }
            self.stale = False
            logger.debug(
                "Cluster index rebuilt: %d vectors in %d non-empty buckets (%d iterations)",
                len(self.uids), len(self.buckets), kmeans.n_iter_,
            )

    def nearest_buckets(self, query: VectorLike, n_probe: Optional[int] = None) -> List[int]:
        """Indices of the n_probe non-empty buckets whose centroids are closest to the query."""
        if self.stale or self.centroids is None:
            self.build()
        n_probe = self.n_probe if n_probe is None else n_probe
        order = np.argsort(distances(query, self.centroids), kind="stable")
        return [int(c) for c in order if int(c) in self.buckets][:n_probe]

    def search(
        self, query: VectorLike, k: int = 5, n_probe: Optional[int] = None, **kwargs
    ) -> List[Tuple[int, float]]:
        self._check_k(k)
        if not self.uids:
            return []
        q = self._prepare(query)

        members = [uid for c in self.nearest_buckets(q, n_probe) for uid in self.buckets[c]]
        matrix = np.vstack([self._rows[self.positions[uid]] for uid in members])
        dists = distances(q, matrix)
        order = np.argsort(dists, kind="stable")[:k]
        return [(members[i], float(dists[i])) for i in order]
