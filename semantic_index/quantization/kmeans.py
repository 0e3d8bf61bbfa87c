# ---------------- K-Means Clusterer ----------------
import logging
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from semantic_index.vector_math import normalize_rows

logger = logging.getLogger(__name__)

Seed = Union[int, np.random.Generator, None]

METRICS = ("cosine", "euclidean")


def make_rng(seed: Seed) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def _as_matrix(points) -> np.ndarray:
    matrix = np.asarray(points, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D array of points, got shape {matrix.shape}")
    return matrix


def pairwise_distances(points: np.ndarray, centroids: np.ndarray, metric: str = "cosine") -> np.ndarray:
    """(n_points, n_centroids) distance matrix."""
    if metric == "cosine":
        return 1.0 - normalize_rows(points) @ normalize_rows(centroids).T
    if metric == "euclidean":
        # |p - c|^2 = |p|^2 - 2 p.c + |c|^2
        sq = (
            np.sum(points ** 2, axis=1)[:, None]
            - 2.0 * points @ centroids.T
            + np.sum(centroids ** 2, axis=1)[None, :]
        )
        return np.sqrt(np.maximum(sq, 0.0))
    raise ValueError(f"Unknown metric '{metric}', expected one of {METRICS}")


class KMeans:
    """
    Lloyd-style k-means.
    Used on its own as the coarse cluster index and per subspace inside the
    product quantizer.
    """

    def __init__(
        self,
        k: int,
        max_iterations: int = 100,
        metric: str = "cosine",
        seed: Seed = None,
        n_init: int = 10,
    ):
        if k <= 0:
            raise ValueError("Number of clusters k must be positive")
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        if n_init <= 0:
            raise ValueError("n_init must be positive")
        if metric not in METRICS:
            raise ValueError(f"Unknown metric '{metric}', expected one of {METRICS}")

        self.k = k
        self.max_iterations = max_iterations
        self.metric = metric
        self.n_init = n_init
        self.rng = make_rng(seed)

        self.centroids_: Optional[np.ndarray] = None
        self.labels_: Optional[np.ndarray] = None
        self.n_iter_ = 0
        self.inertia_: Optional[float] = None

    def _init_centroids(self, points: np.ndarray) -> np.ndarray:
        n = points.shape[0]
        idx = self.rng.choice(n, size=self.k, replace=n < self.k)
        return points[idx].copy()

    def _fit_once(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray, int, float]:
        centroids = self._init_centroids(points)
        labels = None
        n_iter = 0

        for n_iter in range(1, self.max_iterations + 1):
            dists = pairwise_distances(points, centroids, self.metric)
            new_labels = np.argmin(dists, axis=1)
            if labels is not None and np.array_equal(new_labels, labels):
                break
            labels = new_labels

            for c in range(self.k):
                members = points[labels == c]
                if len(members) == 0:
                    continue  # empty cluster keeps its previous centroid
                centroids[c] = members.mean(axis=0)

        dists = pairwise_distances(points, centroids, self.metric)
        labels = np.argmin(dists, axis=1)
        inertia = float(dists[np.arange(len(points)), labels].sum())
        return centroids, labels, n_iter, inertia

    def fit(self, points) -> np.ndarray:
        """
        Train k centroids; with n_init > 1 the run with the lowest total
        point-to-centroid distance wins.
        """
        points = _as_matrix(points)
        if points.shape[0] == 0:
            raise ValueError("Cannot cluster an empty set of points")

        best = None
        for _ in range(self.n_init):
            run = self._fit_once(points)
            if best is None or run[3] < best[3]:
                best = run

        self.centroids_, self.labels_, self.n_iter_, self.inertia_ = best
        logger.debug(
            "k-means finished: k=%d, n=%d, %d iterations, inertia=%.4f",
            self.k, len(points), self.n_iter_, self.inertia_,
        )
        return self.centroids_

    def predict(self, points) -> np.ndarray:
        if self.centroids_ is None:
            raise RuntimeError("KMeans must be fitted before predicting. Call fit() first.")
        return np.argmin(pairwise_distances(_as_matrix(points), self.centroids_, self.metric), axis=1)

    def assign(self, points) -> Dict[int, List[int]]:
        if self.centroids_ is None:
            raise RuntimeError("KMeans must be fitted before assigning. Call fit() first.")
        return assign(points, self.centroids_, self.metric)


# ---------- Functional API ----------
def train(
    points, k: int, max_iterations: int = 100, seed: Seed = None, metric: str = "cosine", n_init: int = 10
) -> np.ndarray:
    """Train k centroids over the points and return them as a (k, d) array."""
    return KMeans(k, max_iterations=max_iterations, metric=metric, seed=seed, n_init=n_init).fit(points)


def assign(points, centroids, metric: str = "cosine") -> Dict[int, List[int]]:
    """
    Single nearest-centroid pass.
    Returns {centroid_index: [point_index, ...]}; centroids without members are absent.
    """
    points = _as_matrix(points)
    if points.shape[0] == 0:
        return {}
    labels = np.argmin(pairwise_distances(points, _as_matrix(centroids), metric), axis=1)
    buckets: Dict[int, List[int]] = {}
    for i, label in enumerate(labels):
        buckets.setdefault(int(label), []).append(i)
    return buckets


def nearest_centroid(point, centroids, metric: str = "cosine") -> int:
    point = np.asarray(point, dtype=np.float64)[None, :]
    return int(np.argmin(pairwise_distances(point, _as_matrix(centroids), metric)[0]))
