# ---------------- Product Quantizer ----------------
import logging
import math
from typing import List, Optional

import numpy as np

from semantic_index.errors import DimensionMismatch, InvalidSubspaceCount
from semantic_index.quantization.kmeans import KMeans, Seed, make_rng, pairwise_distances
from semantic_index.vector_math import as_vector

logger = logging.getLogger(__name__)


class ProductQuantizer:
    """
    Product quantization: split D-dimensional vectors into num_subspaces
    contiguous slices and cluster every slice independently, so a vector can
    be stored as one centroid index per slice.

    codebooks has shape (num_subspaces, num_clusters, D / num_subspaces).
    """

    def __init__(self, num_subspaces: int, num_clusters: int, max_iterations: int = 100, seed: Seed = None):
        if num_subspaces <= 0:
            raise ValueError("num_subspaces must be positive")
        if num_clusters <= 0:
            raise ValueError("num_clusters must be positive")

        self.num_subspaces = num_subspaces
        self.num_clusters = num_clusters
        self.max_iterations = max_iterations
        self.rng = make_rng(seed)

        # Set during fit / from_codebooks
        self.dim: Optional[int] = None
        self.sub_dim: Optional[int] = None
        self.codebooks: Optional[np.ndarray] = None

    @classmethod
    def from_codebooks(cls, codebooks) -> "ProductQuantizer":
        """Wrap already trained centroids, e.g. ones produced by another quantizer."""
        codebooks = np.asarray(codebooks, dtype=np.float64)
        if codebooks.ndim != 3:
            raise ValueError(f"Codebooks must have shape (subspaces, clusters, sub_dim), got {codebooks.shape}")
        pq = cls(num_subspaces=codebooks.shape[0], num_clusters=codebooks.shape[1])
        pq.sub_dim = codebooks.shape[2]
        pq.dim = pq.sub_dim * pq.num_subspaces
        pq.codebooks = codebooks.copy()
        return pq

    @property
    def is_trained(self) -> bool:
        return self.codebooks is not None

    def _require_trained(self):
        if not self.is_trained:
            raise RuntimeError("Quantizer must be trained before encoding. Call fit() first.")

    def _slices(self, vectors: np.ndarray):
        for m in range(self.num_subspaces):
            yield m, vectors[..., m * self.sub_dim:(m + 1) * self.sub_dim]

    # ---------- Training ----------
    def fit(self, vectors) -> "ProductQuantizer":
        vectors = np.asarray(vectors, dtype=np.float64)
        if vectors.ndim != 2 or vectors.shape[0] == 0:
            raise ValueError(f"Expected a non-empty 2-D array of vectors, got shape {vectors.shape}")

        dim = vectors.shape[1]
        if dim % self.num_subspaces != 0:
            raise InvalidSubspaceCount(dim, self.num_subspaces)

        self.dim = dim
        self.sub_dim = dim // self.num_subspaces
        codebooks = np.zeros((self.num_subspaces, self.num_clusters, self.sub_dim))

        for m, sub_vectors in self._slices(vectors):
            kmeans = KMeans(self.num_clusters, self.max_iterations, metric="euclidean", seed=self.rng)
            codebooks[m] = kmeans.fit(sub_vectors)

        self.codebooks = codebooks
        logger.debug(
            "Trained PQ: %d vectors, %d subspaces of dim %d, %d clusters each",
            vectors.shape[0], self.num_subspaces, self.sub_dim, self.num_clusters,
        )
        return self

    # ---------- Encoding ----------
    def encode(self, vector) -> List[int]:
        """Nearest centroid index per subspace."""
        self._require_trained()
        vector = as_vector(vector)
        if vector.shape[0] != self.dim:
            raise DimensionMismatch(self.dim, vector.shape[0])
        return [int(code) for code in self.encode_many(vector[None, :])[0]]

    def encode_many(self, vectors) -> np.ndarray:
        self._require_trained()
        vectors = np.asarray(vectors, dtype=np.float64)
        if vectors.ndim != 2:
            raise ValueError(f"Expected a 2-D array of vectors, got shape {vectors.shape}")
        if vectors.shape[1] != self.dim:
            raise DimensionMismatch(self.dim, vectors.shape[1])

        dtype = np.uint8 if self.num_clusters <= 256 else np.uint16 if self.num_clusters <= 65536 else np.int64
        codes = np.zeros((vectors.shape[0], self.num_subspaces), dtype=dtype)
        for m, sub_vectors in self._slices(vectors):
            codes[:, m] = np.argmin(pairwise_distances(sub_vectors, self.codebooks[m], "euclidean"), axis=1)
        return codes

    def decode(self, codes) -> np.ndarray:
        """Approximate reconstruction: concatenation of the coded centroids."""
        self._require_trained()
        codes = np.asarray(codes, dtype=np.int64)
        if codes.shape != (self.num_subspaces,):
            raise DimensionMismatch(self.num_subspaces, codes.shape[0] if codes.ndim == 1 else codes.size)
        return np.concatenate([self.codebooks[m, codes[m]] for m in range(self.num_subspaces)])

    # ---------- Code distances ----------
    @staticmethod
    def hamming(codes_a, codes_b) -> int:
        """Number of subspaces whose codes differ."""
        codes_a = np.asarray(codes_a)
        codes_b = np.asarray(codes_b)
        if codes_a.shape != codes_b.shape:
            raise DimensionMismatch(codes_a.shape[0], codes_b.shape[0])
        return int(np.count_nonzero(codes_a != codes_b))

    def lookup_distances(self, query, codes) -> np.ndarray:
        """
        Asymmetric distance: squared euclidean distance from the raw query to
        every coded vector, summed from a per-subspace lookup table.
        """
        self._require_trained()
        query = as_vector(query)
        if query.shape[0] != self.dim:
            raise DimensionMismatch(self.dim, query.shape[0])
        codes = np.atleast_2d(np.asarray(codes, dtype=np.int64))

        table = np.empty((self.num_subspaces, self.num_clusters))
        for m, sub_query in self._slices(query):
            table[m] = np.sum((self.codebooks[m] - sub_query) ** 2, axis=1)
        return table[np.arange(self.num_subspaces), codes].sum(axis=1)

    # ---------- Size accounting ----------
    @property
    def code_size_bits(self) -> int:
        return self.num_subspaces * max(1, math.ceil(math.log2(self.num_clusters)))

    @property
    def compression_ratio(self) -> float:
        """float32 vector size over code size."""
        self._require_trained()
        return (self.dim * 32) / self.code_size_bits
