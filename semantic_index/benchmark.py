# ---------------- Benchmark ----------------
import logging
import time
from typing import Dict, List, Sequence

import numpy as np

from semantic_index.indexes import FlatIndex, HNSWIndex
from semantic_index.quantization.kmeans import Seed, make_rng

logger = logging.getLogger(__name__)


def recall_at_k(truth: Sequence[int], found: Sequence[int]) -> float:
    """Share of the true top-k ids that were found."""
    if not truth:
        return 1.0
    return len(set(truth) & set(found)) / len(truth)


def random_unit_vectors(n: int, dim: int, seed: Seed = None) -> np.ndarray:
    data = make_rng(seed).standard_normal((n, dim))
    return data / np.linalg.norm(data, axis=1, keepdims=True)


def run_benchmark(
    num_vectors: int = 5000,
    dim: int = 384,
    num_queries: int = 20,
    top_k: int = 10,
    ef_values: Sequence[int] = (10, 50, 200),
    seed: Seed = 0,
    **hnsw_params,
) -> Dict[str, object]:
    """Compare HNSW against the exact flat scan on random unit vectors."""
    rng = make_rng(seed)
    data = random_unit_vectors(num_vectors, dim, rng)
    queries = random_unit_vectors(num_queries, dim, rng)

    brute = FlatIndex()
    for i, vec in enumerate(data):
        brute.insert(vec, i)

    hnsw = HNSWIndex(seed=rng, **hnsw_params)
    start = time.time()
    for i, vec in enumerate(data):
        hnsw.insert(vec, i)
    build_time = time.time() - start

    start = time.time()
    truth: List[List[int]] = [[uid for uid, _ in brute.search(q, top_k)] for q in queries]
    brute_time = (time.time() - start) / num_queries

    report: Dict[str, object] = {
        "num_vectors": num_vectors,
        "dim": dim,
        "build_time_hnsw": build_time,
        "avg_query_time_brute_ms": brute_time * 1000,
        "avg_query_time_hnsw_ms": {},
        "recall": {},
    }
    for ef in ef_values:
        start = time.time()
        found = [[uid for uid, _ in hnsw.search(q, top_k, ef=ef)] for q in queries]
        report["avg_query_time_hnsw_ms"][ef] = (time.time() - start) / num_queries * 1000
        report["recall"][ef] = float(np.mean([recall_at_k(t, f) for t, f in zip(truth, found)]))
        logger.info("ef=%d recall@%d=%.3f", ef, top_k, report["recall"][ef])
    return report
