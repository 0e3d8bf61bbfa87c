import pytest

from semantic_index.benchmark import random_unit_vectors, recall_at_k, run_benchmark


def test_recall_at_k():
    assert recall_at_k([1, 2, 3, 4], [4, 3, 9, 8]) == 0.5
    assert recall_at_k([], [1]) == 1.0


def test_random_unit_vectors_are_normalized():
    data = random_unit_vectors(10, 5, seed=0)
    assert data.shape == (10, 5)
    assert (abs((data ** 2).sum(axis=1) - 1.0) < 1e-9).all()


def test_run_benchmark_reports_recall_per_ef():
    report = run_benchmark(
        num_vectors=300, dim=16, num_queries=10, top_k=5, ef_values=(5, 300), m=8, ef_construction=50
    )

    assert report["num_vectors"] == 300
    assert set(report["recall"]) == {5, 300}
    assert report["recall"][300] >= 0.95
    assert report["recall"][5] <= report["recall"][300]
    assert report["build_time_hnsw"] > 0
    assert all(t >= 0 for t in report["avg_query_time_hnsw_ms"].values())
