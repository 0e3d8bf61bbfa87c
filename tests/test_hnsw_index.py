import copy
import threading

import numpy as np
import pytest

from semantic_index.benchmark import recall_at_k
from semantic_index.errors import DegenerateVector, DimensionMismatch
from semantic_index.indexes import FlatIndex, HNSWIndex
from semantic_index.vector_math import distance


def build(vectors, **params):
    params.setdefault("seed", 11)
    index = HNSWIndex(**params)
    for uid, vec in enumerate(vectors):
        index.insert(vec, uid)
    return index


def test_four_points_on_the_unit_circle():
    index = build([(1, 0), (0, 1), (-1, 0), (0, -1)], m=2, m_max=4, ef_construction=10)

    assert index.search((0.9, 0.1), k=1)[0][0] == 0
    assert index.search((-0.9, -0.1), k=1)[0][0] == 2


def test_empty_index_returns_no_results():
    assert HNSWIndex().search([1.0, 0.0], k=3) == []


def test_self_retrieval(unit_vectors):
    data = unit_vectors(200, 16)
    index = build(data, m=10, m_max=40, ef_construction=100)

    for uid, vec in enumerate(data):
        top_uid, top_dist = index.search(vec, k=1, ef=200)[0]
        assert top_uid == uid
        assert top_dist == pytest.approx(0.0, abs=1e-9)


def test_results_are_sorted_best_first(unit_vectors):
    data = unit_vectors(100, 8)
    index = build(data, m=6, ef_construction=50)
    results = index.search(data[0], k=10, ef=50)
    dists = [d for _, d in results]
    assert len(results) == 10
    assert dists == sorted(dists)


def test_reported_distances_match_cosine_distance(rng):
    raw = rng.standard_normal((50, 8)) * rng.uniform(0.5, 20.0, size=(50, 1))
    index = build(raw, m=6, ef_construction=50)
    query = rng.standard_normal(8) * 7.0

    for uid, dist in index.search(query, k=10, ef=50):
        assert dist == pytest.approx(distance(query, raw[uid]), abs=1e-9)


def test_recall_does_not_drop_as_ef_grows(unit_vectors):
    data = unit_vectors(300, 16)
    queries = unit_vectors(40, 16)
    index = build(data, m=6, m_max=12, ef_construction=40)
    flat = FlatIndex()
    for uid, vec in enumerate(data):
        flat.insert(vec, uid)

    k = 10
    truth = [[uid for uid, _ in flat.search(q, k)] for q in queries]
    recalls = []
    for ef in (10, 40, 300):
        found = [[uid for uid, _ in index.search(q, k, ef=ef)] for q in queries]
        recalls.append(np.mean([recall_at_k(t, f) for t, f in zip(truth, found)]))

    assert recalls[0] <= recalls[1] <= recalls[2]
    assert recalls[2] >= 0.95


def test_ef_smaller_than_k_caps_the_result_count(unit_vectors):
    data = unit_vectors(50, 8)
    index = build(data, m=4, ef_construction=20)
    assert len(index.search(data[0], k=10, ef=3)) == 3


def test_dimension_guard_leaves_index_unchanged(unit_vectors):
    data = unit_vectors(30, 8)
    index = build(data, m=4, ef_construction=20)
    before = copy.deepcopy({uid: node.neighbors for uid, node in index.nodes.items()})
    entry = index.entry_point

    with pytest.raises(DimensionMismatch):
        index.insert(np.ones(5), 99)
    with pytest.raises(DimensionMismatch):
        index.search(np.ones(9), k=1)

    assert len(index) == 30
    assert 99 not in index
    assert index.entry_point == entry
    assert {uid: node.neighbors for uid, node in index.nodes.items()} == before


def test_invalid_inserts(unit_vectors):
    index = build(unit_vectors(5, 4), m=2)
    with pytest.raises(DegenerateVector):
        index.insert(np.zeros(4), 10)
    with pytest.raises(ValueError):
        index.insert(np.ones(4), 3)  # duplicate id
    with pytest.raises(ValueError):
        index.insert(np.ones(4), -1)
    with pytest.raises(ValueError):
        index.search(np.ones(4), k=0)
    assert len(index) == 5


def test_stored_vectors_are_normalized():
    index = build([(3.0, 4.0)], m=2)
    np.testing.assert_allclose(index.node(0).vector, [0.6, 0.8])


def test_graph_invariants(unit_vectors):
    data = unit_vectors(250, 8)
    index = build(data, m=4, m_max=8, ef_construction=30, level_multiplier=1.0)

    top = max(node.level for node in index.nodes.values())
    assert index.max_level == top
    assert index.node(index.entry_point).level == top

    for uid, node in index.nodes.items():
        assert len(node.neighbors) == node.level + 1
        for layer, links in enumerate(node.neighbors):
            assert len(links) <= index.m_max
            assert uid not in links
            for other in links:
                assert index.node(other).level >= layer


def test_zero_level_multiplier_keeps_a_single_layer(unit_vectors):
    index = build(unit_vectors(40, 4), m=3, level_multiplier=0.0)
    assert index.max_level == 0


def test_same_seed_builds_the_same_graph(unit_vectors):
    data = unit_vectors(60, 8)
    a = build(data, m=4, seed=5)
    b = build(data, m=4, seed=5)
    assert a.entry_point == b.entry_point
    assert all(a.neighbors(uid) == b.neighbors(uid) for uid in a.nodes)


def test_diverse_neighbor_selection_still_finds_every_vector(unit_vectors):
    data = unit_vectors(120, 8)
    index = build(data, m=6, m_max=12, ef_construction=60, diverse_neighbors=True)
    for uid, vec in enumerate(data):
        assert index.search(vec, k=1, ef=120)[0][0] == uid


def test_concurrent_inserts_are_serialized(unit_vectors):
    data = unit_vectors(200, 8)
    index = HNSWIndex(m=6, m_max=24, ef_construction=40, seed=2)

    def worker(start):
        for uid in range(start, len(data), 4):
            index.insert(data[uid], uid)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(index) == 200
    for node in index.nodes.values():
        assert all(len(links) <= index.m_max for links in node.neighbors)
    for uid in range(0, 200, 10):
        assert index.search(data[uid], k=1, ef=200)[0][0] == uid
