import numpy as np
import pytest

from semantic_index.quantization import KMeans, assign, nearest_centroid, train


@pytest.fixture
def two_blobs():
    rng = np.random.default_rng(7)
    mean_a = np.array([5.0, 5.0])
    mean_b = np.array([-5.0, -5.0])
    points = np.vstack([
        rng.normal(mean_a, 0.5, size=(50, 2)),
        rng.normal(mean_b, 0.5, size=(50, 2)),
    ])
    return points, mean_a, mean_b


@pytest.mark.parametrize("metric", ["cosine", "euclidean"])
def test_two_blobs_converge_to_their_means(two_blobs, metric):
    points, mean_a, mean_b = two_blobs
    kmeans = KMeans(k=2, max_iterations=100, metric=metric, seed=42)
    centroids = kmeans.fit(points)

    assert kmeans.n_iter_ <= 100
    for mean, other in ((mean_a, mean_b), (mean_b, mean_a)):
        closest = min(centroids, key=lambda c: np.linalg.norm(c - mean))
        assert np.linalg.norm(closest - mean) < np.linalg.norm(closest - other)

    # both blobs end up in different clusters
    assert len(set(kmeans.labels_[:50])) == 1
    assert len(set(kmeans.labels_[50:])) == 1
    assert kmeans.labels_[0] != kmeans.labels_[50]


def test_train_is_reproducible_with_a_seed(two_blobs):
    points, _, _ = two_blobs
    np.testing.assert_array_equal(train(points, 3, seed=5), train(points, 3, seed=5))


def test_empty_cluster_keeps_previous_centroid():
    points = np.tile([1.0, 0.0], (5, 1))
    centroids = train(points, k=2, max_iterations=10, seed=0, metric="euclidean")
    assert np.all(np.isfinite(centroids))
    np.testing.assert_allclose(centroids, points[:2])


def test_assign_maps_centroids_to_point_indices():
    points = np.array([[1.0, 0.1], [0.9, 0.0], [-1.0, 0.0], [-0.8, 0.1]])
    centroids = np.array([[1.0, 0.0], [-1.0, 0.0], [0.0, 1.0]])
    buckets = assign(points, centroids)
    assert buckets == {0: [0, 1], 1: [2, 3]}
    assert nearest_centroid([0.0, 2.0], centroids) == 2


def test_more_clusters_than_points():
    centroids = train(np.array([[1.0, 0.0], [0.0, 1.0]]), k=4, seed=0)
    assert centroids.shape == (4, 2)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        KMeans(k=0)
    with pytest.raises(ValueError):
        KMeans(k=2, metric="manhattan")
    with pytest.raises(ValueError):
        train(np.zeros((0, 3)), k=2)
    with pytest.raises(RuntimeError):
        KMeans(k=2).predict([[1.0, 0.0]])
