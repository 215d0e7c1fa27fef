import numpy as np
import pytest
from sklearn.metrics import silhouette_samples

from wordclust import InvalidPartition, Partition, evaluate, fit


def _partition(labels, k, dim=2):
    return Partition(labels=labels, centroids=np.zeros((k, dim)), wcss=0.0)


def test_four_points(four_points):
    partition = fit(four_points, 2, n_starts=5, rng_seed=0)
    report = evaluate(four_points, partition)

    expected = 1 - 2 / (10 + np.sqrt(101))
    np.testing.assert_allclose(report.widths, np.full(4, expected))
    np.testing.assert_allclose(report.cluster_means, [expected, expected])
    np.testing.assert_array_equal(report.neighbors, 1 - partition.labels)
    assert report.average == pytest.approx(expected)


def test_matches_scikit_learn(blobs):
    X, _ = blobs
    partition = fit(X, 4, n_starts=5, rng_seed=2)
    assert partition.sizes.min() > 1
    report = evaluate(X, partition)
    np.testing.assert_allclose(report.widths, silhouette_samples(X, partition.labels))
    for c in range(4):
        assert report.cluster_means[c] == pytest.approx(
            report.widths[partition.labels == c].mean()
        )


def test_singleton_cluster():
    X = np.array([[0.0], [1.0], [10.0]])
    report = evaluate(X, _partition([0, 0, 1], 2, dim=1))
    np.testing.assert_allclose(report.widths, [0.9, 8 / 9, 1.0])
    np.testing.assert_allclose(report.cluster_means, [(0.9 + 8 / 9) / 2, 1.0])


def test_single_cluster_scores_zero(four_points):
    report = evaluate(four_points, _partition([0, 0, 0, 0], 1))
    np.testing.assert_array_equal(report.widths, np.zeros(4))
    np.testing.assert_array_equal(report.neighbors, [-1, -1, -1, -1])
    np.testing.assert_array_equal(report.cluster_means, [0.0])


def test_identical_points_score_zero():
    X = np.zeros((4, 2))
    report = evaluate(X, _partition([0, 0, 1, 1], 2))
    np.testing.assert_array_equal(report.widths, np.zeros(4))


def test_widths_within_bounds():
    rng = np.random.default_rng(4)
    X = rng.normal(size=(50, 3))
    for k in (2, 3, 5):
        report = evaluate(X, fit(X, k, n_starts=3, rng_seed=k))
        assert np.all(report.widths >= -1.0)
        assert np.all(report.widths <= 1.0)


def test_cluster_id_out_of_range(four_points):
    with pytest.raises(InvalidPartition) as exc:
        evaluate(four_points, _partition([0, 1, 2, 0], 2))
    assert "cluster id 2" in str(exc.value)


def test_negative_cluster_id(four_points):
    with pytest.raises(InvalidPartition):
        evaluate(four_points, _partition([0, -1, 1, 0], 2))


def test_item_count_mismatch(four_points):
    with pytest.raises(InvalidPartition):
        evaluate(four_points, _partition([0, 1, 1], 2))
    with pytest.raises(InvalidPartition):
        evaluate(four_points[:3], _partition([0, 1, 1, 0], 2))
