import numpy as np

from wordclust.distance import cluster_wcss, squared_euclidean, within_cluster_ss


def test_squared_euclidean():
    d = squared_euclidean([[0.0, 0.0]], [[3.0, 4.0], [1.0, 0.0]])
    np.testing.assert_allclose(d, [[25.0, 1.0]])


def test_within_cluster_ss(four_points):
    labels = np.array([0, 0, 1, 1])
    centroids = np.array([[0.0, 0.5], [10.0, 0.5]])
    assert within_cluster_ss(four_points, labels, centroids) == 1.0
    np.testing.assert_allclose(cluster_wcss(four_points, labels, centroids), [0.5, 0.5])


def test_cluster_wcss_keeps_empty_clusters():
    X = np.array([[1.0], [3.0]])
    out = cluster_wcss(X, np.array([0, 0]), np.array([[2.0], [100.0]]))
    np.testing.assert_allclose(out, [2.0, 0.0])
