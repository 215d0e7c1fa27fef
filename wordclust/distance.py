import numpy as np
from scipy.spatial.distance import cdist


def squared_euclidean(a, b):
    """Pairwise squared Euclidean distances between the rows of a and b."""
    return cdist(np.atleast_2d(a), np.atleast_2d(b), metric="sqeuclidean")


def cluster_wcss(data, labels, centroids):
    """Within-cluster sum of squares of each cluster, ordered by cluster id."""
    X = np.asarray(data, dtype=float)
    centroids = np.asarray(centroids, dtype=float)
    residuals = np.sum((X - centroids[labels]) ** 2, axis=1)
    return np.bincount(labels, weights=residuals, minlength=len(centroids))


def within_cluster_ss(data, labels, centroids):
    """Total WCSS: sum over items of squared distance to their centroid."""
    return float(np.sum(cluster_wcss(data, labels, centroids)))
