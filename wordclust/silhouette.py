import numpy as np
from scipy.spatial.distance import cdist

from .errors import InvalidPartition
from .results import SilhouetteReport
from .validation import check_feature_matrix


def _check_labels(labels, k, n_items):
    labels = np.asarray(labels)
    if labels.ndim != 1 or labels.shape[0] != n_items:
        raise InvalidPartition(
            f"partition assigns {labels.size} items but data has {n_items} items"
        )
    if labels.size and not np.issubdtype(labels.dtype, np.integer):
        raise InvalidPartition(f"cluster ids must be integers, got {labels.dtype}")
    out_of_range = labels[(labels < 0) | (labels >= k)]
    if out_of_range.size:
        raise InvalidPartition(
            f"partition references cluster id {int(out_of_range[0])} outside "
            f"[0, {k}) for k={k}"
        )
    return labels.astype(int)


def evaluate(data, partition):
    """
    Silhouette width of every item and the mean width of every cluster.

    s(i) = (b(i) - a(i)) / max(a(i), b(i)), where a(i) is the mean distance
    to the other members of its cluster (0 for a singleton) and b(i) the
    smallest mean distance to another cluster. s(i) is 0 when the
    denominator is 0 or there is no other cluster.
    """
    X = check_feature_matrix(data)
    n_items = X.shape[0]
    k = partition.k
    labels = _check_labels(partition.labels, k, n_items)

    distances = cdist(X, X, metric="euclidean")
    counts = np.bincount(labels, minlength=k)
    # Row i, column c: summed distance from item i to the members of cluster c
    sums = distances @ np.eye(k)[labels]

    rows = np.arange(n_items)
    a = sums[rows, labels] / np.maximum(counts[labels] - 1, 1)

    with np.errstate(divide="ignore", invalid="ignore"):
        mean_to = sums / counts
    mean_to[:, counts == 0] = np.inf
    mean_to[rows, labels] = np.inf

    neighbors = np.argmin(mean_to, axis=1)
    b = mean_to[rows, neighbors]
    has_neighbor = np.isfinite(b)
    neighbors[~has_neighbor] = -1

    denom = np.maximum(a, b)
    widths = np.zeros(n_items)
    ok = has_neighbor & (denom > 0)
    widths[ok] = (b[ok] - a[ok]) / denom[ok]

    cluster_means = np.full(k, np.nan)
    for c in np.flatnonzero(counts):
        cluster_means[c] = widths[labels == c].mean()

    return SilhouetteReport(
        widths=widths,
        cluster_means=cluster_means,
        labels=labels,
        neighbors=neighbors,
    )
