import warnings

import numpy as np
from joblib import Parallel, delayed

from .config import INIT, MAX_ITER, N_STARTS, RANDOM_SEED
from .distance import squared_euclidean, within_cluster_ss
from .errors import NonConvergence
from .results import Partition
from .validation import (
    check_feature_matrix,
    check_init,
    check_k,
    check_positive_int,
    check_seed,
)


def _reseed_empty_clusters(labels, distances):
    """
    Move the item farthest from its own centroid into each empty cluster.

    Only items whose cluster keeps at least one other member are eligible,
    so reseeding never empties another cluster.
    """
    k = distances.shape[1]
    counts = np.bincount(labels, minlength=k)
    empty = np.flatnonzero(counts == 0)
    if empty.size == 0:
        return labels

    labels = labels.copy()
    own = distances[np.arange(len(labels)), labels].copy()
    for c in empty:
        candidates = np.where(counts[labels] > 1, own, -np.inf)
        i = int(np.argmax(candidates))
        if not np.isfinite(candidates[i]):
            # Fewer distinct movable items than clusters
            break
        counts[labels[i]] -= 1
        counts[c] += 1
        labels[i] = c
        own[i] = -np.inf
    return labels


def _update_centroids(X, labels, previous):
    k = previous.shape[0]
    counts = np.bincount(labels, minlength=k)
    sums = np.zeros_like(previous)
    np.add.at(sums, labels, X)

    centroids = previous.copy()
    filled = counts > 0
    centroids[filled] = sums[filled] / counts[filled, None]
    return centroids


def _init_centroids(X, k, rng, init):
    """Pick k distinct items as starting centroids."""
    n = X.shape[0]
    if init == "random":
        return X[rng.choice(n, size=k, replace=False)].copy()

    # k-means++: sample each next item with probability proportional to D^2
    chosen = [int(rng.integers(n))]
    closest = squared_euclidean(X, X[chosen])[:, 0]
    for _ in range(1, k):
        total = closest.sum()
        if total > 0:
            idx = int(rng.choice(n, p=closest / total))
        else:
            idx = int(rng.choice(np.setdiff1d(np.arange(n), chosen)))
        chosen.append(idx)
        closest = np.minimum(closest, squared_euclidean(X, X[idx])[:, 0])
    return X[chosen].copy()


def _run_trial(X, k, rng, max_iter, init):
    """Lloyd iterations from one initialisation."""
    centroids = _init_centroids(X, k, rng, init)
    labels = None
    converged = False

    for n_iter in range(1, max_iter + 1):
        distances = squared_euclidean(X, centroids)
        # argmin keeps the first minimum: ties go to the lowest cluster id
        new_labels = _reseed_empty_clusters(np.argmin(distances, axis=1), distances)
        if labels is not None and np.array_equal(new_labels, labels):
            converged = True
            break
        labels = new_labels
        centroids = _update_centroids(X, labels, centroids)

    wcss = within_cluster_ss(X, labels, centroids)
    return labels, centroids, wcss, n_iter, converged


def _fit(X, k, n_starts, rng_seed, max_iter, init=INIT, n_jobs=None):
    """Multi-start k-means on a validated matrix; no warnings emitted."""
    trials = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(_run_trial)(
            X, k, np.random.default_rng([rng_seed, trial]), max_iter, init
        )
        for trial in range(n_starts)
    )

    best_trial = 0
    for trial, result in enumerate(trials):
        # Strict comparison keeps the earliest trial on ties
        if result[2] < trials[best_trial][2]:
            best_trial = trial

    labels, centroids, wcss, n_iter, converged = trials[best_trial]
    return Partition(
        labels=labels,
        centroids=centroids,
        wcss=wcss,
        n_iter=n_iter,
        converged=converged,
        trial=best_trial,
    )


def fit(
    data,
    k,
    n_starts=N_STARTS,
    rng_seed=RANDOM_SEED,
    max_iter=MAX_ITER,
    init=INIT,
    n_jobs=None,
):
    """
    Partition data into k clusters with multi-start k-means.

    Parameters:
    - data: N x D matrix of scaled feature vectors
    - k: number of clusters, 1 <= k <= N
    - n_starts: number of random initialisations; the lowest-WCSS run wins
    - rng_seed: non-negative integer; start t is seeded from (rng_seed, t)
    - max_iter: iteration cap per start
    - init: "k-means++" (D^2 weighted) or "random" (uniform distinct items)
    - n_jobs: joblib workers for the starts (None runs them sequentially)

    Returns a Partition. Emits a NonConvergence warning when the winning
    start stopped at max_iter.
    """
    X = check_feature_matrix(data)
    k = check_k(k, X.shape[0])
    n_starts = check_positive_int("n_starts", n_starts)
    max_iter = check_positive_int("max_iter", max_iter)
    rng_seed = check_seed(rng_seed)
    init = check_init(init)

    partition = _fit(X, k, n_starts, rng_seed, max_iter, init, n_jobs)
    if not partition.converged:
        warnings.warn(
            f"k-means with k={k} did not converge within max_iter={max_iter}; "
            f"returning the best of {n_starts} starts",
            NonConvergence,
            stacklevel=2,
        )
    return partition
