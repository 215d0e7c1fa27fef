"""
Gap statistic selection of the number of clusters.

For every candidate k the real data and n_refs structureless reference
datasets are clustered; the gap is the mean reference log WCSS minus the
real log WCSS (Tibshirani, Walther & Hastie, 2001).
"""

import warnings

import numpy as np
from joblib import Parallel, delayed

from .config import (
    INIT,
    K_MAX,
    MAX_ITER,
    N_REFS,
    N_STARTS,
    RANDOM_SEED,
    SELECTION_METHOD,
)
from .errors import InvalidInput, NonConvergence
from .kmeans_model import _fit
from .reference import generate
from .results import GapCurve
from .validation import (
    check_feature_matrix,
    check_init,
    check_k_max,
    check_positive_int,
    check_seed,
    derive_seed,
)

METHODS = ("tibshirani", "globalmax", "firstmax")


def _log_wcss(wcss):
    # Floor at the smallest positive float so exact fits stay finite
    return float(np.log(max(wcss, np.finfo(float).tiny)))


def _fit_one(X, k, slot, rng_seed, n_starts, max_iter, init, pca_aligned):
    """Fit the real data (slot 0) or reference dataset `slot` at k clusters."""
    if slot == 0:
        sample = X
    else:
        # Same reference dataset for every k
        sample = generate(X, derive_seed(rng_seed, 0, slot), pca_aligned)
    fit_seed = derive_seed(rng_seed, k, slot)
    partition = _fit(sample, k, n_starts, fit_seed, max_iter, init)
    return k, slot, partition


def choose_k(curve, method=SELECTION_METHOD):
    """
    Pick the number of clusters from a gap curve.

    - "tibshirani": smallest k with gap(k) >= gap(k+1) - se(k+1), else k_max
    - "globalmax": k with the largest gap
    - "firstmax": first local maximum of the gap, else k_max
    """
    if method not in METHODS:
        raise InvalidInput(f"method must be one of {METHODS}, got {method!r}")

    ks, gap, se = curve.ks, curve.gap, curve.se
    if method == "globalmax":
        return int(ks[np.argmax(gap)])

    for i in range(len(ks) - 1):
        threshold = gap[i + 1] - se[i + 1] if method == "tibshirani" else gap[i + 1]
        if gap[i] >= threshold:
            return int(ks[i])
    return int(ks[-1])


def select(
    data,
    k_max=K_MAX,
    n_refs=N_REFS,
    n_starts=N_STARTS,
    rng_seed=RANDOM_SEED,
    pca_aligned=False,
    method=SELECTION_METHOD,
    max_iter=MAX_ITER,
    init=INIT,
    n_jobs=None,
    verbose=False,
):
    """
    Estimate the number of clusters with the gap statistic.

    Runs k_max * (1 + n_refs) independent k-means fits. Every fit is seeded
    from (rng_seed, k, slot), so the result does not depend on n_jobs.

    Returns (chosen_k, GapCurve, {k: Partition of the real data}).
    """
    X = check_feature_matrix(data)
    k_max = check_k_max(k_max, X.shape[0])
    n_refs = check_positive_int("n_refs", n_refs)
    n_starts = check_positive_int("n_starts", n_starts)
    max_iter = check_positive_int("max_iter", max_iter)
    rng_seed = check_seed(rng_seed)
    init = check_init(init)
    if method not in METHODS:
        raise InvalidInput(f"method must be one of {METHODS}, got {method!r}")

    if verbose:
        print(
            f"Computing gap statistic for K=1..{k_max} "
            f"({n_refs} reference datasets, {n_starts} starts per fit)..."
        )

    fits = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(_fit_one)(
            X, k, slot, rng_seed, n_starts, max_iter, init, pca_aligned
        )
        for k in range(1, k_max + 1)
        for slot in range(n_refs + 1)
    )

    log_real = np.empty(k_max)
    log_ref = np.empty((k_max, n_refs))
    partitions = {}
    not_converged = 0
    for k, slot, partition in fits:
        not_converged += not partition.converged
        if slot == 0:
            log_real[k - 1] = _log_wcss(partition.wcss)
            partitions[k] = partition
        else:
            log_ref[k - 1, slot - 1] = _log_wcss(partition.wcss)

    ref_mean = log_ref.mean(axis=1)
    if n_refs > 1:
        sd = log_ref.std(axis=1, ddof=1)
    else:
        sd = np.zeros(k_max)

    curve = GapCurve(
        ks=np.arange(1, k_max + 1),
        gap=ref_mean - log_real,
        se=sd * np.sqrt(1 + 1 / n_refs),
        log_wcss=log_real,
        ref_log_wcss=ref_mean,
    )
    chosen_k = choose_k(curve, method)

    if not_converged:
        warnings.warn(
            f"{not_converged} of {len(fits)} k-means fits hit max_iter={max_iter} "
            f"without converging",
            NonConvergence,
            stacklevel=2,
        )

    if verbose:
        for k, gap, se in curve:
            print(f"  K={k}: gap={gap:.4f} (se={se:.4f})")
        print(f"Optimal K (gap statistic, {method}): {chosen_k}")

    return chosen_k, curve, partitions
