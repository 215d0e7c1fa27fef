import numbers

import numpy as np

from .errors import InvalidInput, InvalidK, InvalidRange


def check_feature_matrix(data):
    """
    Convert a feature matrix to a read-only 2-D float array.

    Raises InvalidInput for empty, ragged, non-numeric or non-finite input.
    """
    try:
        X = np.array(data, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInput(
            f"data must be a rectangular numeric matrix with the same number "
            f"of features for every item: {e}"
        ) from e

    if X.ndim != 2:
        raise InvalidInput(
            f"data must be 2-dimensional (items x features), got ndim={X.ndim}"
        )
    if X.shape[0] == 0:
        raise InvalidInput("data has zero items")
    if X.shape[1] == 0:
        raise InvalidInput("data has zero features")
    if not np.all(np.isfinite(X)):
        bad = int(np.sum(~np.isfinite(X)))
        raise InvalidInput(f"data contains {bad} NaN or infinite values")

    X.setflags(write=False)
    return X


def _is_int(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def check_positive_int(name, value):
    if not _is_int(value) or value < 1:
        raise InvalidInput(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def check_seed(rng_seed):
    if not _is_int(rng_seed) or rng_seed < 0:
        raise InvalidInput(
            f"rng_seed must be a non-negative integer, got {rng_seed!r}"
        )
    return int(rng_seed)


def check_k(k, n_items):
    if not _is_int(k) or not 1 <= k <= n_items:
        raise InvalidK(f"k must be an integer in [1, {n_items}], got k={k!r}")
    return int(k)


def check_k_max(k_max, n_items):
    if not _is_int(k_max) or not 1 <= k_max <= n_items - 1:
        raise InvalidRange(
            f"k_max must be an integer in [1, {n_items - 1}] for {n_items} "
            f"items, got k_max={k_max!r}"
        )
    return int(k_max)


def derive_seed(rng_seed, *key):
    """Deterministic child seed for (rng_seed, *key), independent of call order."""
    seq = np.random.SeedSequence([rng_seed, *[int(part) for part in key]])
    return int(seq.generate_state(1)[0])


INITS = ("k-means++", "random")


def check_init(init):
    if init not in INITS:
        raise InvalidInput(f"init must be one of {INITS}, got {init!r}")
    return init
