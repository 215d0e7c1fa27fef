import numpy as np
from sklearn.decomposition import PCA

from .validation import check_feature_matrix, check_seed


def _uniform_box(rng, X):
    mins = X.min(axis=0)
    maxs = X.max(axis=0)
    return rng.uniform(mins, maxs, size=X.shape)


def generate(data, rng_seed, pca_aligned=False):
    """
    Draw a structureless reference dataset with the same shape as data.

    Each feature is sampled independently and uniformly between its observed
    minimum and maximum. With pca_aligned=True the box is taken along the
    principal axes of the centered data and the sample is rotated back to
    the original coordinates.
    """
    X = check_feature_matrix(data)
    rng = np.random.default_rng(check_seed(rng_seed))

    if not pca_aligned:
        return _uniform_box(rng, X)

    pca = PCA(svd_solver="full")
    rotated = pca.fit_transform(X)
    return pca.inverse_transform(_uniform_box(rng, rotated))
