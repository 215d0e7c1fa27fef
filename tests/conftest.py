import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")


@pytest.fixture
def four_points():
    return np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 0.0], [10.0, 1.0]])


@pytest.fixture
def blobs():
    rng = np.random.default_rng(0)
    centers = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 10.0]])
    X = np.vstack([c + rng.normal(0, 0.3, size=(20, 2)) for c in centers])
    labels = np.repeat(np.arange(3), 20)
    return X, labels
