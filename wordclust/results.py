"""
Result types produced by the clustering engine.

Each result is frozen and stores read-only arrays; re-running an analysis
produces new objects instead of updating existing ones.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .distance import cluster_wcss, squared_euclidean
from .errors import InvalidInput


def _frozen_array(values, dtype):
    arr = np.array(values, dtype=dtype)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Partition:
    """One k-means solution: item labels, centroids and the achieved WCSS."""

    labels: np.ndarray
    centroids: np.ndarray
    wcss: float
    n_iter: int = 0
    converged: bool = True
    trial: int = 0

    def __post_init__(self):
        object.__setattr__(self, "labels", _frozen_array(self.labels, int))
        object.__setattr__(
            self, "centroids", _frozen_array(np.atleast_2d(self.centroids), float)
        )
        object.__setattr__(self, "wcss", float(self.wcss))

    @property
    def k(self):
        return self.centroids.shape[0]

    @property
    def assignment(self):
        return self.labels

    @property
    def sizes(self):
        return np.bincount(self.labels, minlength=self.k)

    def cluster_wcss(self, data):
        """Per-cluster share of the WCSS for the data this partition was fit on."""
        return cluster_wcss(data, self.labels, self.centroids)

    def predict(self, new_data):
        """Assign new (already scaled) items to their nearest centroid."""
        X = np.atleast_2d(np.asarray(new_data, dtype=float))
        if X.shape[1] != self.centroids.shape[1]:
            raise InvalidInput(
                f"new_data has {X.shape[1]} features, partition was fit on "
                f"{self.centroids.shape[1]}"
            )
        # argmin keeps the first minimum, so ties go to the lowest cluster id
        return np.argmin(squared_euclidean(X, self.centroids), axis=1)


@dataclass(frozen=True, eq=False)
class GapCurve:
    """Gap statistic and its standard error for k = 1..k_max."""

    ks: np.ndarray
    gap: np.ndarray
    se: np.ndarray
    log_wcss: np.ndarray
    ref_log_wcss: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "ks", _frozen_array(self.ks, int))
        for name in ("gap", "se", "log_wcss", "ref_log_wcss"):
            object.__setattr__(self, name, _frozen_array(getattr(self, name), float))

    def __len__(self):
        return len(self.ks)

    def __iter__(self):
        for k, gap, se in zip(self.ks, self.gap, self.se):
            yield int(k), float(gap), float(se)

    def as_frame(self):
        return pd.DataFrame(
            {
                "k": self.ks,
                "log_wcss": self.log_wcss,
                "ref_log_wcss": self.ref_log_wcss,
                "gap": self.gap,
                "se": self.se,
            }
        )


@dataclass(frozen=True, eq=False)
class SilhouetteReport:
    """Per-item silhouette widths and their per-cluster means."""

    widths: np.ndarray
    cluster_means: np.ndarray
    labels: np.ndarray
    neighbors: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "widths", _frozen_array(self.widths, float))
        object.__setattr__(
            self, "cluster_means", _frozen_array(self.cluster_means, float)
        )
        object.__setattr__(self, "labels", _frozen_array(self.labels, int))
        object.__setattr__(self, "neighbors", _frozen_array(self.neighbors, int))

    @property
    def average(self):
        return float(np.mean(self.widths))

    def as_frame(self, item_ids=None):
        frame = pd.DataFrame(
            {
                "cluster": self.labels,
                "neighbor": self.neighbors,
                "silhouette": self.widths,
            }
        )
        if item_ids is not None:
            frame.insert(0, "item", list(item_ids))
        return frame
