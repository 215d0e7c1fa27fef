from .errors import (
    ClusteringError,
    InvalidInput,
    InvalidK,
    InvalidPartition,
    InvalidRange,
    NonConvergence,
)
from .gap_statistic import choose_k, select
from .kmeans_model import fit
from .reference import generate
from .results import GapCurve, Partition, SilhouetteReport
from .silhouette import evaluate

__version__ = "0.1.0"

__all__ = [
    "ClusteringError",
    "GapCurve",
    "InvalidInput",
    "InvalidK",
    "InvalidPartition",
    "InvalidRange",
    "NonConvergence",
    "Partition",
    "SilhouetteReport",
    "choose_k",
    "evaluate",
    "fit",
    "generate",
    "select",
]
