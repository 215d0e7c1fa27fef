"""Error kinds raised at the boundary of the clustering entry points."""


class ClusteringError(ValueError):
    """Base class for every error raised by the clustering engine."""


class InvalidInput(ClusteringError):
    """Malformed feature matrix or parameter (empty, ragged, non-finite)."""


class InvalidK(ClusteringError):
    """Requested number of clusters outside [1, N]."""


class InvalidRange(ClusteringError):
    """Gap statistic search range outside [1, N - 1]."""


class InvalidPartition(ClusteringError):
    """Partition that does not match the data it is evaluated on."""


class NonConvergence(UserWarning):
    """K-means hit the iteration cap before the assignment stabilised."""
