"""Error taxonomy shared by ingestion, graph construction and clustering."""


class GraphClusteringError(Exception):
    """Base class for every error raised by the pipeline."""


class IngestionFailure(GraphClusteringError):
    """The input stream could not be read or parsed at all."""


class InvalidClusterCount(GraphClusteringError):
    """The requested k is outside [1, number of nodes]."""

    def __init__(self, k, n_nodes):
        self.k = k
        self.n_nodes = n_nodes
        super().__init__(f"k must be an integer in [1, {n_nodes}], got {k!r}")


class EmptyGraph(GraphClusteringError):
    """An operation needing at least one node ran on a zero-node graph."""
