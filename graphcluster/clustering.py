import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
from sklearn.cluster import KMeans
from sklearn.exceptions import ConvergenceWarning

from graphcluster.community import CommunityPartition, detect_communities
from graphcluster.errors import EmptyGraph, InvalidClusterCount
from graphcluster.graph import AggregationPolicy, EntityGraph, build_graph
from graphcluster.logger import setup_logger, log_function_call
from graphcluster.report import plot_communities


logger = setup_logger('clustering')


@dataclass(frozen=True)
class KMeansLabels:
    """Per-node k-means label, each in [0, k). Not a grouped partition."""
    k: int
    labels: Tuple[int, ...]

    def __len__(self):
        return len(self.labels)

    def groups(self) -> List[List[int]]:
        """Node indices per label; a label no node converged to gives an empty list."""
        grouped = [[] for _ in range(self.k)]
        for node, label in enumerate(self.labels):
            grouped[label].append(node)
        return grouped


@dataclass(frozen=True)
class PipelineResult:
    graph: EntityGraph
    community_partition: CommunityPartition
    kmeans_labels: Optional[KMeansLabels]


@log_function_call(logger)
def kmeans_partition(graph: EntityGraph, k, random_state=42, n_init=10, max_iter=300) -> KMeansLabels:
    """
    Cluster nodes by Euclidean distance between their adjacency rows.

    Seeding is k-means++ with a fixed random_state. Raises EmptyGraph on a
    zero-node graph and InvalidClusterCount when k is not in [1, n_nodes].
    """
    n_nodes = graph.node_count
    if n_nodes == 0:
        raise EmptyGraph("k-means needs at least one node")
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or not 1 <= k <= n_nodes:
        raise InvalidClusterCount(k, n_nodes)

    matrix = graph.adjacency_matrix()
    n_distinct = len(np.unique(matrix, axis=0))
    if n_distinct < k:
        logger.warning(f"Only {n_distinct} distinct adjacency rows for k={k}, some clusters will be empty")

    model = KMeans(n_clusters=int(k), init='k-means++', n_init=n_init,
                   max_iter=max_iter, random_state=random_state)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', ConvergenceWarning)
        labels = model.fit_predict(matrix)

    logger.info(f"k-means converged after {model.n_iter_} iterations")
    return KMeansLabels(k=int(k), labels=tuple(int(label) for label in labels))


class GraphClustering:
    """
    Builds the entity graph from records and partitions it two ways:
    Louvain communities and k-means over adjacency rows.
    """
    def __init__(self, records, n_clusters=3, policy=AggregationPolicy.SELF_WEIGHT, year_scale=1e-3,
                 resolution=1.0, random_state=42, output_dir=None, parallel=False):
        self.records = records
        self.n_clusters = n_clusters
        self.policy = AggregationPolicy(policy)
        self.year_scale = year_scale
        self.resolution = resolution
        self.random_state = random_state
        self.output_dir = Path(output_dir) if output_dir else None
        self.parallel = parallel

        self.entity_graph = None
        self.community_results = None
        self.kmeans_results = None

    def build_graph(self):
        self.entity_graph, _ = build_graph(self.records, policy=self.policy, year_scale=self.year_scale)
        return self.entity_graph

    def perform_community_detection(self):
        self.community_results = detect_communities(self.entity_graph, resolution=self.resolution)
        return self.community_results

    def perform_kmeans(self):
        self.kmeans_results = kmeans_partition(self.entity_graph, self.n_clusters, random_state=self.random_state)
        return self.kmeans_results

    def _kmeans_or_skip(self):
        try:
            return self.perform_kmeans()
        except EmptyGraph as exc:
            logger.warning(f"Skipping k-means: {exc}")
            return None

    def _run_partitioners(self):
        if not self.parallel:
            return self.perform_community_detection(), self._kmeans_or_skip()

        # the graph is frozen, both partitioners only read it
        with ThreadPoolExecutor(max_workers=2) as executor:
            community_future = executor.submit(self.perform_community_detection)
            kmeans_future = executor.submit(self._kmeans_or_skip)
            return community_future.result(), kmeans_future.result()

    @log_function_call(logger)
    def run_pipeline(self, create_visualizations=False) -> PipelineResult:
        """
        Executes the complete pipeline: graph construction, then both clusterings.
        InvalidClusterCount propagates; k-means on an empty graph is skipped.
        """
        self.build_graph()
        communities, kmeans = self._run_partitioners()
        result = PipelineResult(graph=self.entity_graph, community_partition=communities, kmeans_labels=kmeans)

        if create_visualizations:
            if self.output_dir is None:
                logger.warning("No output directory configured, skipping visualization")
            else:
                plot_communities(result, self.output_dir)
        return result
