"""
Graph construction from statistical records.

Each distinct entity becomes one node (indexed in first-seen order) of an
undirected, weighted networkx graph. Record values are accumulated into edge
weights according to an aggregation policy.
"""

import math
from enum import Enum
from typing import Dict, Iterable, List, Tuple

import networkx as nx
import numpy as np
import pandas as pd

from graphcluster.errors import IngestionFailure
from graphcluster.logger import setup_logger, log_function_call
from graphcluster.records import Record


logger = setup_logger('graph')


class AggregationPolicy(str, Enum):
    SELF_WEIGHT = 'self_weight'
    TEMPORAL_DECAY = 'temporal_decay'


class EntityGraph:
    """
    Read-only view over a frozen networkx graph whose nodes are the integer
    indices of `labels`.
    """
    def __init__(self, graph: nx.Graph, labels: List[str]):
        self.graph = nx.freeze(graph)
        self.labels = tuple(labels)
        self._index = {label: i for i, label in enumerate(self.labels)}

    @property
    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def index_of(self, label: str) -> int:
        return self._index[label]

    def weight(self, i: int, j: int) -> float:
        """Accumulated weight of the pair (i, j); 0.0 when there is no edge."""
        data = self.graph.get_edge_data(i, j)
        return 0.0 if data is None else float(data['weight'])

    def adjacency_matrix(self) -> np.ndarray:
        """Dense symmetric n x n matrix of edge weights, self-loops on the diagonal."""
        return nx.to_numpy_array(self.graph, nodelist=list(range(self.node_count)), weight='weight', dtype=float)

    def adjacency_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.adjacency_matrix(), index=list(self.labels), columns=list(self.labels))

    def __repr__(self):
        return f"EntityGraph(nodes={self.node_count}, edges={self.edge_count})"


def _contribution(record: Record) -> float:
    if record.value is None or not math.isfinite(record.value):
        return 0.0
    return float(record.value)


def _accumulate(graph: nx.Graph, i: int, j: int, amount: float) -> None:
    if graph.has_edge(i, j):
        graph[i][j]['weight'] += amount
    else:
        graph.add_edge(i, j, weight=amount)


def _iter_records(records: Iterable[Record]):
    """Yield from the upstream stream, reporting its own failures as IngestionFailure."""
    iterator = iter(records)
    n_seen = 0
    while True:
        try:
            record = next(iterator)
        except StopIteration:
            return
        except IngestionFailure:
            raise
        except Exception as exc:
            raise IngestionFailure(f"Record stream failed after {n_seen} records: {exc}") from exc
        n_seen += 1
        yield record


@log_function_call(logger)
def build_graph(records: Iterable[Record], policy=AggregationPolicy.SELF_WEIGHT,
                year_scale: float = 1e-3) -> Tuple[EntityGraph, List[str]]:
    """
    Build the entity graph from a record stream.

    Policies
    --------
    self_weight : weight(i, i) += value for the record's entity i.
    temporal_decay : value * year * year_scale is added to every pair (i, j)
        where j is any node already in the graph, i included. Nodes first seen
        later never receive earlier contributions, so the result depends on
        record order. Records without a year fall back to self_weight.

    Missing or non-finite values contribute 0.0 but still create the edge.
    """
    policy = AggregationPolicy(policy)

    graph = nx.Graph()
    node_indices: Dict[str, int] = {}
    labels: List[str] = []

    for record in _iter_records(records):
        entity = record.entity
        if entity not in node_indices:
            node_indices[entity] = len(labels)
            labels.append(entity)
            graph.add_node(node_indices[entity], label=entity)
        i = node_indices[entity]
        value = _contribution(record)

        if policy is AggregationPolicy.SELF_WEIGHT or record.year is None:
            _accumulate(graph, i, i, value)
        else:
            scaled = value * record.year * year_scale
            for j in range(len(labels)):
                _accumulate(graph, i, j, scaled)

    logger.info(f"Built graph with {graph.number_of_nodes()} nodes and "
                f"{graph.number_of_edges()} edges ({policy.value})")
    return EntityGraph(graph, labels), labels
