"""
Modularity-based community detection (Louvain) over an EntityGraph.

The procedure alternates a local moving phase with a coarsening phase until a
level makes no move. Nodes are visited in ascending index order and candidate
communities in ascending community order; a node only moves when the gain is
strictly greater than staying, so ties keep the lowest community index and the
result is fully deterministic for a fixed node ordering.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import networkx as nx

from graphcluster.graph import EntityGraph
from graphcluster.logger import setup_logger, log_function_call


logger = setup_logger('community')

_EPS = 1e-12


@dataclass(frozen=True)
class CommunityPartition:
    """Disjoint, exhaustive groups of node indices; size is data-determined."""
    groups: Tuple[Tuple[int, ...], ...]

    def __len__(self):
        return len(self.groups)

    def __iter__(self):
        return iter(self.groups)

    def membership(self) -> Dict[int, int]:
        """Map node index -> group index."""
        return {node: g for g, group in enumerate(self.groups) for node in group}

    def labelled(self, labels: Sequence[str]) -> List[List[str]]:
        return [[labels[i] for i in group] for group in self.groups]


def _one_level(graph: nx.Graph, m: float, resolution: float):
    n = graph.number_of_nodes()
    degrees = dict(graph.degree(weight='weight'))
    neighbours = {
        u: {v: data['weight'] for v, data in graph[u].items() if v != u}
        for u in range(n)
    }
    node2com = list(range(n))
    tot = [degrees[u] for u in range(n)]

    moved_any = False
    improved = True
    while improved:
        improved = False
        for u in range(n):
            degree = degrees[u]
            current = node2com[u]

            links: Dict[int, float] = {}
            for v, w in neighbours[u].items():
                links[node2com[v]] = links.get(node2com[v], 0.0) + w

            # take u out of its community before scoring
            tot[current] -= degree
            best_com = current
            best_gain = links.get(current, 0.0) - resolution * tot[current] * degree / (2 * m)
            for com in sorted(links):
                if com == current:
                    continue
                gain = links[com] - resolution * tot[com] * degree / (2 * m)
                if gain - best_gain > _EPS:
                    best_com, best_gain = com, gain
            tot[best_com] += degree

            if best_com != current:
                node2com[u] = best_com
                improved = True
                moved_any = True

    return node2com, moved_any


def _renumber(node2com: List[int]) -> List[int]:
    mapping: Dict[int, int] = {}
    for com in node2com:
        if com not in mapping:
            mapping[com] = len(mapping)
    return [mapping[com] for com in node2com]


def _aggregate(graph: nx.Graph, node2com: List[int], n_coms: int) -> nx.Graph:
    """Contract each community into a super-node; internal weight becomes a self-loop."""
    coarse = nx.Graph()
    coarse.add_nodes_from(range(n_coms))
    for u, v, w in graph.edges(data='weight'):
        cu, cv = node2com[u], node2com[v]
        previous = coarse.get_edge_data(cu, cv, {'weight': 0.0})['weight']
        coarse.add_edge(cu, cv, weight=previous + w)
    return coarse


def louvain_groups(graph: nx.Graph, resolution: float = 1.0) -> List[List[int]]:
    """
    Louvain on a graph whose nodes are 0..n-1.

    Returns sorted groups of node indices, ordered by their lowest member.
    """
    n = graph.number_of_nodes()
    if n == 0:
        return []
    members = [[u] for u in range(n)]
    m = graph.size(weight='weight')
    if m <= 0:
        return members

    level_graph = graph
    level = 0
    while True:
        node2com, moved = _one_level(level_graph, m, resolution)
        if not moved:
            break
        node2com = _renumber(node2com)
        n_coms = max(node2com) + 1

        merged = [[] for _ in range(n_coms)]
        for node, com in enumerate(node2com):
            merged[com].extend(members[node])
        members = merged

        level_graph = _aggregate(level_graph, node2com, n_coms)
        level += 1
        logger.debug(f"Level {level}: {n_coms} communities")

    return sorted(sorted(group) for group in members)


@log_function_call(logger)
def detect_communities(graph: EntityGraph, resolution: float = 1.0) -> CommunityPartition:
    """Partition the graph's nodes into modularity communities."""
    groups = louvain_groups(graph.graph, resolution=resolution)
    logger.info(f"Found {len(groups)} communities over {graph.node_count} nodes")
    return CommunityPartition(groups=tuple(tuple(g) for g in groups))


def modularity(graph: EntityGraph, partition: CommunityPartition, resolution: float = 1.0) -> float:
    """Weighted modularity of a partition, as computed by networkx."""
    return nx.community.modularity(
        graph.graph, [set(group) for group in partition.groups],
        weight='weight', resolution=resolution,
    )
