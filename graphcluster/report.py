"""Text and figure rendering of pipeline results for inspection."""

from pathlib import Path
from typing import List, Tuple

import matplotlib.pyplot as plt
import networkx as nx

from graphcluster.logger import setup_logger


logger = setup_logger('report')


def format_clusters(partition, labels) -> List[str]:
    return [f"Cluster {i}: {names}" for i, names in enumerate(partition.labelled(labels))]


def format_kmeans(kmeans, labels) -> List[str]:
    lines = []
    for cluster, members in enumerate(kmeans.groups()):
        lines.append(f"k-means cluster {cluster}: {[labels[i] for i in members]}")
    return lines


def count_nodes_and_edges(graph) -> Tuple[int, int]:
    return graph.node_count, graph.edge_count


def print_summary(result):
    """Print graph size, the community partition and the k-means labels."""
    labels = result.graph.labels
    n_nodes, n_edges = count_nodes_and_edges(result.graph)

    print(f"\n{'='*60}")
    print("COMMUNITY DETECTION (LOUVAIN)")
    print(f"{'='*60}")
    for line in format_clusters(result.community_partition, labels):
        print(line)

    print(f"\n{'='*60}")
    print("K-MEANS ON ADJACENCY ROWS")
    print(f"{'='*60}")
    if result.kmeans_labels is None:
        print("Skipped (empty graph)")
    else:
        print(f"k-Means clustering results: {list(result.kmeans_labels.labels)}")
        for line in format_kmeans(result.kmeans_labels, labels):
            print(line)

    print(f"\n{'='*60}")
    print(f"Number of nodes in the graph: {n_nodes}")
    print(f"Number of edges in the graph: {n_edges}")
    print(f"{'='*60}")


def plot_communities(result, output_dir):
    """
    Draws the entity graph coloured by community and, when available, by
    k-means label. Saves communities.png under output_dir and returns its path.
    """
    graph = result.graph
    if graph.node_count == 0:
        logger.warning("Empty graph, nothing to plot")
        return None

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    pos = nx.spring_layout(graph.graph, seed=42, weight=None)
    node_labels = dict(enumerate(graph.labels))
    membership = result.community_partition.membership()
    panels = [('Louvain communities', [membership[n] for n in graph.graph.nodes])]
    if result.kmeans_labels is not None:
        panels.append((f'k-means (k={result.kmeans_labels.k})',
                       [result.kmeans_labels.labels[n] for n in graph.graph.nodes]))

    fig, axes = plt.subplots(1, len(panels), figsize=(10 * len(panels), 8), squeeze=False)
    for ax, (title, colours) in zip(axes[0], panels):
        nx.draw_networkx(graph.graph, pos, ax=ax, labels=node_labels, node_color=colours,
                         cmap=plt.cm.tab20, font_size=8, node_size=300)
        ax.set_title(title)
        ax.axis('off')

    path = output_dir / "communities.png"
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Community plot saved to {path}")
    return path
