import logging

import pytest

from graphcluster.clustering import GraphClustering, KMeansLabels
from graphcluster.community import CommunityPartition
from graphcluster.errors import InvalidClusterCount
from graphcluster.records import Record


def _records():
    rows = [
        ("Kenya", 2005, 3.0), ("Ghana", 2010, 1.0), ("Peru", 2015, 2.0),
        ("Kenya", 2015, 4.0), ("Chile", 2019, 6.0), ("Ghana", 2020, None),
    ]
    return [Record(entity=e, year=y, indicator="Enrolment", series="Primary", value=v) for e, y, v in rows]


def test_run_pipeline_returns_both_shapes(two_country_records):
    result = GraphClustering(two_country_records, n_clusters=2).run_pipeline()
    assert result.graph.node_count == 2
    assert isinstance(result.community_partition, CommunityPartition)
    assert isinstance(result.kmeans_labels, KMeansLabels)
    assert result.community_partition.groups == ((0,), (1,))
    assert len(result.kmeans_labels) == 2


def test_parallel_matches_sequential():
    sequential = GraphClustering(_records(), n_clusters=2, policy="temporal_decay").run_pipeline()
    parallel = GraphClustering(_records(), n_clusters=2, policy="temporal_decay", parallel=True).run_pipeline()
    assert sequential.community_partition == parallel.community_partition
    assert sequential.kmeans_labels == parallel.kmeans_labels


def test_empty_input_skips_kmeans():
    result = GraphClustering([], n_clusters=3).run_pipeline()
    assert result.graph.node_count == 0
    assert len(result.community_partition) == 0
    assert result.kmeans_labels is None


@pytest.mark.parametrize("parallel", [False, True])
def test_invalid_cluster_count_propagates(two_country_records, parallel):
    clustering = GraphClustering(two_country_records, n_clusters=5, parallel=parallel)
    with pytest.raises(InvalidClusterCount):
        clustering.run_pipeline()


def test_visualization_written_to_output_dir(tmp_path):
    clustering = GraphClustering(_records(), n_clusters=2, output_dir=tmp_path / "out")
    clustering.run_pipeline(create_visualizations=True)
    assert (tmp_path / "out" / "communities.png").exists()


def test_visualization_skipped_without_output_dir(monkeypatch, caplog, two_country_records):
    calls = []
    monkeypatch.setattr("graphcluster.clustering.plot_communities", lambda *args: calls.append(args))

    with caplog.at_level(logging.WARNING, logger="clustering"):
        result = GraphClustering(two_country_records, n_clusters=1).run_pipeline(create_visualizations=True)

    assert result.kmeans_labels.labels == (0, 0)
    assert calls == []
    assert "No output directory configured, skipping visualization" in caplog.text
