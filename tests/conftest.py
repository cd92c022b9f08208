import logging
import os

import networkx as nx
import pytest

from graphcluster.config import DEFAULT_CONFIG
from graphcluster.graph import EntityGraph
from graphcluster.records import Record


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch):
    # load_dotenv writes into os.environ; keep each test's environment private
    environ = os.environ.copy()
    for key in DEFAULT_CONFIG:
        environ.pop(key, None)
    monkeypatch.setattr(os, "environ", environ)


@pytest.fixture
def two_country_records():
    return [
        Record(entity="A", year=2020, indicator="Indicator1", series="Series1", value=10.0),
        Record(entity="B", year=2020, indicator="Indicator2", series="Series2", value=20.0),
    ]


@pytest.fixture
def two_triangles():
    """Two unit-weight triangles joined by a weak bridge, plus one isolated node."""
    g = nx.Graph()
    g.add_nodes_from(range(7))
    g.add_weighted_edges_from([
        (0, 1, 1.0), (1, 2, 1.0), (0, 2, 1.0),
        (3, 4, 1.0), (4, 5, 1.0), (3, 5, 1.0),
        (2, 3, 0.1),
    ])
    return EntityGraph(g, ["A", "B", "C", "D", "E", "F", "G"])


@pytest.fixture
def detach_file_handlers():
    """Drop file handlers that a test pointed at its tmp_path."""
    yield
    for name in list(logging.root.manager.loggerDict):
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            logger.removeHandler(handler)
            handler.close()
