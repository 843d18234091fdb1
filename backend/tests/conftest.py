"""Shared pytest fixtures for the projection test suite.

Fixtures:
    scenario_graph : A in Prod+Dev, B in Prod, edge A→B.
    grouped_graph  : Three assets spread over two systems and two groups.
"""

import pytest

from models.asset_graph import BusinessEdge, BusinessNode
from models.graph_model import AssetGraph


@pytest.fixture
def scenario_graph() -> AssetGraph:
    return AssetGraph(
        nodes=[
            BusinessNode(id="A", title="Web Frontend", asset_type="WebServer",
                         systems=["Prod", "Dev"]),
            BusinessNode(id="B", title="Orders DB", asset_type="Database",
                         systems=["Prod"]),
        ],
        edges=[
            BusinessEdge(id="e1", source_id="A", target_id="B",
                         relation_type="depends_on"),
        ],
    )


@pytest.fixture
def grouped_graph() -> AssetGraph:
    return AssetGraph(
        nodes=[
            BusinessNode(id="web", title="Web", systems=["Shop"],
                         groups=["Frontend", "Critical"]),
            BusinessNode(id="api", title="API", systems=["Shop", "Billing"],
                         groups=["Critical"]),
            BusinessNode(id="ledger", title="Ledger", systems=["Billing"],
                         groups=["Finance"]),
        ],
        edges=[
            BusinessEdge(id="r1", source_id="web", target_id="api",
                         relation_type="connects_to"),
            BusinessEdge(id="r2", source_id="api", target_id="ledger",
                         relation_type="flows_to"),
        ],
    )
