"""Unit tests for compound building and instance projection."""

from models.asset_graph import BusinessNode, Position
from models.display_model import RoutingStrategy, VisualType
from models.graph_model import AssetGraph
from services.projection import (
    ProjectionConfig,
    Projector,
    project_graph,
    sanitize_name,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _node(node_id: str, systems: list[str] | None = None, **kwargs) -> BusinessNode:
    return BusinessNode(id=node_id, title=kwargs.pop("title", node_id),
                        systems=systems or [], **kwargs)


def _elem_dict(elements: list[dict]) -> dict[str, dict]:
    return {e["id"]: e for e in elements}


# ---------------------------------------------------------------------------
# Basic tests
# ---------------------------------------------------------------------------

def test_empty_graph():
    """Empty input projects to an empty element list without warnings."""
    result = project_graph(AssetGraph())

    assert result.to_elements() == []
    assert result.warnings == []


def test_business_node_collapses_repeated_memberships():
    node = BusinessNode(id="n1", systems=["Prod", "Prod", "Dev"], groups=["g", "g"])

    assert node.systems == ["Prod", "Dev"]
    assert node.groups == ["g"]


def test_node_without_systems():
    """Zero systems: one instance, no parent, no compound."""
    result = project_graph(AssetGraph(nodes=[_node("C")]))

    assert result.compounds == []
    assert len(result.instances) == 1
    instance = result.instances[0]
    assert instance.parent_compound_id is None
    assert instance.system_context is None
    assert instance.is_multi_system_asset is False
    assert instance.multi_system_group_key is None


def test_node_with_single_system():
    result = project_graph(AssetGraph(nodes=[_node("n1", ["Prod"])]))

    assert [c.compound_id for c in result.compounds] == ["compound-Prod"]
    assert len(result.instances) == 1
    instance = result.instances[0]
    assert instance.parent_compound_id == "compound-Prod"
    assert instance.system_context == "Prod"
    assert instance.is_multi_system_asset is False
    assert result.connectors == []


def test_label_falls_back_to_business_id():
    result = project_graph(AssetGraph(nodes=[BusinessNode(id="n7")]))

    assert result.instances[0].label == "Node n7"


# ---------------------------------------------------------------------------
# Compounds
# ---------------------------------------------------------------------------

def test_compounds_in_first_encounter_order():
    graph = AssetGraph(nodes=[
        _node("a", ["Dev"]),
        _node("b", ["Prod", "Dev"]),
        _node("c", ["Test"]),
    ])
    result = project_graph(graph)

    assert [c.system_name for c in result.compounds] == ["Dev", "Prod", "Test"]
    assert result.compounds[0].label == "System: Dev"


def test_sanitized_system_name_collision_reuses_compound():
    """'Prod A' and 'Prod_A' share one container."""
    graph = AssetGraph(nodes=[_node("x", ["Prod A"]), _node("y", ["Prod_A"])])
    result = project_graph(graph)

    assert len(result.compounds) == 1
    assert {i.parent_compound_id for i in result.instances} == {"compound-Prod_A"}
    assert result.warnings == []


def test_sanitize_name():
    assert sanitize_name("Prod / EU-1") == "Prod___EU_1"


def test_custom_compound_label_prefix():
    config = ProjectionConfig(compound_label_prefix="")
    result = project_graph(AssetGraph(nodes=[_node("a", ["Core"])]), config)

    assert result.compounds[0].label == "Core"


# ---------------------------------------------------------------------------
# Multi-system fan-out
# ---------------------------------------------------------------------------

def test_multi_system_node_fans_out():
    """k systems produce k instances and k*(k-1)/2 connectors."""
    systems = ["S1", "S2", "S3", "S4"]
    result = project_graph(AssetGraph(nodes=[_node("m", systems)]))

    assert len(result.instances) == 4
    assert [i.system_context for i in result.instances] == systems
    assert all(i.is_multi_system_asset for i in result.instances)
    assert all(i.multi_system_group_key == "m" for i in result.instances)
    assert [i.parent_compound_id for i in result.instances] == [
        f"compound-{s}" for s in systems
    ]

    assert len(result.connectors) == 6
    assert all(c.multi_system_group_key == "m" for c in result.connectors)
    pairs = {frozenset((c.source_instance_id, c.target_instance_id))
             for c in result.connectors}
    assert len(pairs) == 6
    assert all(c.relation_type == "same_asset_multiple_systems"
               for c in result.connectors)


def test_multi_system_instances_keep_groups_and_position():
    node = _node("m", ["S1", "S2"], groups=["Critical", "PCI"],
                 position=Position(x=10, y=20))
    result = project_graph(AssetGraph(nodes=[node]))

    for instance in result.instances:
        assert instance.groups == ["Critical", "PCI"]
        assert instance.position == Position(x=10, y=20)


def test_connector_relation_type_is_configurable():
    config = ProjectionConfig(connector_relation_type="twin")
    result = project_graph(AssetGraph(nodes=[_node("m", ["S1", "S2"])]), config)

    assert result.connectors[0].relation_type == "twin"


# ---------------------------------------------------------------------------
# Scenario from the viewer: A in Prod+Dev, B in Prod
# ---------------------------------------------------------------------------

def test_scenario_prod_dev(scenario_graph):
    result = project_graph(scenario_graph)

    assert [c.system_name for c in result.compounds] == ["Prod", "Dev"]

    a_instances = result.instances_for("A")
    assert [i.system_context for i in a_instances] == ["Prod", "Dev"]
    assert len(result.connectors) == 1

    b_instances = result.instances_for("B")
    assert len(b_instances) == 1
    assert b_instances[0].parent_compound_id == "compound-Prod"

    assert len(result.edges) == 1
    edge = result.edges[0]
    assert edge.display_id == "e1"
    assert edge.source_instance_id == a_instances[0].display_id
    assert edge.target_instance_id == b_instances[0].display_id
    assert edge.system_context == "Prod"
    assert edge.routing == RoutingStrategy.SHARED_CONTEXT


def test_reverse_lookup(scenario_graph):
    result = project_graph(scenario_graph)

    for instance in result.instances:
        assert result.business_id_for(instance.display_id) == instance.business_id
    assert result.business_id_for("compound-Prod") is None


def test_available_groups(grouped_graph):
    result = project_graph(grouped_graph)

    assert result.available_groups() == ["Frontend", "Critical", "Finance"]


# ---------------------------------------------------------------------------
# Idempotence and ids
# ---------------------------------------------------------------------------

def test_reprojection_is_idempotent(grouped_graph):
    projector = Projector()
    first = projector.project(grouped_graph).to_elements()
    second = projector.project(grouped_graph).to_elements()

    assert first == second
    assert first == project_graph(grouped_graph).to_elements()


def test_display_ids_unique(grouped_graph):
    elements = project_graph(grouped_graph).to_elements()
    ids = [e["id"] for e in elements]

    assert len(ids) == len(set(ids))


def test_duplicate_node_id_keeps_first():
    graph = AssetGraph(nodes=[
        _node("n1", ["Prod"], title="First"),
        _node("n1", ["Dev"], title="Second"),
    ])
    result = project_graph(graph)

    assert [i.label for i in result.instances] == ["First"]
    assert [c.system_name for c in result.compounds] == ["Prod"]
    assert len(result.warnings) == 1
    assert "duplicate" in result.warnings[0]


# ---------------------------------------------------------------------------
# Element list
# ---------------------------------------------------------------------------

def test_element_list_shape(scenario_graph):
    elements = project_graph(scenario_graph).to_elements()
    kinds = [e["kind"] for e in elements]

    # Parents before children
    assert kinds[:2] == ["compound", "compound"]
    assert kinds.count("node") == 3
    assert kinds.count("edge") == 2

    by_id = _elem_dict(elements)
    assert by_id["compound-Prod"]["data"]["isCompound"] is True

    b_node = next(e for e in elements
                  if e["kind"] == "node" and e["data"]["originalNodeId"] == "B")
    assert b_node["parent"] == "compound-Prod"
    assert b_node["data"]["visualType"] == VisualType.DATABASE.value

    connector = next(e for e in elements if e["kind"] == "edge"
                     and e["data"]["isConnector"])
    assert connector["data"]["multiSystemGroupKey"] == "A"

    routed = by_id["e1"]
    assert routed["data"]["originalEdgeId"] == "e1"
    assert routed["data"]["routing"] == "shared_context"
    assert routed["label"] == "depends_on"


def test_position_hint_in_elements():
    node = _node("p", position=Position(x=5, y=-3))
    elements = project_graph(AssetGraph(nodes=[node])).to_elements()

    assert elements[0]["position"] == {"x": 5, "y": -3}
