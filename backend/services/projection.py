"""Projection engine that turns a business asset graph into renderable elements.

The rendering surface only supports single-parent containment, while an
asset may belong to several systems at once. Projection strategy:
Phase 1: Build one compound per distinct system name
Phase 2: Project each business node into one or more display instances
Phase 3: Link instances of multi-system assets with connector edges
Phase 4: Route business edges onto concrete instance pairs (see routing.py)

Projection is a pure function of its input. The Projector owns its id
counter and lookup tables and resets them at the start of every call, so
projecting the same graph twice yields identical element lists.
"""

import logging
import re
from itertools import combinations
from typing import Any

from pydantic import BaseModel, Field

from models.asset_graph import BusinessNode
from models.display_model import (
    ConnectorEdge,
    DisplayInstance,
    ElementKind,
    RoutedEdge,
    SystemCompound,
)
from models.graph_model import AssetGraph
from services.routing import InstanceLookup, route_edges
from services.styles import visual_type_for

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9]")


class ProjectionConfig(BaseModel):
    """Configuration options for the projection."""
    connector_relation_type: str = Field(
        default="same_asset_multiple_systems",
        description="Relation type tag of synthetic same-asset connector edges",
    )
    cross_system_context: str = Field(
        default="cross_system",
        description="System context recorded on edges routed by the fallback rule",
    )
    compound_label_prefix: str = Field(
        default="System: ", description="Prefix of system compound labels"
    )


def sanitize_name(name: str) -> str:
    """Make a system or group name safe for use inside an element id."""
    return _UNSAFE_ID_CHARS.sub("_", name)


class ProjectionResult(BaseModel):
    """Everything one projection call produced."""
    compounds: list[SystemCompound] = Field(default_factory=list)
    instances: list[DisplayInstance] = Field(default_factory=list)
    connectors: list[ConnectorEdge] = Field(default_factory=list)
    edges: list[RoutedEdge] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def instances_for(self, business_id: str) -> list[DisplayInstance]:
        """All display instances projected from one business node."""
        return [i for i in self.instances if i.business_id == business_id]

    def business_id_for(self, display_id: str) -> str | None:
        """Reverse lookup from a display instance id to its business node."""
        for instance in self.instances:
            if instance.display_id == display_id:
                return instance.business_id
        return None

    def available_groups(self) -> list[str]:
        """Group names referenced by any instance, in order of first encounter."""
        groups: list[str] = []
        for instance in self.instances:
            for group in instance.groups:
                if group not in groups:
                    groups.append(group)
        return groups

    def to_elements(self) -> list[dict[str, Any]]:
        """Flatten into the element list consumed by the rendering surface.

        Compounds come first so that parents exist before their children.
        """
        elements: list[dict[str, Any]] = []

        for compound in self.compounds:
            elements.append({
                "kind": ElementKind.COMPOUND.value,
                "id": compound.compound_id,
                "label": compound.label,
                "parent": None,
                "data": {
                    "systemName": compound.system_name,
                    "isCompound": True,
                },
            })

        for inst in self.instances:
            elements.append({
                "kind": ElementKind.NODE.value,
                "id": inst.display_id,
                "label": inst.label,
                "parent": inst.parent_compound_id,
                "position": inst.position.model_dump() if inst.position else None,
                "data": {
                    "originalNodeId": inst.business_id,
                    "systemContext": inst.system_context,
                    "systems": list(inst.systems),
                    "groups": list(inst.groups),
                    "assetType": inst.asset_type,
                    "visualType": inst.visual_type.value,
                    "isMultiSystemAsset": inst.is_multi_system_asset,
                    "multiSystemGroupKey": inst.multi_system_group_key,
                    "properties": dict(inst.properties),
                },
            })

        for conn in self.connectors:
            elements.append({
                "kind": ElementKind.EDGE.value,
                "id": conn.display_id,
                "label": "",
                "source": conn.source_instance_id,
                "target": conn.target_instance_id,
                "data": {
                    "originalNodeId": conn.multi_system_group_key,
                    "multiSystemGroupKey": conn.multi_system_group_key,
                    "relationType": conn.relation_type,
                    "isConnector": True,
                },
            })

        for edge in self.edges:
            elements.append({
                "kind": ElementKind.EDGE.value,
                "id": edge.display_id,
                "label": edge.relation_type,
                "source": edge.source_instance_id,
                "target": edge.target_instance_id,
                "data": {
                    "originalEdgeId": edge.business_edge_id,
                    "relationType": edge.relation_type,
                    "systemContext": edge.system_context,
                    "routing": edge.routing.value,
                    "isConnector": False,
                    "properties": dict(edge.properties),
                },
            })

        return elements


class Projector:
    """Projects business graphs into display elements.

    One instance may be reused for many calls; every call starts from a
    clean id counter and empty lookup tables.
    """

    def __init__(self, config: ProjectionConfig | None = None) -> None:
        self.config = config or ProjectionConfig()
        self._counter = 0
        self._compound_ids: dict[str, str] = {}
        # business id -> system context -> instance
        self._instances: InstanceLookup = {}

    def reset(self) -> None:
        self._counter = 0
        self._compound_ids = {}
        self._instances = {}

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    # ---------- Phase 1: Compounds ----------

    def _build_compounds(self, nodes: list[BusinessNode]) -> list[SystemCompound]:
        compounds: list[SystemCompound] = []
        emitted: set[str] = set()

        for node in nodes:
            for system_name in node.systems:
                if system_name in self._compound_ids:
                    continue
                compound_id = f"compound-{sanitize_name(system_name)}"
                self._compound_ids[system_name] = compound_id
                if compound_id in emitted:
                    # Sanitized name collision: same logical container.
                    logger.debug(
                        "System %r reuses compound %s", system_name, compound_id
                    )
                    continue
                emitted.add(compound_id)
                compounds.append(SystemCompound(
                    compound_id=compound_id,
                    system_name=system_name,
                    label=f"{self.config.compound_label_prefix}{system_name}",
                ))

        return compounds

    # ---------- Phase 2 + 3: Instances and connectors ----------

    def _make_instance(
        self,
        node: BusinessNode,
        system_context: str | None,
        multi_system: bool,
    ) -> DisplayInstance:
        parent = self._compound_ids.get(system_context) if system_context else None
        return DisplayInstance(
            display_id=self._next_id("node"),
            business_id=node.id,
            label=node.title or f"Node {node.id}",
            asset_type=node.asset_type,
            visual_type=visual_type_for(node.asset_type),
            system_context=system_context,
            parent_compound_id=parent,
            is_multi_system_asset=multi_system,
            multi_system_group_key=node.id if multi_system else None,
            systems=list(node.systems),
            groups=list(node.groups),
            properties=dict(node.properties),
            position=node.position.model_copy() if node.position else None,
        )

    def _project_node(
        self, node: BusinessNode
    ) -> tuple[list[DisplayInstance], list[ConnectorEdge]]:
        if len(node.systems) <= 1:
            context = node.systems[0] if node.systems else None
            instance = self._make_instance(node, context, multi_system=False)
            self._instances[node.id] = {context: instance}
            return [instance], []

        by_context: dict[str | None, DisplayInstance] = {}
        for system_name in node.systems:
            by_context[system_name] = self._make_instance(
                node, system_name, multi_system=True
            )
        self._instances[node.id] = by_context
        instances = list(by_context.values())

        connectors = [
            ConnectorEdge(
                display_id=self._next_id("connector"),
                source_instance_id=first.display_id,
                target_instance_id=second.display_id,
                multi_system_group_key=node.id,
                relation_type=self.config.connector_relation_type,
            )
            for first, second in combinations(instances, 2)
        ]
        return instances, connectors

    # ---------- Main projection ----------

    def project(self, graph: AssetGraph) -> ProjectionResult:
        """Project a business graph into compounds, instances and edges."""
        self.reset()
        result = ProjectionResult()

        unique_nodes: list[BusinessNode] = []
        seen_ids: set[str] = set()
        for node in graph.nodes:
            if node.id in seen_ids:
                message = f"Node '{node.id}': duplicate id, later occurrence ignored"
                logger.warning(message)
                result.warnings.append(message)
                continue
            seen_ids.add(node.id)
            unique_nodes.append(node)

        result.compounds = self._build_compounds(unique_nodes)

        for node in unique_nodes:
            instances, connectors = self._project_node(node)
            result.instances.extend(instances)
            result.connectors.extend(connectors)

        routed, routing_warnings = route_edges(
            graph.edges,
            self._instances,
            cross_system_context=self.config.cross_system_context,
        )
        result.edges = routed
        result.warnings.extend(routing_warnings)

        logger.debug(
            "Projected %d nodes / %d edges into %d compounds, %d instances, "
            "%d connectors, %d routed edges",
            len(graph.nodes), len(graph.edges), len(result.compounds),
            len(result.instances), len(result.connectors), len(result.edges),
        )
        return result


def project_graph(
    graph: AssetGraph, config: ProjectionConfig | None = None
) -> ProjectionResult:
    """Convenience wrapper: project with a fresh Projector."""
    return Projector(config).project(graph)
