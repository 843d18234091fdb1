"""Edge router mapping business relationships onto display instances.

Connection policy, applied per business edge:
1. Direct: one candidate on each side, connect them.
2. Shared context: some side has several candidates; keep every pair whose
   system contexts are equal and non-null.
3. Fallback: no shared pair; connect the first candidate on each side and
   tag the edge as cross-system.
"""

import logging

from models.asset_graph import BusinessEdge
from models.display_model import DisplayInstance, RoutedEdge, RoutingStrategy

logger = logging.getLogger(__name__)

InstanceLookup = dict[str, dict[str | None, DisplayInstance]]


def _direct_context(source: DisplayInstance, target: DisplayInstance) -> str | None:
    """Source context wins; target context only fills a missing source one."""
    if source.system_context is not None:
        return source.system_context
    return target.system_context


def _shared_pairs(
    sources: list[DisplayInstance],
    targets: list[DisplayInstance],
) -> list[tuple[DisplayInstance, DisplayInstance]]:
    return [
        (src, tgt)
        for src in sources
        for tgt in targets
        if src.system_context is not None and src.system_context == tgt.system_context
    ]


def _routed(
    edge: BusinessEdge,
    display_id: str,
    source: DisplayInstance,
    target: DisplayInstance,
    context: str | None,
    routing: RoutingStrategy,
) -> RoutedEdge:
    return RoutedEdge(
        display_id=display_id,
        business_edge_id=edge.id,
        source_instance_id=source.display_id,
        target_instance_id=target.display_id,
        system_context=context,
        routing=routing,
        relation_type=edge.relation_type,
        properties=dict(edge.properties),
    )


def route_edge(
    edge: BusinessEdge,
    sources: list[DisplayInstance],
    targets: list[DisplayInstance],
    cross_system_context: str = "cross_system",
) -> list[RoutedEdge]:
    """Route one business edge given its non-empty candidate lists."""
    if len(sources) == 1 and len(targets) == 1:
        source, target = sources[0], targets[0]
        return [_routed(
            edge, edge.id, source, target,
            _direct_context(source, target), RoutingStrategy.DIRECT,
        )]

    pairs = _shared_pairs(sources, targets)
    if pairs:
        if len(pairs) == 1:
            source, target = pairs[0]
            return [_routed(
                edge, edge.id, source, target,
                source.system_context, RoutingStrategy.SHARED_CONTEXT,
            )]
        return [
            _routed(
                edge, f"{edge.id}_{index}", source, target,
                source.system_context, RoutingStrategy.SHARED_CONTEXT,
            )
            for index, (source, target) in enumerate(pairs)
        ]

    # No common membership. First candidates follow system declaration order.
    return [_routed(
        edge, edge.id, sources[0], targets[0],
        cross_system_context, RoutingStrategy.CROSS_SYSTEM,
    )]


def route_edges(
    edges: list[BusinessEdge],
    lookup: InstanceLookup,
    cross_system_context: str = "cross_system",
) -> tuple[list[RoutedEdge], list[str]]:
    """Route all business edges. Returns (routed edges, warnings).

    Edges referencing unknown nodes and repeated edge ids are skipped.
    """
    routed: list[RoutedEdge] = []
    warnings: list[str] = []
    seen_ids: set[str] = set()
    emitted_ids: set[str] = set()

    for edge in edges:
        if edge.id in seen_ids:
            message = f"Edge '{edge.id}': duplicate id, later occurrence ignored"
            logger.warning(message)
            warnings.append(message)
            continue
        seen_ids.add(edge.id)

        sources = list(lookup.get(edge.source_id, {}).values())
        targets = list(lookup.get(edge.target_id, {}).values())

        if not sources:
            message = f"Edge '{edge.id}': source '{edge.source_id}' not found"
            logger.warning(message)
            warnings.append(message)
            continue
        if not targets:
            message = f"Edge '{edge.id}': target '{edge.target_id}' not found"
            logger.warning(message)
            warnings.append(message)
            continue

        for routed_edge in route_edge(edge, sources, targets, cross_system_context):
            display_id = _unique_id(routed_edge.display_id, emitted_ids)
            if display_id != routed_edge.display_id:
                logger.debug(
                    "Edge '%s': display id %s taken, using %s",
                    edge.id, routed_edge.display_id, display_id,
                )
                routed_edge = routed_edge.model_copy(update={"display_id": display_id})
            emitted_ids.add(display_id)
            routed.append(routed_edge)

    return routed, warnings


def _unique_id(display_id: str, taken: set[str]) -> str:
    """Suffix ``display_id`` until it no longer clashes with an emitted edge."""
    candidate = display_id
    suffix = 1
    while candidate in taken:
        candidate = f"{display_id}_{suffix}"
        suffix += 1
    return candidate
