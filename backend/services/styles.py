"""Declarative style descriptors for projected elements.

Descriptors are surface-neutral records. Translation to a concrete
rendering API (e.g. a Cytoscape stylesheet) lives in ``adapters``.
"""

from dataclasses import dataclass

from models.display_model import VisualType


@dataclass(frozen=True)
class NodeStyle:
    """Look of a leaf display instance."""
    fill_color: str
    border_color: str
    shape: str
    text_color: str = "#fff"
    size: int = 60
    border_width: int = 2


@dataclass(frozen=True)
class EdgeStyle:
    """Look of a relationship or connector edge."""
    line_color: str
    line_style: str = "solid"
    width: int = 2
    target_arrow: str = "triangle"
    curve: str = "bezier"


@dataclass(frozen=True)
class CompoundStyle:
    """Look of a system containment node."""
    fill_color: str = "#f5f5f5"
    fill_opacity: float = 0.4
    border_color: str = "#9e9e9e"
    border_width: int = 2
    shape: str = "round-rectangle"
    padding: int = 20
    label_valign: str = "top"


@dataclass(frozen=True)
class HullStyle:
    """Look of a group overlay. Colour comes from the hull itself."""
    fill_opacity: float = 0.1
    border_width: int = 2
    border_opacity: float = 0.5
    border_style: str = "dashed"
    shape: str = "round-rectangle"
    font_size: int = 14
    z_index: int = -1


NODE_STYLES: dict[VisualType, NodeStyle] = {
    VisualType.SERVER: NodeStyle("#4CAF50", "#388E3C", "rectangle"),
    VisualType.DATABASE: NodeStyle("#FF9800", "#F57C00", "hexagon"),
    VisualType.APPLICATION: NodeStyle("#9C27B0", "#7B1FA2", "round-rectangle"),
    VisualType.NETWORK: NodeStyle("#2196F3", "#1976D2", "diamond"),
    VisualType.DEFAULT: NodeStyle("#757575", "#424242", "ellipse"),
}

EDGE_STYLES: dict[str, EdgeStyle] = {
    "depends_on": EdgeStyle("#F44336"),
    "connects_to": EdgeStyle("#2196F3"),
    "contains": EdgeStyle("#4CAF50", line_style="dashed"),
    "flows_to": EdgeStyle("#FF9800"),
    "default": EdgeStyle("#757575"),
}

CONNECTOR_STYLE = EdgeStyle("#9E9E9E", line_style="dashed", width=1, target_arrow="none")
CROSS_SYSTEM_STYLE = EdgeStyle("#757575", line_style="dotted")
COMPOUND_STYLE = CompoundStyle()
HULL_STYLE = HullStyle()

# Ordered: first match wins.
_VISUAL_TYPE_KEYWORDS: list[tuple[VisualType, tuple[str, ...]]] = [
    (VisualType.SERVER, ("server", "web")),
    (VisualType.DATABASE, ("database", "db")),
    (VisualType.APPLICATION, ("application", "app")),
    (VisualType.NETWORK, ("network", "switch", "router", "device")),
]


def visual_type_for(asset_type: str | None) -> VisualType:
    """Classify a free-form asset type name into a visual category."""
    lowered = (asset_type or "").lower()
    for visual_type, keywords in _VISUAL_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return visual_type
    return VisualType.DEFAULT


def node_style(visual_type: VisualType) -> NodeStyle:
    return NODE_STYLES.get(visual_type, NODE_STYLES[VisualType.DEFAULT])


def edge_style(relation_type: str | None) -> EdgeStyle:
    return EDGE_STYLES.get((relation_type or "").lower(), EDGE_STYLES["default"])
