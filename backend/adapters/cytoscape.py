"""Cytoscape.js adapter for projected elements and style descriptors.

Translates the surface-neutral element dicts produced by the projection and
hull engines into Cytoscape element JSON, and the style descriptors in
``services.styles`` into a Cytoscape stylesheet.
"""

from typing import Any

from models.display_model import ElementKind, VisualType
from services.styles import (
    COMPOUND_STYLE,
    CONNECTOR_STYLE,
    CROSS_SYSTEM_STYLE,
    EDGE_STYLES,
    HULL_STYLE,
    NODE_STYLES,
    EdgeStyle,
)


def _edge_rule(style: EdgeStyle) -> dict[str, Any]:
    return {
        "line-color": style.line_color,
        "target-arrow-color": style.line_color,
        "line-style": style.line_style,
        "width": style.width,
        "target-arrow-shape": style.target_arrow,
        "curve-style": style.curve,
    }


def build_stylesheet() -> list[dict[str, Any]]:
    """Cytoscape stylesheet covering every element kind and category."""
    sheet: list[dict[str, Any]] = [
        {
            "selector": "node",
            "style": {
                "label": "data(label)",
                "text-valign": "center",
                "text-halign": "center",
                "font-size": "12px",
                "overlay-opacity": 0,
            },
        },
        {
            "selector": "edge",
            "style": {
                "font-size": "10px",
                "text-rotation": "autorotate",
                "text-margin-y": -10,
            },
        },
        {"selector": "edge[label]", "style": {"label": "data(label)"}},
    ]

    for visual_type, style in NODE_STYLES.items():
        sheet.append({
            "selector": f"node.node-{visual_type.value}",
            "style": {
                "background-color": style.fill_color,
                "border-color": style.border_color,
                "border-width": style.border_width,
                "shape": style.shape,
                "color": style.text_color,
                "width": style.size,
                "height": style.size,
            },
        })

    for relation_type, style in EDGE_STYLES.items():
        sheet.append({"selector": f"edge.edge-{relation_type}", "style": _edge_rule(style)})
    sheet.append({"selector": "edge.cross-system", "style": _edge_rule(CROSS_SYSTEM_STYLE)})
    sheet.append({"selector": "edge.same-asset", "style": _edge_rule(CONNECTOR_STYLE)})

    sheet.append({
        "selector": "node.system-compound",
        "style": {
            "background-color": COMPOUND_STYLE.fill_color,
            "background-opacity": COMPOUND_STYLE.fill_opacity,
            "border-color": COMPOUND_STYLE.border_color,
            "border-width": COMPOUND_STYLE.border_width,
            "shape": COMPOUND_STYLE.shape,
            "padding": COMPOUND_STYLE.padding,
            "text-valign": COMPOUND_STYLE.label_valign,
        },
    })
    sheet.append({
        "selector": "node.group-hull",
        "style": {
            "background-color": "data(hullColor)",
            "border-color": "data(hullColor)",
            "color": "data(hullColor)",
            "background-opacity": HULL_STYLE.fill_opacity,
            "border-width": HULL_STYLE.border_width,
            "border-opacity": HULL_STYLE.border_opacity,
            "border-style": HULL_STYLE.border_style,
            "shape": HULL_STYLE.shape,
            "font-size": HULL_STYLE.font_size,
            "text-valign": "top",
            "z-index": HULL_STYLE.z_index,
            "events": "no",
        },
    })
    sheet.append({
        "selector": ":selected",
        "style": {
            "border-color": "#FF5722",
            "border-width": 4,
            "line-color": "#FF5722",
            "target-arrow-color": "#FF5722",
        },
    })
    return sheet


def _edge_classes(data: dict[str, Any]) -> str:
    if data.get("isConnector"):
        return "same-asset"
    relation = (data.get("relationType") or "").lower()
    classes = [f"edge-{relation}" if relation in EDGE_STYLES else "edge-default"]
    if data.get("routing") == "cross_system":
        classes.append("cross-system")
    return " ".join(classes)


def to_cytoscape(element: dict[str, Any]) -> dict[str, Any]:
    """Convert one neutral element dict into Cytoscape element JSON."""
    kind = element["kind"]
    data = {"id": element["id"], "label": element.get("label", ""), **element.get("data", {})}

    if kind == ElementKind.EDGE.value:
        data["source"] = element["source"]
        data["target"] = element["target"]
        return {"group": "edges", "data": data, "classes": _edge_classes(data)}

    if element.get("parent"):
        data["parent"] = element["parent"]

    cy_element: dict[str, Any] = {"group": "nodes", "data": data}
    if element.get("position"):
        cy_element["position"] = dict(element["position"])

    if kind == ElementKind.COMPOUND.value:
        cy_element["classes"] = "compound-node system-compound"
    elif kind == ElementKind.HULL.value:
        cy_element["classes"] = "group-hull"
        cy_element["selectable"] = False
        cy_element["grabbable"] = False
        cy_element["style"] = {"width": element["width"], "height": element["height"]}
    else:
        visual_type = data.get("visualType") or VisualType.DEFAULT.value
        classes = ["display-node", f"node-{visual_type}"]
        if data.get("isMultiSystemAsset"):
            classes.append("multi-system")
        cy_element["classes"] = " ".join(classes)

    return cy_element


def to_cytoscape_elements(elements: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [to_cytoscape(element) for element in elements]
