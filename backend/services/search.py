"""Label search over projected elements, for highlight-and-dim in the viewer."""

from typing import Any

from pydantic import BaseModel, Field

from models.display_model import ElementKind


class SearchResult(BaseModel):
    """Ids to highlight; everything else is dimmed by the viewer."""
    query: str
    matched_node_ids: list[str] = Field(default_factory=list)
    highlighted_edge_ids: list[str] = Field(default_factory=list)
    dimmed_ids: list[str] = Field(default_factory=list)


def search_elements(elements: list[dict[str, Any]], query: str) -> SearchResult:
    """Case-insensitive substring match on display instance labels.

    Edges are highlighted when either endpoint matches. Compounds and hulls
    are never matched or dimmed. A blank query matches nothing.
    """
    term = query.strip().lower()
    result = SearchResult(query=term)
    if not term:
        return result

    matched: set[str] = set()
    for element in elements:
        if element["kind"] != ElementKind.NODE.value:
            continue
        label = element.get("label") or element["id"]
        if term in label.lower():
            matched.add(element["id"])
            result.matched_node_ids.append(element["id"])
        else:
            result.dimmed_ids.append(element["id"])

    for element in elements:
        if element["kind"] != ElementKind.EDGE.value:
            continue
        if element["source"] in matched or element["target"] in matched:
            result.highlighted_edge_ids.append(element["id"])
        else:
            result.dimmed_ids.append(element["id"])

    return result
