"""Projection router: business graph in, renderable elements out."""

from typing import Any, Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from adapters.cytoscape import build_stylesheet, to_cytoscape_elements
from models.graph_model import AssetGraph
from services.projection import project_graph
from services.search import SearchResult, search_elements
from services.session import SessionManager

router = APIRouter()
session_manager = SessionManager()

ElementFormat = Literal["elements", "cytoscape"]


class ProjectRequest(BaseModel):
    """Request body for project endpoint."""

    graph: AssetGraph
    session_id: str | None = None
    format: ElementFormat = "elements"


class ProjectResponse(BaseModel):
    """Response body for project endpoint."""

    session_id: str
    elements: list[dict[str, Any]]
    warnings: list[str]
    counts: dict[str, int]


class SearchRequest(BaseModel):
    """Request body for search endpoint."""

    session_id: str
    query: str


@router.post("/project", response_model=ProjectResponse)
async def project(request: ProjectRequest) -> ProjectResponse:
    """Project a business graph and remember it in the viewer session."""
    result = project_graph(request.graph)

    session = None
    if request.session_id:
        session = session_manager.get_session(request.session_id)
    if session is None:
        session = session_manager.create_session()
    session_manager.store_graph(session, request.graph)

    elements = result.to_elements()
    if request.format == "cytoscape":
        elements = to_cytoscape_elements(elements)

    return ProjectResponse(
        session_id=session.id,
        elements=elements,
        warnings=result.warnings,
        counts={
            "compounds": len(result.compounds),
            "instances": len(result.instances),
            "connectors": len(result.connectors),
            "edges": len(result.edges),
        },
    )


@router.post("/search", response_model=SearchResult)
async def search(request: SearchRequest) -> SearchResult:
    """Find display instances whose label contains the query."""
    session = session_manager.get_session(request.session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    if session.graph is None:
        raise HTTPException(status_code=400, detail="No graph in session")

    elements = project_graph(session.graph).to_elements()
    return search_elements(elements, request.query)


@router.get("/stylesheet")
async def stylesheet() -> list[dict[str, Any]]:
    """Cytoscape stylesheet matching the element classes emitted here."""
    return build_stylesheet()
