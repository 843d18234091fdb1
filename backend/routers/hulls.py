"""Hull router: group overlays recomputed from the rendered scene."""

from typing import Any, Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from adapters.cytoscape import to_cytoscape_elements
from models.display_model import BoundingBox
from services.hulls import HullOverlayEngine, hull_to_element
from services.projection import project_graph
from services.session import SessionManager, ViewerSession

router = APIRouter()
session_manager = SessionManager()


class BoundsRequest(BaseModel):
    """Current rendered extents, keyed by display instance id."""

    session_id: str
    bounds: dict[str, BoundingBox]
    format: Literal["elements", "cytoscape"] = "elements"


class VisibilityRequest(BaseModel):
    """Request body for the group visibility toggle."""

    session_id: str
    group_name: str
    visible: bool
    format: Literal["elements", "cytoscape"] = "elements"


class ColorRequest(BaseModel):
    """Request body for a group colour override."""

    session_id: str
    group_name: str
    color: str
    format: Literal["elements", "cytoscape"] = "elements"


class GroupState(BaseModel):
    """Overlay settings of one group."""

    name: str
    visible: bool
    color: str


class HullsResponse(BaseModel):
    """Response body for hull endpoints."""

    session_id: str
    hulls: list[dict[str, Any]]
    groups: list[GroupState]


def _get_session(session_id: str) -> ViewerSession:
    """Retrieve a session that already holds a projected graph.

    Raises:
        HTTPException: If session not found or no graph was projected.
    """
    session = session_manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    if session.graph is None:
        raise HTTPException(status_code=400, detail="No graph in session")
    return session


def _engine_for(session: ViewerSession) -> HullOverlayEngine:
    # Re-projection is deterministic, so instance ids match what the client rendered.
    instances = project_graph(session.graph).instances
    return HullOverlayEngine(
        instances,
        lambda ids: {i: session.bounds[i] for i in ids if i in session.bounds},
        visibility=session.group_visibility,
        colors=session.group_colors,
    )


def _response(
    session: ViewerSession, engine: HullOverlayEngine, fmt: str
) -> HullsResponse:
    hulls = [hull_to_element(region) for region in engine.regions]
    if fmt == "cytoscape":
        hulls = to_cytoscape_elements(hulls)
    visibility = engine.visibility_states()
    groups = [
        GroupState(name=name, visible=visibility[name], color=engine.color_for(name))
        for name in engine.available_groups()
    ]
    return HullsResponse(session_id=session.id, hulls=hulls, groups=groups)


@router.post("/hulls", response_model=HullsResponse)
async def compute_hulls(request: BoundsRequest) -> HullsResponse:
    """Recompute hulls after initial render or a settled node move."""
    session = _get_session(request.session_id)
    session.bounds = dict(request.bounds)
    engine = _engine_for(session)
    engine.on_move_settled()
    return _response(session, engine, request.format)


@router.post("/hulls/visibility", response_model=HullsResponse)
async def set_visibility(request: VisibilityRequest) -> HullsResponse:
    """Show or hide one group's hull and recompute from the last known bounds."""
    session = _get_session(request.session_id)
    session.group_visibility[request.group_name] = request.visible
    engine = _engine_for(session)
    engine.set_group_visibility(request.group_name, request.visible)
    return _response(session, engine, request.format)


@router.post("/hulls/color", response_model=HullsResponse)
async def set_color(request: ColorRequest) -> HullsResponse:
    """Override one group's hull colour."""
    session = _get_session(request.session_id)
    session.group_colors[request.group_name] = request.color
    engine = _engine_for(session)
    engine.set_group_color(request.group_name, request.color)
    return _response(session, engine, request.format)


@router.get("/groups/{session_id}", response_model=list[GroupState])
async def list_groups(session_id: str) -> list[GroupState]:
    """Known groups of the session's graph with their overlay settings."""
    session = _get_session(session_id)
    engine = _engine_for(session)
    visibility = engine.visibility_states()
    return [
        GroupState(name=name, visible=visibility[name], color=engine.color_for(name))
        for name in engine.available_groups()
    ]
