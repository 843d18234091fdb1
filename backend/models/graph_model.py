"""Container model for one business graph handed to the projector."""

from pydantic import BaseModel, Field

from .asset_graph import BusinessEdge, BusinessNode


class AssetGraph(BaseModel):
    """Complete business graph: assets plus their relationships."""
    title: str = "Untitled Graph"
    nodes: list[BusinessNode] = Field(default_factory=list)
    edges: list[BusinessEdge] = Field(default_factory=list)
