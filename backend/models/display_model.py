"""Pydantic models for the projected (renderable) graph."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from .asset_graph import Position


class ElementKind(str, Enum):
    """Kinds of elements handed to the rendering surface."""
    COMPOUND = "compound"
    NODE = "node"
    HULL = "hull"
    EDGE = "edge"


class RoutingStrategy(str, Enum):
    """Which rule resolved a business edge onto display instances."""
    DIRECT = "direct"
    SHARED_CONTEXT = "shared_context"
    CROSS_SYSTEM = "cross_system"


class VisualType(str, Enum):
    """Coarse asset categories used for node styling."""
    SERVER = "server"
    DATABASE = "database"
    APPLICATION = "application"
    NETWORK = "network"
    DEFAULT = "default"


class BoundingBox(BaseModel):
    """Axis-aligned box in rendered (model) coordinates."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @model_validator(mode="after")
    def _ordered_corners(self) -> "BoundingBox":
        """Swap inverted corners so width and height are never negative."""
        if self.min_x > self.max_x:
            self.min_x, self.max_x = self.max_x, self.min_x
        if self.min_y > self.max_y:
            self.min_y, self.max_y = self.max_y, self.min_y
        return self

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> "BoundingBox":
        """Build a box from its top-left corner and size."""
        return cls(min_x=x, min_y=y, max_x=x + width, max_y=y + height)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Position:
        return Position(x=(self.min_x + self.max_x) / 2, y=(self.min_y + self.max_y) / 2)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            min_x=min(self.min_x, other.min_x),
            min_y=min(self.min_y, other.min_y),
            max_x=max(self.max_x, other.max_x),
            max_y=max(self.max_y, other.max_y),
        )

    def expand(self, padding: float) -> "BoundingBox":
        return BoundingBox(
            min_x=self.min_x - padding,
            min_y=self.min_y - padding,
            max_x=self.max_x + padding,
            max_y=self.max_y + padding,
        )

    def at_least(self, min_size: float) -> "BoundingBox":
        """Grow symmetrically around the center until both sides reach min_size."""
        extra_x = max(0.0, min_size - self.width) / 2
        extra_y = max(0.0, min_size - self.height) / 2
        return BoundingBox(
            min_x=self.min_x - extra_x,
            min_y=self.min_y - extra_y,
            max_x=self.max_x + extra_x,
            max_y=self.max_y + extra_y,
        )


class SystemCompound(BaseModel):
    """Containment node representing one system."""
    compound_id: str
    system_name: str
    label: str


class DisplayInstance(BaseModel):
    """One visual occurrence of a business node in one system context."""
    display_id: str
    business_id: str
    label: str
    asset_type: str = "default"
    visual_type: VisualType = VisualType.DEFAULT
    system_context: Optional[str] = None
    parent_compound_id: Optional[str] = None
    is_multi_system_asset: bool = False
    multi_system_group_key: Optional[str] = None
    systems: list[str] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)
    position: Optional[Position] = None


class ConnectorEdge(BaseModel):
    """Synthetic edge linking two instances of the same multi-system asset."""
    display_id: str
    source_instance_id: str
    target_instance_id: str
    multi_system_group_key: str
    relation_type: str


class RoutedEdge(BaseModel):
    """A business edge rendered between two concrete display instances."""
    display_id: str
    business_edge_id: str
    source_instance_id: str
    target_instance_id: str
    system_context: Optional[str] = None
    routing: RoutingStrategy
    relation_type: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)


class HullRegion(BaseModel):
    """Translucent overlay enclosing the members of one group."""
    hull_id: str
    group_name: str
    bounding_box: BoundingBox
    member_count: int
    member_ids: list[str] = Field(default_factory=list)
    color: str
