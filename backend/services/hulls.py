"""Hull overlay engine: bounding regions around the members of each group.

Hulls are recomputed from live instance geometry, never diffed: every call
replaces the previous regions. Recomputation is triggered explicitly by the
caller (initial render, group visibility toggle, node move settled) and is
not debounced here.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from models.display_model import BoundingBox, DisplayInstance, ElementKind, HullRegion
from services.projection import sanitize_name

logger = logging.getLogger(__name__)

DEFAULT_PALETTE = [
    "#FF9800",
    "#9C27B0",
    "#2196F3",
    "#4CAF50",
    "#F44336",
    "#FF5722",
    "#00BCD4",
    "#795548",
]

BoundsProvider = Callable[[list[str]], Mapping[str, BoundingBox]]
HullListener = Callable[[list[HullRegion]], None]


class HullConfig(BaseModel):
    """Configuration options for hull geometry and colouring."""
    padding: float = Field(default=60, description="Space added around member extents")
    min_size: float = Field(
        default=120, description="Minimum hull width and height"
    )
    palette: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PALETTE),
        description="Fixed colour palette indexed by group name hash",
    )


def _name_hash(name: str) -> int:
    """32-bit signed string hash (h * 31 + code point)."""
    h = 0
    for ch in name:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def group_color(group_name: str, palette: list[str] | None = None) -> str:
    """Deterministic palette colour for a group name."""
    colors = palette or DEFAULT_PALETTE
    return colors[abs(_name_hash(group_name)) % len(colors)]


def hull_id_for(group_name: str) -> str:
    return f"hull-{sanitize_name(group_name)}"


def compute_hull_regions(
    instances: Iterable[DisplayInstance],
    bounds: Mapping[str, BoundingBox],
    visibility: Mapping[str, bool] | None = None,
    color_overrides: Mapping[str, str] | None = None,
    config: HullConfig | None = None,
) -> list[HullRegion]:
    """Compute one hull region per visible group with at least one member.

    Instances without a bounding box (not rendered) are ignored.
    """
    config = config or HullConfig()
    visibility = visibility or {}
    color_overrides = color_overrides or {}

    # Keyed by hull id: groups whose names sanitize alike share one region,
    # named after the first group seen.
    members: dict[str, list[tuple[str, BoundingBox]]] = {}
    names: dict[str, str] = {}
    for instance in instances:
        box = bounds.get(instance.display_id)
        if box is None:
            continue
        for group in instance.groups:
            hull_id = hull_id_for(group)
            names.setdefault(hull_id, group)
            hull_members = members.setdefault(hull_id, [])
            if hull_members and hull_members[-1][0] == instance.display_id:
                continue
            hull_members.append((instance.display_id, box))

    regions: list[HullRegion] = []
    for hull_id, group_members in members.items():
        group = names[hull_id]
        if visibility.get(group, True) is False:
            continue

        union = group_members[0][1]
        for _, box in group_members[1:]:
            union = union.union(box)
        region_box = union.expand(config.padding).at_least(config.min_size)

        regions.append(HullRegion(
            hull_id=hull_id,
            group_name=group,
            bounding_box=region_box,
            member_count=len(group_members),
            member_ids=[member_id for member_id, _ in group_members],
            color=color_overrides.get(group) or group_color(group, config.palette),
        ))

    return regions


def hull_to_element(region: HullRegion) -> dict[str, Any]:
    """Neutral element dict for a hull; hulls take no part in interaction."""
    box = region.bounding_box
    return {
        "kind": ElementKind.HULL.value,
        "id": region.hull_id,
        "label": region.group_name,
        "parent": None,
        "position": box.center.model_dump(),
        "width": box.width,
        "height": box.height,
        "selectable": False,
        "grabbable": False,
        "data": {
            "groupName": region.group_name,
            "hullColor": region.color,
            "memberCount": region.member_count,
            "memberIds": list(region.member_ids),
            "isHull": True,
        },
    }


class HullOverlayEngine:
    """Keeps group hulls in sync with the rendered scene.

    The caller supplies ``bounds_provider`` which returns the current
    bounding boxes for the requested display ids, and forwards the surface's
    move-settled and visibility-toggle events to :meth:`on_move_settled` and
    :meth:`set_group_visibility`.
    """

    def __init__(
        self,
        instances: Iterable[DisplayInstance],
        bounds_provider: BoundsProvider,
        config: HullConfig | None = None,
        visibility: Mapping[str, bool] | None = None,
        colors: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config or HullConfig()
        self._instances = list(instances)
        self._bounds_provider = bounds_provider
        self._visibility: dict[str, bool] = dict(visibility or {})
        self._colors: dict[str, str] = dict(colors or {})
        self._listeners: list[HullListener] = []
        self._regions: list[HullRegion] = []

    @property
    def regions(self) -> list[HullRegion]:
        return list(self._regions)

    def subscribe(self, listener: HullListener) -> Callable[[], None]:
        """Register a listener for recomputed regions. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace_instances(self, instances: Iterable[DisplayInstance]) -> list[HullRegion]:
        """Swap in a fresh projection and recompute."""
        self._instances = list(instances)
        return self.recompute()

    def recompute(self) -> list[HullRegion]:
        ids = [instance.display_id for instance in self._instances]
        bounds = self._bounds_provider(ids)
        self._regions = compute_hull_regions(
            self._instances,
            bounds,
            visibility=self._visibility,
            color_overrides=self._colors,
            config=self.config,
        )
        logger.debug("Recomputed %d hull regions", len(self._regions))
        for listener in list(self._listeners):
            listener(self.regions)
        return self.regions

    def on_move_settled(self) -> list[HullRegion]:
        return self.recompute()

    def set_group_visibility(self, group_name: str, visible: bool) -> list[HullRegion]:
        self._visibility[group_name] = visible
        return self.recompute()

    def set_group_color(self, group_name: str, color: str) -> list[HullRegion]:
        self._colors[group_name] = color
        return self.recompute()

    def available_groups(self) -> list[str]:
        groups: list[str] = []
        for instance in self._instances:
            for group in instance.groups:
                if group not in groups:
                    groups.append(group)
        return groups

    def visibility_states(self) -> dict[str, bool]:
        """Visibility per known group; groups never toggled are visible."""
        return {group: self._visibility.get(group, True) for group in self.available_groups()}

    def color_for(self, group_name: str) -> str:
        return self._colors.get(group_name) or group_color(group_name, self.config.palette)
