"""Retained-mode scene built by one render.

A ``Scene`` holds one ``SceneNode`` per painted shape, in paint order. Each
node keeps two descriptors: ``final`` (the finalized geometry, used for hit
testing and tooltips) and ``shape`` (what is painted right now, rewritten by
transitions). Static guides and the legend ride along but are never
animated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .geometry import GuideLine, LegendEntry, TickLabel
from .types import ArcSlice, Bar, PointMarker, ShapeDescriptor

__all__ = ["SceneNode", "Scene", "MARKER_HIT_RADIUS"]

# Minimum pointer distance (px) that still counts as hovering a marker
MARKER_HIT_RADIUS = 8.0


@dataclass
class SceneNode:
    key: str
    shape: ShapeDescriptor
    final: ShapeDescriptor
    hoverable: bool = False

    def contains(self, x: float, y: float) -> bool:
        """Hit test against the finalized geometry.

        Slices also accept the rim they grow into while hovered.
        """
        f = self.final
        if isinstance(f, Bar):
            return f.x <= x <= f.x + f.width and f.y <= y <= f.y + max(f.height, 1.0)
        if isinstance(f, ArcSlice):
            dx, dy = x - f.cx, y - f.cy
            r = math.hypot(dx, dy)
            outer = max(f.outer_radius, getattr(self.shape, "outer_radius", f.outer_radius))
            if r < f.inner_radius or r > outer:
                return False
            angle = math.atan2(dx, -dy) % (2 * math.pi)
            return f.start_angle <= angle < f.end_angle
        if isinstance(f, PointMarker):
            return math.hypot(x - f.cx, y - f.cy) <= max(f.radius, MARKER_HIT_RADIUS)
        return False


@dataclass
class Scene:
    kind: str
    width: float
    height: float
    title: Optional[str] = None
    empty: bool = False
    nodes: Dict[str, SceneNode] = field(default_factory=dict)
    grid: Tuple[GuideLine, ...] = ()
    ticks: Tuple[TickLabel, ...] = ()
    legend: Tuple[LegendEntry, ...] = ()
    # "inline" draws the legend inside the plot (line charts); "side" adds a panel to the right
    legend_placement: str = "inline"

    def add(self, shape: ShapeDescriptor, *, hoverable: bool = False) -> SceneNode:
        if shape.key in self.nodes:
            raise ValueError(f"Duplicate scene node key: {shape.key}")
        node = SceneNode(key=shape.key, shape=shape, final=shape, hoverable=hoverable)
        self.nodes[shape.key] = node
        return node

    def node(self, key: str) -> SceneNode:
        return self.nodes[key]

    def __iter__(self) -> Iterator[SceneNode]:
        return iter(self.nodes.values())

    def shapes(self, kind: type | None = None) -> List[ShapeDescriptor]:
        return [n.shape for n in self.nodes.values() if kind is None or isinstance(n.shape, kind)]

    def set_field(self, key: str, name: str, value: Any) -> None:
        node = self.nodes.get(key)
        if node is None:
            return
        node.shape = replace(node.shape, **{name: value})

    def hit_test(self, x: float, y: float) -> Optional[SceneNode]:
        # topmost (last painted) wins
        for node in reversed(list(self.nodes.values())):
            if node.hoverable and node.contains(x, y):
                return node
        return None

    @property
    def canvas_width(self) -> float:
        if self.legend and self.legend_placement == "side":
            return self.width + 220
        return self.width
