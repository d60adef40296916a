"""Chart type registry.

Maps a chart kind (``bar``, ``line``, ``pie``, ``donut``) to the builder that
turns a ``ChartSpec`` into a ``ChartBuild``: the scene with finalized shapes
plus the entrance transitions that animate it in. Builders register
themselves on import (see ``charting/__init__``); the pipeline only talks to
the registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Callable, Dict, Tuple

from .scene import Scene
from .types import ChartSpec, ResolvedStyle, Transition

__all__ = [
    "ChartBuild",
    "ChartBuilder",
    "ChartType",
    "ChartRegistry",
    "chart_registry",
    "register_chart_type",
    "build_empty_scene",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartBuild:
    scene: Scene
    transitions: Tuple[Transition, ...]


ChartBuilder = Callable[[ChartSpec, ResolvedStyle], ChartBuild]


@dataclass
class ChartType:
    """Metadata for a registered chart kind."""

    kind: str
    builder: ChartBuilder
    description: str


class ChartRegistry:
    def __init__(self) -> None:
        self._types: Dict[str, ChartType] = {}

    def register(self, kind: str, builder: ChartBuilder, description: str) -> None:
        if kind in self._types:
            raise ValueError(f"Chart type already registered: {kind}")
        self._types[kind] = ChartType(kind, builder, description)

    def build(self, spec: ChartSpec) -> ChartBuild:
        """Build scene + entrance transitions for a non-empty spec."""
        ct = self._types.get(spec.kind)
        if ct is None:
            raise KeyError(f"Unknown chart type: {spec.kind}")
        start = perf_counter()
        result = ct.builder(spec, spec.resolved_style)
        log.debug(
            "built %s chart: %d nodes, %d transitions in %.2fms",
            spec.kind,
            len(result.scene.nodes),
            len(result.transitions),
            (perf_counter() - start) * 1000.0,
        )
        return result

    def list_types(self) -> Dict[str, str]:
        return {k: v.description for k, v in self._types.items()}


chart_registry = ChartRegistry()


def register_chart_type(kind: str, builder: ChartBuilder, description: str) -> None:
    chart_registry.register(kind, builder, description)


def build_empty_scene(spec: ChartSpec) -> Scene:
    """Scene for the "No data available" visual."""
    style = spec.resolved_style
    return Scene(
        kind=spec.kind,
        width=style.width,
        height=min(style.height, 120.0),
        title=spec.title,
        empty=True,
    )
