"""Render pipeline: one chart instance's orchestrator.

State machine::

    Empty --render--> Building --> Rendered
      ^                               |
      +------- render (no data) ------+        any --dispose--> Disposed

Every ``render`` is a full rebuild. The previous render is torn down first
(scheduler cancelled, tooltip overlay destroyed, surface cleared) and only
then is the new scene built, so two renders never mutate the surface at the
same time. Transition callbacks carry the generation they were scheduled in
and no-op once that generation is gone.

Pointer handling (``pointer_move`` / ``pointer_leave``) hit-tests the
finalized geometry, applies hover emphasis and drives the tooltip. It is only
active when the chart's style enables tooltips.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional

from ..config import settings
from ..services.event_bus import ChartEvent, EventBus
from .animation import AnimationScheduler
from .geometry import format_value, series_title, tooltip_title
from .registry import ChartRegistry, build_empty_scene, chart_registry
from .scene import Scene, SceneNode
from .surface import HostSurface
from .tooltip import TooltipController
from .types import ArcSlice, Bar, ChartSpec, PointMarker, ShapeDescriptor, TooltipState, Transition

__all__ = ["PipelineState", "RenderPipeline", "describe_shape"]

log = logging.getLogger(__name__)

# Extra outer radius (px) of a hovered slice
_SLICE_HOVER_GROWTH = {"donut": 8.0, "pie": 10.0}
_BAR_HOVER_OPACITY = 0.8


class PipelineState(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    RENDERED = "rendered"
    DISPOSED = "disposed"


def describe_shape(shape: ShapeDescriptor) -> str:
    """Plain-text tooltip body for a hoverable shape."""
    if isinstance(shape, Bar):
        return f"{shape.label}\nValue: {format_value(shape.value)}"
    if isinstance(shape, ArcSlice):
        return (
            f"{tooltip_title(shape.label)}\nValue: {format_value(shape.value)}\n"
            f"Percentage: {shape.percentage}"
        )
    if isinstance(shape, PointMarker):
        return f"{series_title(shape.series)}\n{shape.label}: {format_value(shape.value)}"
    return ""


class RenderPipeline:
    def __init__(
        self,
        surface: HostSurface,
        *,
        scheduler: Optional[AnimationScheduler] = None,
        clock: Optional[Callable[[], float]] = None,
        event_bus: Optional[EventBus] = None,
        registry: ChartRegistry = chart_registry,
    ) -> None:
        self._surface = surface
        self._scheduler = scheduler or AnimationScheduler(clock)
        self._bus = event_bus
        self._registry = registry
        self._state = PipelineState.EMPTY
        self._spec: Optional[ChartSpec] = None
        self._scene: Optional[Scene] = None
        self._tooltip: Optional[TooltipController] = None
        self._hovered: Optional[SceneNode] = None
        self._generation = 0
        self._dirty = False

    # Introspection ---------------------------------------------------
    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def spec(self) -> Optional[ChartSpec]:
        return self._spec

    @property
    def scene(self) -> Optional[Scene]:
        return self._scene

    @property
    def scheduler(self) -> AnimationScheduler:
        return self._scheduler

    @property
    def tooltip(self) -> Optional[TooltipController]:
        return self._tooltip

    @property
    def tooltip_state(self) -> TooltipState:
        return self._tooltip.state if self._tooltip else TooltipState()

    @property
    def hovered(self) -> Optional[SceneNode]:
        return self._hovered

    @property
    def is_animating(self) -> bool:
        return self._state is not PipelineState.DISPOSED and self._scheduler.busy

    # Lifecycle -------------------------------------------------------
    def render(self, spec: ChartSpec) -> PipelineState:
        if self._state is PipelineState.DISPOSED:
            log.warning("render() called on a disposed pipeline; ignoring %s chart", spec.kind)
            return self._state
        self._teardown()
        self._spec = spec
        self._generation += 1
        if spec.is_empty:
            self._scene = build_empty_scene(spec)
            self._surface.mount(self._scene)
            self._state = PipelineState.EMPTY
            log.debug("%s chart has no data; showing empty state", spec.kind)
            self._publish(ChartEvent.CHART_EMPTY, {"kind": spec.kind})
            return self._state

        self._state = PipelineState.BUILDING
        build = self._registry.build(spec)
        self._scene = build.scene
        self._surface.mount(self._scene)
        generation = self._generation
        for transition in build.transitions:
            self._scheduler.schedule(transition, self._scene_applier(generation))
        if spec.resolved_style.show_tooltip:
            self._tooltip = TooltipController(
                self._surface, self._scheduler, on_change=self._on_tooltip_change
            )
        self._state = PipelineState.RENDERED
        self._flush()
        log.debug(
            "rendered %s chart (generation %d, %d transitions)",
            spec.kind,
            generation,
            len(build.transitions),
        )
        self._publish(
            ChartEvent.CHART_RENDERED,
            {"kind": spec.kind, "nodes": len(self._scene.nodes), "transitions": len(build.transitions)},
        )
        return self._state

    def dispose(self) -> None:
        if self._state is PipelineState.DISPOSED:
            return
        self._teardown()
        self._state = PipelineState.DISPOSED
        log.debug("pipeline disposed")
        self._publish(ChartEvent.CHART_DISPOSED, {"kind": self._spec.kind if self._spec else None})

    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Advance animations; return True while any transition or timer is pending."""
        if self._state is PipelineState.DISPOSED:
            return False
        busy = self._scheduler.tick(now_ms)
        self._flush()
        return busy

    # Pointer ---------------------------------------------------------
    def pointer_move(self, x: float, y: float) -> Optional[SceneNode]:
        if self._state is not PipelineState.RENDERED or self._tooltip is None or self._scene is None:
            return None
        node = self._scene.hit_test(x, y)
        if node is None:
            self.pointer_leave()
            return None
        if node is self._hovered:
            self._tooltip.move((x, y))
            return node
        if self._hovered is not None:
            self.hover_leave(self._hovered)
        self.hover_enter(node)
        self._tooltip.show(describe_shape(node.final), (x, y))
        return node

    def pointer_leave(self) -> None:
        if self._tooltip is None:
            return
        if self._hovered is not None:
            self.hover_leave(self._hovered)
        self._tooltip.hide()

    def hover_enter(self, node: SceneNode) -> None:
        self._hovered = node
        self._emphasise(node, True)

    def hover_leave(self, node: SceneNode) -> None:
        if self._hovered is node:
            self._hovered = None
        self._emphasise(node, False)

    # Output ----------------------------------------------------------
    def to_svg(self) -> str:
        from .svg import render_svg

        if self._state is PipelineState.DISPOSED:
            return render_svg(None)
        tooltip = self._tooltip.state if self._tooltip and self._tooltip.overlay else None
        return render_svg(self._scene, tooltip)

    # Internals -------------------------------------------------------
    def _teardown(self) -> None:
        cancelled = self._scheduler.cancel_all()
        if self._tooltip is not None:
            self._tooltip.destroy()
            self._tooltip = None
        self._hovered = None
        if self._scene is not None:
            self._surface.clear()
            self._scene = None
            log.debug("torn down previous render (%d pending cancelled)", cancelled)
        self._dirty = False

    def _scene_applier(self, generation: int) -> Callable[[Transition, Any], None]:
        def apply(transition: Transition, value: Any) -> None:
            if generation != self._generation or self._scene is None:
                return
            if self._state is PipelineState.DISPOSED:
                return
            self._scene.set_field(transition.target, transition.field, value)
            self._dirty = True

        return apply

    def _emphasise(self, node: SceneNode, on: bool) -> None:
        final = node.final
        if isinstance(final, Bar):
            field, rest, hot = "opacity", final.opacity, _BAR_HOVER_OPACITY
        elif isinstance(final, ArcSlice):
            growth = _SLICE_HOVER_GROWTH.get(self._scene.kind if self._scene else "pie", 10.0)
            field, rest, hot = "outer_radius", final.outer_radius, final.outer_radius + growth
        elif isinstance(final, PointMarker):
            field, rest, hot = "radius", final.radius, settings.MARKER_HOVER_RADIUS
        else:
            return
        current = getattr(node.shape, field)
        self._scheduler.schedule(
            Transition(node.key, field, current, hot if on else rest, 0.0, settings.HOVER_TRANSITION_MS),
            self._scene_applier(self._generation),
        )
        self._flush()

    def _flush(self) -> None:
        if self._dirty:
            self._dirty = False
            self._surface.request_repaint()

    def _on_tooltip_change(self, phase: str, state: TooltipState) -> None:
        if phase == TooltipController.VISIBLE:
            self._publish(ChartEvent.TOOLTIP_SHOWN, {"content": state.content})
        else:
            self._publish(ChartEvent.TOOLTIP_HIDDEN, None)

    def _publish(self, event: ChartEvent, payload: Any) -> None:
        if self._bus is not None:
            self._bus.publish(event, payload)
