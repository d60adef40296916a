"""Host surface contract and the in-memory surface.

A pipeline never paints directly. It mounts a ``Scene`` on a host surface,
asks the surface for its tooltip overlay and requests repaints. The surface
decides how to paint (the Qt widget rasterizes the SVG, a headless caller
just reads ``to_svg()``).

``SceneSurface`` is the reference implementation: it keeps the mounted scene
and the live overlays, counts repaints and notifies repaint listeners.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from .scene import Scene
from .types import TooltipState

__all__ = ["Overlay", "HostSurface", "SceneSurface"]

log = logging.getLogger(__name__)

_overlay_ids = itertools.count(1)


@dataclass(eq=False)
class Overlay:
    """Transient tooltip element owned by exactly one pipeline render."""

    overlay_id: int = field(default_factory=lambda: next(_overlay_ids))
    state: TooltipState = field(default_factory=TooltipState)
    alive: bool = True


class HostSurface(Protocol):  # pragma: no cover - structural only
    def mount(self, scene: Scene) -> None: ...

    def clear(self) -> None: ...

    def create_overlay(self) -> Overlay: ...

    def destroy_overlay(self, overlay: Overlay) -> None: ...

    def request_repaint(self) -> None: ...


class SceneSurface:
    """In-memory host surface (headless rendering, Qt widget backing store)."""

    def __init__(self) -> None:
        self.scene: Optional[Scene] = None
        self._overlays: List[Overlay] = []
        self.repaint_count = 0
        self._listeners: List[Callable[[], None]] = []

    # HostSurface -----------------------------------------------------
    def mount(self, scene: Scene) -> None:
        self.scene = scene
        self.request_repaint()

    def clear(self) -> None:
        self.scene = None
        self.request_repaint()

    def create_overlay(self) -> Overlay:
        overlay = Overlay()
        self._overlays.append(overlay)
        log.debug("overlay %d created (%d live)", overlay.overlay_id, len(self._overlays))
        return overlay

    def destroy_overlay(self, overlay: Overlay) -> None:
        if overlay in self._overlays:
            self._overlays.remove(overlay)
        overlay.alive = False
        self.request_repaint()

    def request_repaint(self) -> None:
        self.repaint_count += 1
        for listener in list(self._listeners):
            listener()

    # Extras ----------------------------------------------------------
    @property
    def overlays(self) -> List[Overlay]:
        return list(self._overlays)

    def add_repaint_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def to_svg(self) -> str:
        from .svg import render_svg

        overlay = self._overlays[-1] if self._overlays else None
        return render_svg(self.scene, overlay.state if overlay else None)
