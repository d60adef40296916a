"""Qt host widget for the chart engine.

``ChartWidget`` owns one ``SceneSurface`` and one ``RenderPipeline``. A
``QTimer`` ticks the pipeline at ``FRAME_INTERVAL_MS`` while animations or
tooltip timers are pending and stops once everything settles. Painting
rasterizes the surface's SVG with ``QSvgRenderer``; the document is cached
until the surface requests a repaint.

Pointer events are mapped from widget pixels into scene coordinates (the SVG
is stretched to the widget rect) and forwarded to the pipeline.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QByteArray, QRectF, QSize, QTimer, pyqtSignal
from PyQt6.QtGui import QPainter
from PyQt6.QtSvg import QSvgRenderer
from PyQt6.QtWidgets import QSizePolicy, QWidget

from ..charting.pipeline import PipelineState, RenderPipeline
from ..charting.surface import SceneSurface
from ..charting.types import ChartSpec
from ..config import settings
from ..services.event_bus import EventBus

__all__ = ["ChartWidget"]

log = logging.getLogger(__name__)


class ChartWidget(QWidget):
    """Animated chart view."""

    stateChanged = pyqtSignal(str)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        *,
        event_bus: Optional[EventBus] = None,
        clock: Optional[Callable[[], float]] = None,
        frame_interval_ms: int = settings.FRAME_INTERVAL_MS,
    ):
        super().__init__(parent)
        self.setObjectName("chartWidget")
        self.setMouseTracking(True)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._surface = SceneSurface()
        self._pipeline = RenderPipeline(self._surface, clock=clock, event_bus=event_bus)
        self._renderer: Optional[QSvgRenderer] = None
        self._surface.add_repaint_listener(self._on_surface_repaint)
        self._timer = QTimer(self)
        self._timer.setInterval(max(int(frame_interval_ms), 1))
        self._timer.timeout.connect(self._on_frame)

    # Public API ------------------------------------------------------
    @property
    def pipeline(self) -> RenderPipeline:
        return self._pipeline

    @property
    def surface(self) -> SceneSurface:
        return self._surface

    def set_chart_spec(self, spec: ChartSpec) -> PipelineState:
        state = self._pipeline.render(spec)
        self._sync_timer()
        self.updateGeometry()
        self.stateChanged.emit(state.value)
        return state

    def is_animating(self) -> bool:
        return self._timer.isActive()

    def to_svg(self) -> str:
        return self._pipeline.to_svg()

    def dispose(self) -> None:
        self._timer.stop()
        if self._pipeline.state is not PipelineState.DISPOSED:
            self._pipeline.dispose()
            self.stateChanged.emit(PipelineState.DISPOSED.value)

    # Qt overrides ----------------------------------------------------
    def sizeHint(self) -> QSize:  # noqa: N802
        scene = self._surface.scene
        if scene is None:
            return QSize(400, 300)
        return QSize(int(scene.canvas_width), int(scene.height))

    def paintEvent(self, event):  # type: ignore[override]
        if self._surface.scene is None:
            return
        if self._renderer is None:
            self._renderer = QSvgRenderer(QByteArray(self.to_svg().encode("utf-8")))
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            self._renderer.render(painter, QRectF(self.rect()))
        finally:
            painter.end()

    def mouseMoveEvent(self, event):  # type: ignore[override]
        scene_pos = self._to_scene(event.position().x(), event.position().y())
        if scene_pos is not None:
            self._pipeline.pointer_move(*scene_pos)
            self._sync_timer()
        return super().mouseMoveEvent(event)

    def leaveEvent(self, event):  # type: ignore[override]
        self._pipeline.pointer_leave()
        self._sync_timer()
        return super().leaveEvent(event)

    def closeEvent(self, event):  # type: ignore[override]
        self.dispose()
        return super().closeEvent(event)

    # Internals -------------------------------------------------------
    def _to_scene(self, x: float, y: float):
        scene = self._surface.scene
        if scene is None or self.width() <= 0 or self.height() <= 0:
            return None
        return x * scene.canvas_width / self.width(), y * scene.height / self.height()

    def _on_frame(self) -> None:
        if not self._pipeline.tick():
            self._timer.stop()

    def _sync_timer(self) -> None:
        if self._pipeline.is_animating:
            if not self._timer.isActive():
                self._timer.start()
        else:
            self._timer.stop()

    def _on_surface_repaint(self) -> None:
        self._renderer = None
        self.update()
