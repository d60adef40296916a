"""Tooltip overlay controller.

State machine per render::

    Hidden --enter--> Visible --leave--> (fade-out delay) --> Hidden
                      Visible --enter other shape--> Visible (content/anchor update)

The overlay element is created lazily through the host surface on the first
``show`` and lives until ``destroy``. A pending hide is cancelled when the
pointer enters another shape before the fade-out delay has elapsed. After
``destroy`` every method is a no-op, so timers that outlive the render cannot
resurrect the overlay.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from ..config import settings
from .animation import AnimationScheduler, TimerHandle
from .surface import HostSurface, Overlay
from .types import Point, TooltipState, Transition

__all__ = ["TooltipController"]

log = logging.getLogger(__name__)

_OPACITY_SLOT = "tooltip"


class TooltipController:
    HIDDEN = "hidden"
    VISIBLE = "visible"

    def __init__(
        self,
        surface: HostSurface,
        scheduler: AnimationScheduler,
        *,
        fade_in_ms: float = settings.TOOLTIP_FADE_IN_MS,
        fade_out_ms: float = settings.TOOLTIP_FADE_OUT_MS,
        offset: Point = settings.TOOLTIP_OFFSET,
        on_change: Optional[Callable[[str, TooltipState], None]] = None,
    ) -> None:
        self._surface = surface
        self._scheduler = scheduler
        self._fade_in_ms = fade_in_ms
        self._fade_out_ms = fade_out_ms
        self._offset = offset
        self._on_change = on_change
        self._overlay: Optional[Overlay] = None
        self._state = TooltipState()
        self._hide_timer: Optional[TimerHandle] = None
        self._destroyed = False

    # Introspection ---------------------------------------------------
    @property
    def state(self) -> TooltipState:
        return self._state

    @property
    def phase(self) -> str:
        return self.VISIBLE if self._state.visible else self.HIDDEN

    @property
    def overlay(self) -> Optional[Overlay]:
        return self._overlay

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    # Transitions -----------------------------------------------------
    def show(self, content: str, pointer: Point) -> None:
        if self._destroyed:
            return
        self._cancel_hide()
        if self._overlay is None:
            self._overlay = self._surface.create_overlay()
        was_visible = self._state.visible
        self._set(replace(self._state, visible=True, content=content, anchor=self._anchor(pointer)))
        self._fade_to(settings.TOOLTIP_OPACITY, self._fade_in_ms)
        if not was_visible and self._on_change:
            self._on_change(self.VISIBLE, self._state)

    def move(self, pointer: Point) -> None:
        if self._destroyed or not self._state.visible:
            return
        self._set(replace(self._state, anchor=self._anchor(pointer)))

    def hide(self) -> None:
        """Start the fade-out; the state flips to Hidden once the delay elapses."""
        if self._destroyed or not self._state.visible or self._hide_timer is not None:
            return
        self._fade_to(0.0, self._fade_out_ms)
        self._hide_timer = self._scheduler.call_later(self._fade_out_ms, self._finish_hide)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._cancel_hide()
        if self._overlay is not None:
            self._surface.destroy_overlay(self._overlay)
            log.debug("tooltip overlay %d destroyed", self._overlay.overlay_id)
            self._overlay = None
        self._state = TooltipState()

    # Internals -------------------------------------------------------
    def _anchor(self, pointer: Point) -> Point:
        return pointer[0] + self._offset[0], pointer[1] + self._offset[1]

    def _finish_hide(self) -> None:
        self._hide_timer = None
        if self._destroyed:
            return
        self._set(replace(self._state, visible=False, opacity=0.0))
        if self._on_change:
            self._on_change(self.HIDDEN, self._state)

    def _cancel_hide(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None

    def _fade_to(self, opacity: float, duration_ms: float) -> None:
        self._scheduler.schedule(
            Transition(
                target=_OPACITY_SLOT,
                field="opacity",
                start=self._state.opacity,
                end=opacity,
                duration_ms=duration_ms,
                easing="cubic-in-out",
            ),
            self._apply_opacity,
        )

    def _apply_opacity(self, _transition: Transition, value: float) -> None:
        if self._destroyed:
            return
        self._set(replace(self._state, opacity=value))

    def _set(self, state: TooltipState) -> None:
        self._state = state
        if self._overlay is not None:
            self._overlay.state = state
        self._surface.request_repaint()
