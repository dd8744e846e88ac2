"""Pan/zoom state of the develop viewport and the draw geometry derived from it."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple

MIN_ZOOM = 0.1
MAX_ZOOM = 5.0

WHEEL_OUT_STEP = 0.9
WHEEL_IN_STEP = 1.1
BUTTON_OUT_STEP = 0.8
BUTTON_IN_STEP = 1.25


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


@dataclass(frozen=True)
class ViewState:
    zoom: float = 1.0
    pan: tuple[float, float] = (0.0, 0.0)
    is_dragging: bool = False
    last_pointer: tuple[float, float] = (0.0, 0.0)
    before_after: bool = False

    def pointer_down(self, x: float, y: float) -> "ViewState":
        return replace(self, is_dragging=True, last_pointer=(x, y))

    def pointer_move(self, x: float, y: float) -> "ViewState":
        if not self.is_dragging:
            return self
        lx, ly = self.last_pointer
        px, py = self.pan
        return replace(self, pan=(px + (x - lx), py + (y - ly)), last_pointer=(x, y))

    def pointer_up(self) -> "ViewState":
        return replace(self, is_dragging=False)

    # Leaving the viewport ends a drag the same way releasing the button does.
    pointer_leave = pointer_up

    def wheel(self, delta_y: float) -> "ViewState":
        """Scroll down (positive delta) zooms out, scroll up zooms in."""

        step = WHEEL_OUT_STEP if delta_y > 0 else WHEEL_IN_STEP
        return replace(self, zoom=clamp_zoom(self.zoom * step))

    def zoom_in(self) -> "ViewState":
        return replace(self, zoom=clamp_zoom(self.zoom * BUTTON_IN_STEP))

    def zoom_out(self) -> "ViewState":
        return replace(self, zoom=clamp_zoom(self.zoom * BUTTON_OUT_STEP))

    def fit(self) -> "ViewState":
        return replace(self, zoom=1.0, pan=(0.0, 0.0))

    # Zoom 1 already means "fit"; 100% and fit coincide in this model.
    zoom_100 = fit

    def with_before_after(self, enabled: bool) -> "ViewState":
        return replace(self, before_after=bool(enabled))

    def toggle_before_after(self) -> "ViewState":
        return self.with_before_after(not self.before_after)


class DrawRect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


def compute_draw_rect(
    image_size: tuple[int, int],
    viewport_size: tuple[int, int],
    zoom: float = 1.0,
    pan: tuple[float, float] = (0.0, 0.0),
) -> DrawRect:
    """Fit *image_size* into *viewport_size* keeping its aspect ratio.

    The image fills whichever viewport axis limits it, is scaled by *zoom*,
    centred, and finally offset by *pan*.
    """

    img_w, img_h = image_size
    view_w, view_h = viewport_size
    if img_w <= 0 or img_h <= 0 or view_w <= 0 or view_h <= 0:
        return DrawRect(0.0, 0.0, 0.0, 0.0)

    img_aspect = img_w / img_h
    view_aspect = view_w / view_h
    if img_aspect > view_aspect:
        draw_w = view_w * zoom
        draw_h = (view_w / img_aspect) * zoom
    else:
        draw_h = view_h * zoom
        draw_w = (view_h * img_aspect) * zoom

    x = (view_w - draw_w) / 2 + pan[0]
    y = (view_h - draw_h) / 2 + pan[1]
    return DrawRect(x, y, draw_w, draw_h)
