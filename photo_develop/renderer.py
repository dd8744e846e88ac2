"""CPU compositing of the develop viewport.

The renderer turns a decoded source, an adjustment set and the current
:class:`~photo_develop.viewport.ViewState` into an RGB canvas the size of the
viewport, either as a single filtered image or as a before/after split.
"""

from __future__ import annotations

import threading

import numpy as np
from loguru import logger
from PIL import Image, ImageDraw, ImageFont

from .adjustments import AdjustmentSet
from .filter_chain import build_filter_chain
from .image_ops import apply_filter_chain, decode_source, resize_for_preview
from .models import PhotoEntity
from .viewport import ViewState, compute_draw_rect

BACKGROUND = (15, 15, 15)
DIVIDER_COLOR = (0, 136, 255)
DIVIDER_WIDTH = 2
BADGE_FILL = (0, 0, 0, 178)
BADGE_TEXT = (255, 255, 255, 255)
BADGE_SIZE = (80, 30)
BADGE_MARGIN = 10


class RenderGeneration:
    """Monotonic counter used to drop results of superseded renders."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        return self._value

    def next(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def is_current(self, generation: int) -> bool:
        return generation == self._value

    def accepts(self, generation: int, frame: np.ndarray | None) -> bool:
        """Whether a finished render should replace what is on screen.

        Superseded generations are dropped. So is a ``None`` frame from an
        undecodable source, which leaves the last good frame in place.
        """
        return self.is_current(generation) and frame is not None


def _place_visible(
    source_rgb8: np.ndarray,
    viewport_size: tuple[int, int],
    view: ViewState,
) -> tuple[int, int, np.ndarray] | None:
    """Scale the part of the source that lands inside the viewport.

    Returns ``(left, top, pixels)`` in canvas coordinates, or None when the
    image is entirely off-screen.
    """

    view_w, view_h = viewport_size
    img_h, img_w = source_rgb8.shape[:2]
    rect = compute_draw_rect((img_w, img_h), viewport_size, view.zoom, view.pan)
    if rect.width < 1 or rect.height < 1:
        return None

    x0 = rect.x
    y0 = rect.y
    left = max(0, int(round(x0)))
    top = max(0, int(round(y0)))
    right = min(view_w, int(round(x0 + rect.width)))
    bottom = min(view_h, int(round(y0 + rect.height)))
    if right <= left or bottom <= top:
        return None

    sx = img_w / rect.width
    sy = img_h / rect.height
    box = (
        max(0.0, (left - x0) * sx),
        max(0.0, (top - y0) * sy),
        min(float(img_w), (right - x0) * sx),
        min(float(img_h), (bottom - y0) * sy),
    )
    pil_img = Image.fromarray(source_rgb8)
    scaled = pil_img.resize((right - left, bottom - top), Image.Resampling.BILINEAR, box=box)
    return left, top, np.asarray(scaled, dtype=np.uint8)


def _draw_badges(canvas: np.ndarray, split_x: int) -> np.ndarray:
    base = Image.fromarray(canvas).convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = ImageFont.load_default()
    bw, bh = BADGE_SIZE
    for x, label in ((BADGE_MARGIN, "BEFORE"), (split_x + BADGE_MARGIN, "AFTER")):
        draw.rectangle((x, BADGE_MARGIN, x + bw - 1, BADGE_MARGIN + bh - 1), fill=BADGE_FILL)
        draw.text((x + 5, BADGE_MARGIN + 9), label, fill=BADGE_TEXT, font=font)
    return np.asarray(Image.alpha_composite(base, overlay).convert("RGB"), dtype=np.uint8)


class ViewportRenderer:
    def __init__(self, preview_max_side: int = 1600) -> None:
        self._preview_max_side = preview_max_side
        self._cache_key: str | None = None
        self._cache_rgb8: np.ndarray | None = None
        self._cache_lock = threading.Lock()

    def render(
        self,
        source_rgb8: np.ndarray,
        adjustments: AdjustmentSet,
        viewport_size: tuple[int, int],
        view: ViewState,
    ) -> np.ndarray:
        view_w, view_h = viewport_size
        canvas = np.empty((max(0, view_h), max(0, view_w), 3), dtype=np.uint8)
        canvas[...] = BACKGROUND
        if view_w <= 0 or view_h <= 0:
            return canvas

        placed = _place_visible(source_rgb8, viewport_size, view)
        ops = build_filter_chain(adjustments)

        if not view.before_after:
            if placed is not None:
                left, top, pixels = placed
                h, w = pixels.shape[:2]
                canvas[top : top + h, left : left + w] = apply_filter_chain(pixels, ops)
            return canvas

        split_x = view_w // 2
        if placed is not None:
            left, top, pixels = placed
            h, w = pixels.shape[:2]
            canvas[top : top + h, left : left + w] = pixels
            # Only the columns right of the split get the filter chain.
            cut = min(max(split_x - left, 0), w)
            if cut < w:
                after = apply_filter_chain(pixels[:, cut:], ops)
                canvas[top : top + h, left + cut : left + w] = after

        half = DIVIDER_WIDTH // 2
        canvas[:, max(0, split_x - half) : split_x + DIVIDER_WIDTH - half] = DIVIDER_COLOR
        return _draw_badges(canvas, split_x)

    def source_for(self, photo: PhotoEntity) -> np.ndarray | None:
        """Decoded, preview-sized source for *photo*; the last one is cached."""

        with self._cache_lock:
            if self._cache_key == photo.id and self._cache_rgb8 is not None:
                return self._cache_rgb8

        rgb8 = decode_source(photo.source)
        if rgb8 is None:
            return None
        rgb8 = resize_for_preview(rgb8, self._preview_max_side)

        with self._cache_lock:
            self._cache_key = photo.id
            self._cache_rgb8 = rgb8
        return rgb8

    def render_photo(
        self,
        photo: PhotoEntity,
        viewport_size: tuple[int, int],
        view: ViewState,
    ) -> np.ndarray | None:
        """Render *photo*, or None when its source cannot be decoded."""

        source = self.source_for(photo)
        if source is None:
            logger.warning("Skipping render of {}: source not decodable", photo.name)
            return None
        return self.render(source, photo.adjustments, viewport_size, view)
