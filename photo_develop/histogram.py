"""RGB histogram of the unedited source image.

The source is squashed to a small square before counting, so the result is
an estimate that is cheap enough to recompute on every state change. All
three channels share one vertical scale: they are normalised against the
largest bucket of any channel.
"""

from __future__ import annotations

import math

import numpy as np
from loguru import logger
from PIL import Image, ImageDraw, ImageFont

from .image_ops import decode_source
from .models import PhotoEntity

SAMPLE_SIZE = 64
BINS = 256

BACKGROUND = (26, 26, 26)
GRID_COLOR = (51, 51, 51)
CHANNEL_COLORS = ((255, 0, 0), (0, 255, 0), (0, 0, 255))
CHANNEL_ALPHA = 0.6
PLACEHOLDER_COLOR = (100, 100, 100)
PLACEHOLDER_ALPHA = 0.5
PLACEHOLDER_TEXT = (102, 102, 102)


def sample_source(rgb8: np.ndarray, size: int = SAMPLE_SIZE) -> np.ndarray:
    """Down-sample *rgb8* to a ``size`` x ``size`` square (aspect is not kept)."""

    pil_img = Image.fromarray(rgb8).convert("RGB")
    return np.asarray(pil_img.resize((size, size), Image.Resampling.BILINEAR), dtype=np.uint8)


def compute_histogram(rgb8: np.ndarray, size: int = SAMPLE_SIZE) -> np.ndarray:
    """Return a ``(3, 256)`` float32 array in 0..1 for the red, green and blue channels."""

    sample = sample_source(rgb8, size)
    hist = np.zeros((3, BINS), dtype=np.float32)
    for c in range(3):
        hist[c] = np.bincount(sample[..., c].ravel(), minlength=BINS)[:BINS]

    max_val = hist.max()
    if max_val > 0:
        hist /= max_val
    return hist


def bar_heights(histogram: np.ndarray, height: float) -> np.ndarray:
    return histogram * float(height)


def _blank(width: int, height: int) -> np.ndarray:
    canvas = np.empty((height, width, 3), dtype=np.float32)
    canvas[...] = np.array(BACKGROUND, dtype=np.float32) / 255.0
    return canvas


def _draw_grid(canvas: np.ndarray) -> None:
    height = canvas.shape[0]
    grid = np.array(GRID_COLOR, dtype=np.float32) / 255.0
    for i in range(5):
        y = min(height - 1, int(round(height / 4 * i)))
        canvas[y, :] = grid


def render_histogram(histogram: np.ndarray, width: int = 240, height: int = 96) -> np.ndarray:
    """Paint the three channels as overlapping bars with a screen blend.

    Screen blending makes overlaps brighter, so where all three channels
    agree the bars read as white.
    """

    canvas = _blank(width, height)
    _draw_grid(canvas)

    # Bucket shown in each pixel column, sampled at the column centre.
    columns = ((np.arange(width) + 0.5) * BINS / width).astype(np.int32)
    rows = np.arange(height, dtype=np.float32)[:, None]
    heights = bar_heights(histogram, height)

    for c, color in enumerate(CHANNEL_COLORS):
        col_heights = heights[c][columns][None, :]
        mask = rows >= (height - col_heights)
        src = np.array(color, dtype=np.float32) / 255.0
        screened = 1.0 - (1.0 - canvas) * (1.0 - src)
        blended = canvas + CHANNEL_ALPHA * (screened - canvas)
        canvas = np.where(mask[..., None], blended, canvas)

    return (np.clip(canvas, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)


def render_placeholder(width: int = 240, height: int = 96) -> np.ndarray:
    """Generic bell-shaped histogram shown when the source can't be sampled."""

    base = Image.new("RGBA", (width, height), BACKGROUND + (255,))
    overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    points = [(0.0, float(height))]
    for i in range(width + 1):
        nx = (i / width) * 6 - 3
        points.append((float(i), height - math.exp(-nx * nx / 2) * height * 0.8))
    points.append((float(width), float(height)))
    draw.polygon(points, fill=PLACEHOLDER_COLOR + (int(255 * PLACEHOLDER_ALPHA),))

    out = Image.alpha_composite(base, overlay)
    text_draw = ImageDraw.Draw(out)
    font = ImageFont.load_default()
    left, top, right, bottom = text_draw.textbbox((0, 0), "RGB", font=font)
    text_pos = ((width - (right - left)) / 2 - left, (height - (bottom - top)) / 2 - top)
    text_draw.text(text_pos, "RGB", fill=PLACEHOLDER_TEXT, font=font)
    return np.asarray(out.convert("RGB"), dtype=np.uint8)


class HistogramEngine:
    def __init__(self, sample_size: int = SAMPLE_SIZE) -> None:
        self.sample_size = sample_size

    def analyze(self, photo: PhotoEntity | None) -> np.ndarray | None:
        """Histogram of *photo*'s source, or None when it cannot be sampled."""

        if photo is None:
            return None
        try:
            rgb8 = decode_source(photo.source)
            if rgb8 is None:
                return None
            return compute_histogram(rgb8, self.sample_size)
        except Exception as e:
            logger.warning("Could not analyze {} for histogram: {}", photo.name, e)
            return None

    def render(self, photo: PhotoEntity | None, width: int = 240, height: int = 96) -> np.ndarray:
        histogram = self.analyze(photo)
        if histogram is None:
            return render_placeholder(width, height)
        return render_histogram(histogram, width, height)
