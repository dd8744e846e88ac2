from __future__ import annotations

import io
from pathlib import Path
from typing import Sequence

import numpy as np
from loguru import logger
from PIL import Image, ImageOps

from .filter_chain import FilterKind, FilterOp
from .models import ImageSource

ArrayF = np.ndarray


def _to_float01(rgb8: np.ndarray) -> ArrayF:
    if rgb8.dtype != np.uint8:
        raise TypeError(f"Expected uint8 image, got {rgb8.dtype}")
    return rgb8.astype(np.float32) / 255.0


def _to_uint8(rgb01: ArrayF) -> np.ndarray:
    rgb01 = np.clip(rgb01, 0.0, 1.0)
    return (rgb01 * 255.0 + 0.5).astype(np.uint8)


def _apply_matrix(rgb01: ArrayF, m: np.ndarray) -> ArrayF:
    return rgb01 @ m.T.astype(np.float32)


def apply_brightness(rgb01: ArrayF, factor: float) -> ArrayF:
    return rgb01 * float(factor)


def apply_contrast(rgb01: ArrayF, factor: float) -> ArrayF:
    return (rgb01 - 0.5) * float(factor) + 0.5


def saturate_matrix(s: float) -> np.ndarray:
    s = float(s)
    return np.array(
        [
            [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
        ],
        dtype=np.float32,
    )


def hue_rotate_matrix(degrees: float) -> np.ndarray:
    theta = np.deg2rad(float(degrees))
    c = float(np.cos(theta))
    s = float(np.sin(theta))
    return np.array(
        [
            [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
            [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
            [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
        ],
        dtype=np.float32,
    )


def sepia_matrix(amount: float) -> np.ndarray:
    inv = 1.0 - float(np.clip(amount, 0.0, 1.0))
    return np.array(
        [
            [0.393 + 0.607 * inv, 0.769 - 0.769 * inv, 0.189 - 0.189 * inv],
            [0.349 - 0.349 * inv, 0.686 + 0.314 * inv, 0.168 - 0.168 * inv],
            [0.272 - 0.272 * inv, 0.534 - 0.534 * inv, 0.131 + 0.869 * inv],
        ],
        dtype=np.float32,
    )


def apply_saturate(rgb01: ArrayF, factor: float) -> ArrayF:
    return _apply_matrix(rgb01, saturate_matrix(factor))


def apply_hue_rotate(rgb01: ArrayF, degrees: float) -> ArrayF:
    return _apply_matrix(rgb01, hue_rotate_matrix(degrees))


def apply_sepia(rgb01: ArrayF, amount: float) -> ArrayF:
    return _apply_matrix(rgb01, sepia_matrix(amount))


def apply_warm_cool_shift(rgb01: ArrayF, magnitude: float) -> ArrayF:
    # Positive magnitude warms, negative cools; |magnitude| scales the sepia amount only.
    m = float(magnitude)
    if m == 0.0:
        return rgb01
    strength = abs(m)
    if m > 0:
        out = np.clip(apply_sepia(rgb01, strength * 0.3), 0.0, 1.0)
        return apply_hue_rotate(out, 15.0)
    out = np.clip(apply_sepia(rgb01, strength * 0.2), 0.0, 1.0)
    return apply_hue_rotate(out, -30.0)


_PRIMITIVES = {
    FilterKind.BRIGHTNESS: apply_brightness,
    FilterKind.CONTRAST: apply_contrast,
    FilterKind.SATURATE: apply_saturate,
    FilterKind.HUE_ROTATE: apply_hue_rotate,
    FilterKind.WARM_COOL_SHIFT: apply_warm_cool_shift,
}


def apply_ops(rgb01: ArrayF, ops: Sequence[FilterOp]) -> ArrayF:
    out = rgb01
    for op in ops:
        fn = _PRIMITIVES.get(op.kind)
        if fn is None:
            raise ValueError(f"Unknown filter op: {op.kind}")
        # Every primitive works on clamped input, like a chain of CSS filters.
        out = np.clip(fn(out, op.magnitude), 0.0, 1.0)
    return out


def apply_filter_chain(rgb8: np.ndarray, ops: Sequence[FilterOp]) -> np.ndarray:
    if not ops:
        return rgb8
    return _to_uint8(apply_ops(_to_float01(rgb8), ops))


def pil_to_rgb8(pil_img: Image.Image) -> np.ndarray:
    img = pil_img.convert("RGB")
    return np.asarray(img, dtype=np.uint8)


def _open_raw(source: ImageSource) -> Image.Image:
    if isinstance(source, (bytes, bytearray)):
        return Image.open(io.BytesIO(source))
    return Image.open(Path(source))


def open_source(source: ImageSource) -> Image.Image:
    """Open and fully load *source*, honouring its EXIF orientation."""

    with _open_raw(source) as raw:
        img = ImageOps.exif_transpose(raw)
        img.load()
    return img


def probe_size(source: ImageSource) -> tuple[int, int]:
    """Read only the header of *source* and return its (width, height)."""

    with _open_raw(source) as raw:
        return raw.size


def decode_source(source: ImageSource) -> np.ndarray | None:
    """Decode *source* into an HxWx3 uint8 array, or None when it cannot be read."""

    try:
        with open_source(source) as img:
            return pil_to_rgb8(img)
    except Exception as e:
        logger.warning("Could not decode image source: {}", e)
        return None


def resize_rgb8(rgb8: np.ndarray, width: int, height: int) -> np.ndarray:
    width = max(1, int(width))
    height = max(1, int(height))
    h, w = rgb8.shape[:2]
    if (w, h) == (width, height):
        return rgb8
    pil_img = Image.fromarray(rgb8)
    return np.asarray(pil_img.resize((width, height), Image.Resampling.BILINEAR), dtype=np.uint8)


def resize_for_preview(rgb8: np.ndarray, max_side: int = 1600) -> np.ndarray:
    h, w = rgb8.shape[:2]
    side = max(h, w)
    if side <= max_side:
        return rgb8
    scale = max_side / float(side)
    return resize_rgb8(rgb8, int(w * scale), int(h * scale))
