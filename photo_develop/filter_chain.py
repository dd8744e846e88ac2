"""Mapping from an :class:`AdjustmentSet` to an ordered list of raster filter ops.

The order of ``_LIVE_TABLE`` is the order the ops are applied in; fields at
zero contribute nothing.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from .adjustments import AdjustmentSet


class FilterKind:
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    SATURATE = "saturate"
    HUE_ROTATE = "hueRotate"
    WARM_COOL_SHIFT = "warmCoolShift"


class FilterOp(NamedTuple):
    kind: str
    # Multiplicative factor about 1.0, degrees for hueRotate, signed strength for warmCoolShift.
    magnitude: float


def _highlights(v: float) -> float:
    strength = abs(v) / 200
    if v > 0:
        return 1 + strength
    return 1 - strength * 0.3


_LIVE_TABLE: tuple[tuple[str, str, Callable[[float], float]], ...] = (
    ("exposure", FilterKind.BRIGHTNESS, lambda v: 1 + v / 3),
    ("contrast", FilterKind.CONTRAST, lambda v: 1 + v / 80),
    ("highlights", FilterKind.BRIGHTNESS, _highlights),
    ("shadows", FilterKind.BRIGHTNESS, lambda v: 1 + v / 150 * 0.5),
    ("whites", FilterKind.BRIGHTNESS, lambda v: 1 + v / 300),
    ("blacks", FilterKind.BRIGHTNESS, lambda v: 1 + v / 400),
    ("clarity", FilterKind.CONTRAST, lambda v: 1 + v / 300),
    ("vibrance", FilterKind.SATURATE, lambda v: 1 + v / 200),
    ("saturation", FilterKind.SATURATE, lambda v: 1 + v / 100),
    ("luminance", FilterKind.BRIGHTNESS, lambda v: 1 + v / 200),
    ("temperature", FilterKind.WARM_COOL_SHIFT, lambda v: v / 100),
    ("tint", FilterKind.HUE_ROTATE, lambda v: v / 2),
    ("hue", FilterKind.HUE_ROTATE, lambda v: v),
)

FIELD_ORDER: tuple[str, ...] = tuple(name for name, _, _ in _LIVE_TABLE)


def build_filter_chain(adjustments: AdjustmentSet) -> tuple[FilterOp, ...]:
    ops: list[FilterOp] = []
    for name, kind, formula in _LIVE_TABLE:
        value = getattr(adjustments, name)
        if value == 0:
            continue
        ops.append(FilterOp(kind, formula(value)))
    return tuple(ops)


def build_export_chain(adjustments: AdjustmentSet) -> tuple[FilterOp, ...]:
    """Reduced chain used when writing files.

    Only exposure, contrast, saturation+vibrance and hue are carried over and
    with gentler scaling than the live preview. Highlights, shadows, whites,
    blacks, clarity, luminance, temperature and tint are dropped; exports can
    therefore look different from the preview.
    """

    a = adjustments
    return (
        FilterOp(FilterKind.BRIGHTNESS, 1 + a.exposure / 100),
        FilterOp(FilterKind.CONTRAST, 1 + a.contrast / 100),
        FilterOp(FilterKind.SATURATE, 1 + (a.saturation + a.vibrance) / 200),
        FilterOp(FilterKind.HUE_ROTATE, a.hue),
    )
