from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, NamedTuple


class CurvePoint(NamedTuple):
    x: float
    y: float


IDENTITY_TONE_CURVE: tuple[CurvePoint, ...] = (
    CurvePoint(0.0, 0.0),
    CurvePoint(0.25, 0.25),
    CurvePoint(0.5, 0.5),
    CurvePoint(0.75, 0.75),
    CurvePoint(1.0, 1.0),
)

ADJUSTMENT_RANGES: dict[str, tuple[float, float]] = {
    "exposure": (-5.0, 5.0),
    "contrast": (-100.0, 100.0),
    "highlights": (-100.0, 100.0),
    "shadows": (-100.0, 100.0),
    "whites": (-100.0, 100.0),
    "blacks": (-100.0, 100.0),
    "clarity": (-100.0, 100.0),
    "vibrance": (-100.0, 100.0),
    "saturation": (-100.0, 100.0),
    "temperature": (-100.0, 100.0),
    "tint": (-100.0, 100.0),
    "hue": (-180.0, 180.0),
    "luminance": (-100.0, 100.0),
}

NUMERIC_FIELDS: tuple[str, ...] = tuple(ADJUSTMENT_RANGES)

# JSON payloads use the camelCase key for the curve.
_CURVE_KEY = "toneCurve"


@dataclass(frozen=True)
class AdjustmentSet:
    exposure: float = 0.0
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    whites: float = 0.0
    blacks: float = 0.0
    clarity: float = 0.0
    vibrance: float = 0.0
    saturation: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    hue: float = 0.0
    luminance: float = 0.0
    tone_curve: tuple[CurvePoint, ...] = IDENTITY_TONE_CURVE

    def merged(self, partial: Mapping[str, Any]) -> "AdjustmentSet":
        """Return a copy with only the supplied fields replaced.

        Keys that are not adjustment fields are ignored, ``toneCurve`` is
        accepted as an alias of ``tone_curve``.
        """

        changes: dict[str, Any] = {}
        for key, value in partial.items():
            if key in ADJUSTMENT_RANGES:
                changes[key] = value
            elif key in ("tone_curve", _CURVE_KEY):
                changes["tone_curve"] = _read_curve(value)
        if not changes:
            return self
        return replace(self, **changes)


DEFAULT_ADJUSTMENTS = AdjustmentSet()


def _read_curve(points: Any) -> tuple[CurvePoint, ...]:
    out: list[CurvePoint] = []
    for p in points:
        if isinstance(p, Mapping):
            out.append(CurvePoint(float(p["x"]), float(p["y"])))
        else:
            x, y = p
            out.append(CurvePoint(float(x), float(y)))
    return tuple(out)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_adjustments(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Clamp a partial adjustment mapping into the documented slider ranges.

    Producers of ``UpdateAdjustments`` call this; the store itself never
    re-validates.
    """

    out: dict[str, Any] = {}
    for key, value in partial.items():
        bounds = ADJUSTMENT_RANGES.get(key)
        if bounds is not None:
            out[key] = _clamp(float(value), *bounds)
        elif key in ("tone_curve", _CURVE_KEY):
            out["tone_curve"] = tuple(
                CurvePoint(_clamp(p.x, 0.0, 1.0), _clamp(p.y, 0.0, 1.0)) for p in _read_curve(value)
            )
    return out


def parse_adjustment_input(name: str, text: str) -> float | None:
    """Parse a typed slider value; ``None`` if it isn't a number inside the range."""
    bounds = ADJUSTMENT_RANGES.get(name)
    if bounds is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if value != value or not bounds[0] <= value <= bounds[1]:
        return None
    return value


def adjustments_to_dict(a: AdjustmentSet) -> dict[str, Any]:
    payload: dict[str, Any] = {name: getattr(a, name) for name in NUMERIC_FIELDS}
    payload[_CURVE_KEY] = [{"x": p.x, "y": p.y} for p in a.tone_curve]
    return payload


def adjustments_from_dict(d: Mapping[str, Any]) -> AdjustmentSet:
    values: dict[str, Any] = {}
    for f in fields(AdjustmentSet):
        if f.name == "tone_curve":
            continue
        values[f.name] = float(d.get(f.name, 0.0))
    curve = d.get(_CURVE_KEY, d.get("tone_curve"))
    if curve is not None:
        values["tone_curve"] = _read_curve(curve)
    return AdjustmentSet(**values)
