from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from .adjustments import (
    DEFAULT_ADJUSTMENTS,
    AdjustmentSet,
    adjustments_from_dict,
    adjustments_to_dict,
    clamp_adjustments,
)
from .models import Preset


class PresetFormatError(ValueError):
    pass


def _builtin(preset_id: str, name: str, category: str, **values: float) -> Preset:
    return Preset(id=preset_id, name=name, adjustments=DEFAULT_ADJUSTMENTS.merged(values), category=category)


def builtin_presets() -> list[Preset]:
    return [
        _builtin("builtin-none", "None", "General"),
        _builtin("builtin-punch", "Punch", "General", contrast=30, vibrance=25, clarity=15),
        _builtin("builtin-soft", "Soft", "General", contrast=-20, highlights=-30, shadows=20, clarity=-15),
        _builtin("builtin-bright", "Bright", "General", exposure=0.5, shadows=25, blacks=10),
        _builtin("builtin-warm", "Warm", "Color", temperature=35, vibrance=10),
        _builtin("builtin-cool", "Cool", "Color", temperature=-35, tint=-5),
        _builtin("builtin-vivid", "Vivid", "Color", saturation=35, vibrance=30, contrast=15),
        _builtin("builtin-faded", "Faded", "Film", contrast=-35, blacks=40, saturation=-20),
        _builtin("builtin-sepia", "Old Print", "Film", temperature=70, saturation=-40, contrast=10),
        _builtin("builtin-mono", "Monochrome", "Black & White", saturation=-100, contrast=20),
        _builtin("builtin-mono-hc", "High Contrast B&W", "Black & White", saturation=-100, contrast=60, clarity=30),
    ]


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    return slug or "preset"


def preset_to_dict(preset: Preset) -> dict[str, Any]:
    return {
        "id": preset.id,
        "name": preset.name,
        "category": preset.category,
        "adjustments": adjustments_to_dict(preset.adjustments),
    }


def preset_from_dict(payload: Any, fallback_name: str = "Preset") -> Preset:
    """Build a :class:`Preset` from decoded JSON.

    Adjustment values are clamped into their slider ranges; anything that is
    not a JSON object with an ``adjustments`` object raises
    :class:`PresetFormatError`.
    """

    if not isinstance(payload, dict):
        raise PresetFormatError("Preset file must contain a JSON object")
    adjustments = payload.get("adjustments")
    if not isinstance(adjustments, dict):
        raise PresetFormatError("Preset is missing an 'adjustments' object")

    name = str(payload.get("name") or fallback_name)
    try:
        clamped = clamp_adjustments(adjustments)
        values: AdjustmentSet = adjustments_from_dict(clamped)
    except (TypeError, ValueError, KeyError) as e:
        raise PresetFormatError(f"Invalid adjustment value: {e}") from e

    return Preset(
        id=str(payload.get("id") or slugify(name)),
        name=name,
        adjustments=values,
        category=str(payload.get("category") or "User"),
    )


def load_preset_file(path: str | Path) -> Preset:
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PresetFormatError(f"{path.name}: not valid JSON ({e})") from e
    return preset_from_dict(payload, fallback_name=path.stem)


def save_preset_file(preset: Preset, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(preset_to_dict(preset), indent=2, sort_keys=True), encoding="utf-8")
    logger.info("Saved preset {} to {}", preset.name, path)
    return path


def load_presets_from_folder(folder: str | Path | None) -> list[Preset]:
    """Load every ``*.json`` preset in *folder*, skipping unreadable files."""

    if not folder:
        return []
    folder = Path(folder)
    if not folder.is_dir():
        logger.warning("Preset folder {} does not exist", folder)
        return []

    out: list[Preset] = []
    for path in sorted(folder.glob("*.json")):
        try:
            out.append(load_preset_file(path))
        except (PresetFormatError, OSError) as e:
            logger.warning("Skipping preset {}: {}", path.name, e)
    logger.debug("Loaded {} preset(s) from {}", len(out), folder)
    return out


def group_by_category(presets: Iterable[Preset]) -> dict[str, list[Preset]]:
    groups: dict[str, list[Preset]] = {}
    for p in presets:
        groups.setdefault(p.category, []).append(p)
    return groups
