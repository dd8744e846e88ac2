"""Persistent user preferences, stored through ``QSettings``."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable

from loguru import logger
from PySide6 import QtCore

ORGANIZATION = "PhotoDevelop"
APPLICATION = "Photo Develop"

EXPORT_FORMATS = ("jpeg", "png", "webp")


@dataclass(frozen=True)
class AppSettings:
    last_import_dir: str = ""
    export_dir: str = ""
    export_format: str = "jpeg"
    export_quality: int = 90
    user_presets_dir: str = ""
    batch_delay: float = 0.1
    histogram_sample_size: int = 64


DEFAULT_SETTINGS = AppSettings()

# QSettings key -> dataclass field
_KEYS = {
    "lastImportDir": "last_import_dir",
    "exportDir": "export_dir",
    "exportFormat": "export_format",
    "exportQuality": "export_quality",
    "userPresetsDir": "user_presets_dir",
    "batchDelay": "batch_delay",
    "histogramSampleSize": "histogram_sample_size",
}


def _export_format(value: Any) -> str:
    fmt = str(value).lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(fmt)
    return fmt


def _quality(value: Any) -> int:
    q = int(value)
    if not 1 <= q <= 100:
        raise ValueError(q)
    return q


def _non_negative(value: Any) -> float:
    v = float(value)
    if v < 0:
        raise ValueError(v)
    return v


def _sample_size(value: Any) -> int:
    v = int(value)
    if v < 1:
        raise ValueError(v)
    return v


_PARSERS: dict[str, Callable[[Any], Any]] = {
    "last_import_dir": str,
    "export_dir": str,
    "export_format": _export_format,
    "export_quality": _quality,
    "user_presets_dir": str,
    "batch_delay": _non_negative,
    "histogram_sample_size": _sample_size,
}


def open_settings() -> QtCore.QSettings:
    return QtCore.QSettings(ORGANIZATION, APPLICATION)


def load_settings(qsettings: QtCore.QSettings) -> AppSettings:
    values: dict[str, Any] = {}
    for key, name in _KEYS.items():
        raw = qsettings.value(key, None)
        if raw is None or raw == "":
            continue
        try:
            values[name] = _PARSERS[name](raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid setting {}={!r}", key, raw)
    return AppSettings(**values)


def save_settings(qsettings: QtCore.QSettings, settings: AppSettings) -> None:
    by_field = {name: key for key, name in _KEYS.items()}
    for f in fields(AppSettings):
        qsettings.setValue(by_field[f.name], getattr(settings, f.name))
    qsettings.sync()
