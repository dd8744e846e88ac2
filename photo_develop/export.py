"""Write edited photos to disk.

Export re-decodes the full-resolution source and runs the reduced export
chain (:func:`~photo_develop.filter_chain.build_export_chain`), not the live
preview chain, so files can differ from what the viewport shows.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from loguru import logger
from PIL import Image

from .filter_chain import build_export_chain
from .image_ops import apply_filter_chain, open_source, pil_to_rgb8
from .models import PhotoEntity

DEFAULT_FORMAT = "jpeg"
DEFAULT_QUALITY = 90
DEFAULT_BATCH_DELAY = 0.1

_PIL_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "tif": "TIFF",
    "tiff": "TIFF",
    "bmp": "BMP",
}
_LOSSY = {"JPEG", "WEBP"}


@dataclass(frozen=True)
class ExportResult:
    photo_id: str
    path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchExportResult:
    results: tuple[ExportResult, ...] = ()
    failed: ExportResult | None = None

    @property
    def ok(self) -> bool:
        return self.failed is None

    @property
    def exported(self) -> tuple[Path, ...]:
        return tuple(r.path for r in self.results if r.ok and r.path is not None)


def export_filename(name: str, fmt: str = DEFAULT_FORMAT) -> str:
    """``IMG_001.raw.jpg`` -> ``IMG_001_edited.jpeg`` for the default format."""

    stem = name.split(".")[0]
    return f"{stem}_edited.{fmt.lower()}"


def export_photo(
    photo: PhotoEntity,
    out_dir: str | Path,
    fmt: str = DEFAULT_FORMAT,
    quality: int = DEFAULT_QUALITY,
) -> ExportResult:
    pil_format = _PIL_FORMATS.get(fmt.lower())
    if pil_format is None:
        return ExportResult(photo.id, error=f"Unsupported export format: {fmt}")

    out_path = Path(out_dir) / export_filename(photo.name, fmt)
    try:
        with open_source(photo.source) as img:
            rgb8 = pil_to_rgb8(img)
        rgb8 = apply_filter_chain(rgb8, build_export_chain(photo.adjustments))

        save_kwargs = {}
        if pil_format in _LOSSY:
            save_kwargs["quality"] = int(quality)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(rgb8).save(out_path, format=pil_format, **save_kwargs)
    except Exception as e:
        logger.error("Export of {} failed: {}", photo.name, e)
        return ExportResult(photo.id, error=str(e) or type(e).__name__)

    logger.info("Exported {} -> {}", photo.name, out_path)
    return ExportResult(photo.id, path=out_path)


def export_photos(
    photos: Iterable[PhotoEntity],
    out_dir: str | Path,
    fmt: str = DEFAULT_FORMAT,
    quality: int = DEFAULT_QUALITY,
    delay: float = DEFAULT_BATCH_DELAY,
) -> BatchExportResult:
    """Export *photos* one after another, stopping at the first failure."""

    results: list[ExportResult] = []
    for i, photo in enumerate(photos):
        if i and delay > 0:
            time.sleep(delay)
        result = export_photo(photo, out_dir, fmt, quality)
        results.append(result)
        if not result.ok:
            logger.warning("Batch export stopped after {} item(s)", len(results))
            return BatchExportResult(tuple(results), failed=result)
    return BatchExportResult(tuple(results))
