"""Turn raw image files or byte blobs into :class:`PhotoEntity` records."""

from __future__ import annotations

import mimetypes
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from loguru import logger

from .image_ops import probe_size
from .models import ImageSource, PhotoEntity, PhotoMetadata


@dataclass(frozen=True)
class ImportSource:
    name: str
    data: ImageSource
    size: int = 0
    last_modified: datetime | None = None
    mime_type: str | None = None


def new_photo_id() -> str:
    return uuid.uuid4().hex


def format_from_mime(mime_type: str | None) -> str:
    """``image/jpeg`` -> ``JPEG``; anything without a subtype is ``UNKNOWN``."""

    if not mime_type or "/" not in mime_type:
        return "UNKNOWN"
    subtype = mime_type.split("/", 1)[1].strip()
    return subtype.upper() or "UNKNOWN"


def source_from_path(path: str | Path) -> ImportSource:
    path = Path(path)
    stat = path.stat()
    mime_type, _ = mimetypes.guess_type(path.name)
    return ImportSource(
        name=path.name,
        data=path,
        size=stat.st_size,
        last_modified=datetime.fromtimestamp(stat.st_mtime),
        mime_type=mime_type,
    )


def import_source(source: ImportSource) -> PhotoEntity:
    width = height = 0
    try:
        width, height = probe_size(source.data)
    except Exception as e:
        # Undecodable files are still imported; dimensions just stay unknown.
        logger.warning("Could not read image header of {}: {}", source.name, e)

    metadata = PhotoMetadata(
        width=width,
        height=height,
        size=source.size,
        format=format_from_mime(source.mime_type),
        date_created=source.last_modified,
    )
    return PhotoEntity(id=new_photo_id(), name=source.name, source=source.data, metadata=metadata)


def import_sources(sources: Iterable[ImportSource]) -> list[PhotoEntity]:
    photos = [import_source(s) for s in sources]
    logger.info("Imported {} photo(s)", len(photos))
    return photos
