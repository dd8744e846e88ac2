"""Domain records held by the store: photos, collections, presets and the state snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Union

from .adjustments import DEFAULT_ADJUSTMENTS, AdjustmentSet

# Raw encoded bytes or a path to an image file on disk.
ImageSource = Union[bytes, str, Path]


@dataclass(frozen=True)
class PhotoMetadata:
    """Best-effort decode metadata; zeros/UNKNOWN until the header is read."""

    width: int = 0
    height: int = 0
    size: int = 0
    format: str = "UNKNOWN"
    date_created: datetime | None = None


@dataclass(frozen=True)
class PhotoEntity:
    id: str
    name: str
    source: ImageSource
    metadata: PhotoMetadata = field(default_factory=PhotoMetadata)
    adjustments: AdjustmentSet = DEFAULT_ADJUSTMENTS
    is_selected: bool = False


@dataclass(frozen=True)
class Collection:
    """Named, ordered set of photo ids. Ids may dangle after deletes."""

    id: str
    name: str
    photo_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Preset:
    id: str
    name: str
    adjustments: AdjustmentSet = DEFAULT_ADJUSTMENTS
    category: str = "User"


@dataclass(frozen=True)
class StoreState:
    photos: tuple[PhotoEntity, ...] = ()
    current_photo_id: str | None = None
    collections: tuple[Collection, ...] = ()
    presets: tuple[Preset, ...] = ()

    @property
    def current_photo(self) -> PhotoEntity | None:
        if self.current_photo_id is None:
            return None
        return self.find_photo(self.current_photo_id)

    @property
    def selected_photos(self) -> tuple[PhotoEntity, ...]:
        return tuple(p for p in self.photos if p.is_selected)

    def find_photo(self, photo_id: str) -> PhotoEntity | None:
        return next((p for p in self.photos if p.id == photo_id), None)

    def find_collection(self, collection_id: str) -> Collection | None:
        # Ids are caller-supplied; on collisions the most recently added wins.
        return next((c for c in reversed(self.collections) if c.id == collection_id), None)

    def find_preset(self, preset_id: str) -> Preset | None:
        return next((p for p in reversed(self.presets) if p.id == preset_id), None)
