"""Single source of truth for photos, collections and presets.

All mutation goes through :meth:`Store.dispatch`, which feeds one action from
a closed set into :func:`reduce` and swaps in the resulting snapshot.
Snapshots are tuples of frozen dataclasses, so observers may keep reading an
older state while a newer one is produced.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Union

from loguru import logger

from .adjustments import DEFAULT_ADJUSTMENTS, NUMERIC_FIELDS, AdjustmentSet
from .models import Collection, PhotoEntity, Preset, StoreState


@dataclass(frozen=True)
class AddPhotos:
    photos: tuple[PhotoEntity, ...]


@dataclass(frozen=True)
class SelectPhoto:
    photo_id: str


@dataclass(frozen=True)
class UpdateAdjustments:
    photo_id: str
    adjustments: Mapping[str, Any]


@dataclass(frozen=True)
class RemovePhoto:
    photo_id: str


@dataclass(frozen=True)
class AddCollection:
    collection: Collection


@dataclass(frozen=True)
class CreateCollection:
    collection: Collection


@dataclass(frozen=True)
class AddToCollection:
    collection_id: str
    photo_ids: tuple[str, ...]


@dataclass(frozen=True)
class AddPreset:
    preset: Preset


@dataclass(frozen=True)
class ApplyPreset:
    photo_id: str
    preset: Preset


@dataclass(frozen=True)
class SelectAllPhotos:
    pass


@dataclass(frozen=True)
class DeselectAllPhotos:
    pass


@dataclass(frozen=True)
class DeleteSelectedPhotos:
    pass


Action = Union[
    AddPhotos,
    SelectPhoto,
    UpdateAdjustments,
    RemovePhoto,
    AddCollection,
    CreateCollection,
    AddToCollection,
    AddPreset,
    ApplyPreset,
    SelectAllPhotos,
    DeselectAllPhotos,
    DeleteSelectedPhotos,
]

StateListener = Callable[[StoreState], None]


def _map_photo(state: StoreState, photo_id: str, fn: Callable[[PhotoEntity], PhotoEntity]) -> StoreState:
    photos = tuple(fn(p) if p.id == photo_id else p for p in state.photos)
    return replace(state, photos=photos)


def reduce(state: StoreState, action: Action) -> StoreState:
    """Apply *action* to *state* and return the next snapshot.

    Actions that target an unknown photo or collection id leave the affected
    part of the state untouched instead of raising.
    """

    if isinstance(action, AddPhotos):
        return replace(state, photos=state.photos + tuple(action.photos))

    if isinstance(action, SelectPhoto):
        if state.find_photo(action.photo_id) is None:
            return replace(state)
        photos = tuple(replace(p, is_selected=p.id == action.photo_id) for p in state.photos)
        return replace(state, photos=photos, current_photo_id=action.photo_id)

    if isinstance(action, UpdateAdjustments):
        partial = action.adjustments
        return _map_photo(state, action.photo_id, lambda p: replace(p, adjustments=p.adjustments.merged(partial)))

    if isinstance(action, RemovePhoto):
        photos = tuple(p for p in state.photos if p.id != action.photo_id)
        current = None if state.current_photo_id == action.photo_id else state.current_photo_id
        return replace(state, photos=photos, current_photo_id=current)

    if isinstance(action, (AddCollection, CreateCollection)):
        return replace(state, collections=state.collections + (action.collection,))

    if isinstance(action, AddToCollection):
        target = state.find_collection(action.collection_id)
        if target is None:
            return replace(state)
        members = target.photo_ids + tuple(i for i in dict.fromkeys(action.photo_ids) if i not in target.photo_ids)
        updated = replace(target, photo_ids=members)
        collections = tuple(updated if c is target else c for c in state.collections)
        return replace(state, collections=collections)

    if isinstance(action, AddPreset):
        return replace(state, presets=state.presets + (action.preset,))

    if isinstance(action, ApplyPreset):
        snapshot = action.preset.adjustments
        return _map_photo(state, action.photo_id, lambda p: replace(p, adjustments=snapshot))

    if isinstance(action, SelectAllPhotos):
        return replace(state, photos=tuple(replace(p, is_selected=True) for p in state.photos))

    if isinstance(action, DeselectAllPhotos):
        photos = tuple(replace(p, is_selected=False) for p in state.photos)
        return replace(state, photos=photos, current_photo_id=None)

    if isinstance(action, DeleteSelectedPhotos):
        photos = tuple(p for p in state.photos if not p.is_selected)
        current = state.current_photo_id
        if current is not None and not any(p.id == current for p in photos):
            current = None
        return replace(state, photos=photos, current_photo_id=current)

    raise TypeError(f"Unknown store action: {action!r}")


class Store:
    def __init__(self, initial: StoreState | None = None) -> None:
        self._state = initial if initial is not None else StoreState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> StoreState:
        return self._state

    def dispatch(self, action: Action) -> StoreState:
        self._state = reduce(self._state, action)
        logger.debug("dispatched {}", type(action).__name__)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener failed after {}", type(action).__name__)
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def reset_adjustments_action(photo_id: str) -> UpdateAdjustments:
    """Action restoring every adjustment of *photo_id* to its default."""

    return paste_adjustments_action(photo_id, DEFAULT_ADJUSTMENTS)


def paste_adjustments_action(photo_id: str, copied: AdjustmentSet) -> UpdateAdjustments:
    payload: dict[str, Any] = {name: getattr(copied, name) for name in NUMERIC_FIELDS}
    payload["tone_curve"] = copied.tone_curve
    return UpdateAdjustments(photo_id, payload)


# Ranges the one-click auto adjustment picks from.
AUTO_ADJUST_RANGES: dict[str, tuple[float, float]] = {
    "exposure": (-0.25, 0.25),
    "contrast": (-10.0, 10.0),
    "shadows": (10.0, 40.0),
    "highlights": (-30.0, -10.0),
    "vibrance": (5.0, 25.0),
}


def auto_adjust_action(photo_id: str, rng: random.Random | None = None) -> UpdateAdjustments:
    """Action applying a quick auto adjustment; other fields are left alone."""

    rng = rng or random.Random()
    payload = {name: rng.uniform(lo, hi) for name, (lo, hi) in AUTO_ADJUST_RANGES.items()}
    return UpdateAdjustments(photo_id, payload)
