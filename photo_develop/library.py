"""Library grid filtering: free-text search plus a quick view or collection."""

from __future__ import annotations

from datetime import datetime, timedelta

from .models import PhotoEntity, StoreState

VIEW_ALL = "all"
VIEW_FAVORITES = "favorites"
VIEW_RECENT = "recent"
VIEW_QUICK = "quick"

RECENT_WINDOW = timedelta(days=7)


def _in_view(photo: PhotoEntity, view: str, now: datetime) -> bool:
    name = photo.name.lower()
    if view == VIEW_FAVORITES:
        return "fav" in name
    if view == VIEW_RECENT:
        created = photo.metadata.date_created
        return created is not None and now - created <= RECENT_WINDOW
    if view == VIEW_QUICK:
        return "quick" in name
    return True


def filter_photos(
    state: StoreState,
    search: str = "",
    view: str = VIEW_ALL,
    now: datetime | None = None,
) -> list[PhotoEntity]:
    """Photos visible in the library for *search* and *view*.

    *view* is one of the ``VIEW_*`` names or a collection id. A collection id
    that matches nothing shows every photo.
    """

    now = now or datetime.now()
    needle = search.strip().lower()

    members: set[str] | None = None
    if view not in (VIEW_ALL, VIEW_FAVORITES, VIEW_RECENT, VIEW_QUICK):
        collection = state.find_collection(view)
        if collection is not None:
            members = set(collection.photo_ids)

    out: list[PhotoEntity] = []
    for photo in state.photos:
        if needle and needle not in photo.name.lower():
            continue
        if members is not None:
            if photo.id not in members:
                continue
        elif not _in_view(photo, view, now):
            continue
        out.append(photo)
    return out
