# app/services/photos.py

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from app.schemas.item import PhotoIn, PhotoRef


def normalize_photos(photos: Iterable[PhotoIn]) -> list[PhotoRef]:
    """Bare URLs (legacy payloads) take their list position as order."""
    result: list[PhotoRef] = []
    for index, photo in enumerate(photos):
        if isinstance(photo, str):
            result.append(PhotoRef(url=photo, order=index))
        else:
            result.append(PhotoRef(url=photo.url, order=photo.order))
    return result


def sort_photos(photos: Sequence[PhotoRef]) -> list[PhotoRef]:
    # stable: equal orders keep their relative position
    return sorted(photos, key=lambda p: p.order)


def first_photo_url(photos: Sequence[PhotoRef]) -> Optional[str]:
    if not photos:
        return None
    return sort_photos(photos)[0].url
