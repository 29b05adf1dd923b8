"""Decoding of /me/top JSON payloads into domain entities.

Unknown fields are ignored and missing scalars fall back to empty values, so
newer payloads keep decoding. Anything that breaks the expected shape raises
DecodeError.
"""

import json
from typing import Any, Callable, Dict, List, Optional, TypeVar

from spotify_top.domain.entities import (
    Album,
    Artist,
    ArtistRef,
    ArtistResult,
    ExternalIds,
    ExternalUrls,
    Followers,
    Image,
    LinkedTrack,
    Track,
    TrackResult,
)
from spotify_top.domain.errors import DecodeError

T = TypeVar("T")


def decode_artists(raw: bytes) -> ArtistResult:
    """Decode a top artists response body."""
    payload = _load(raw)
    items = _list(payload, "items", required=True)
    return ArtistResult(items=[_artist(_as_object(item, "items[]")) for item in items], **_paging(payload))


def decode_tracks(raw: bytes) -> TrackResult:
    """Decode a top tracks response body."""
    payload = _load(raw)
    items = _list(payload, "items", required=True)
    return TrackResult(items=[_track(_as_object(item, "items[]")) for item in items], **_paging(payload))


def _load(raw: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"Invalid JSON in response body: {e}") from e
    return _as_object(payload, "response")


def _as_object(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"Expected object for {where}, got {type(value).__name__}")
    return value


def _list(data: Dict[str, Any], key: str, required: bool = False) -> List[Any]:
    if key not in data or data[key] is None:
        if required:
            raise DecodeError(f"Missing '{key}' in response")
        return []
    value = data[key]
    if not isinstance(value, list):
        raise DecodeError(f"Expected list for '{key}', got {type(value).__name__}")
    return value


def _object(data: Dict[str, Any], key: str, build: Callable[[Dict[str, Any]], T]) -> Optional[T]:
    value = data.get(key)
    if value is None:
        return None
    return build(_as_object(value, key))


def _scalar(data: Dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int subclass; keep counters and flags apart
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(f"Expected {kind.__name__} for '{key}', got {type(value).__name__}")
    return value


def _str(data: Dict[str, Any], key: str, default: Any = "") -> Any:
    return _scalar(data, key, str, default)


def _int(data: Dict[str, Any], key: str) -> int:
    return _scalar(data, key, int, 0)


def _bool(data: Dict[str, Any], key: str) -> bool:
    return _scalar(data, key, bool, False)


def _paging(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'total': _int(data, 'total'),
        'limit': _int(data, 'limit'),
        'offset': _int(data, 'offset'),
        'href': _str(data, 'href'),
        'previous': _str(data, 'previous', None),
        'next': _str(data, 'next', None),
    }


def _external_urls(data: Dict[str, Any]) -> ExternalUrls:
    return _object(data, 'external_urls', lambda d: ExternalUrls(spotify=_str(d, 'spotify'))) or ExternalUrls()


def _images(data: Dict[str, Any]) -> List[Image]:
    images = []
    for item in _list(data, 'images'):
        image = _as_object(item, 'images[]')
        images.append(Image(url=_str(image, 'url'), height=_int(image, 'height'), width=_int(image, 'width')))
    return images


def _artist_ref(data: Dict[str, Any]) -> ArtistRef:
    return ArtistRef(
        name=_str(data, 'name'),
        id=_str(data, 'id'),
        uri=_str(data, 'uri'),
        href=_str(data, 'href'),
        type=_str(data, 'type'),
        external_urls=_external_urls(data),
    )


def _artist_refs(data: Dict[str, Any]) -> List[ArtistRef]:
    return [_artist_ref(_as_object(item, 'artists[]')) for item in _list(data, 'artists')]


def _artist(data: Dict[str, Any]) -> Artist:
    genres = _list(data, 'genres')
    if not all(isinstance(genre, str) for genre in genres):
        raise DecodeError("Expected list of strings for 'genres'")
    followers = _object(
        data, 'followers', lambda d: Followers(total=_int(d, 'total'), href=_str(d, 'href', None))
    )
    return Artist(
        name=_str(data, 'name'),
        id=_str(data, 'id'),
        uri=_str(data, 'uri'),
        href=_str(data, 'href'),
        type=_str(data, 'type'),
        genres=list(genres),
        popularity=_int(data, 'popularity'),
        followers=followers or Followers(),
        images=_images(data),
        external_urls=_external_urls(data),
    )


def _album(data: Dict[str, Any]) -> Album:
    return Album(
        name=_str(data, 'name'),
        album_type=_str(data, 'album_type'),
        artists=_artist_refs(data),
        images=_images(data),
        release_date=_str(data, 'release_date'),
        release_date_precision=_str(data, 'release_date_precision'),
        id=_str(data, 'id'),
        uri=_str(data, 'uri'),
        href=_str(data, 'href'),
        type=_str(data, 'type'),
        external_urls=_external_urls(data),
    )


def _linked_track(data: Dict[str, Any]) -> LinkedTrack:
    return LinkedTrack(
        id=_str(data, 'id'),
        uri=_str(data, 'uri'),
        href=_str(data, 'href'),
        type=_str(data, 'type'),
        external_urls=_external_urls(data),
    )


def _track(data: Dict[str, Any]) -> Track:
    return Track(
        name=_str(data, 'name'),
        artists=_artist_refs(data),
        album=_object(data, 'album', _album) or Album(),
        id=_str(data, 'id'),
        uri=_str(data, 'uri'),
        href=_str(data, 'href'),
        type=_str(data, 'type'),
        disc_number=_int(data, 'disc_number'),
        duration_ms=_int(data, 'duration_ms'),
        explicit=_bool(data, 'explicit'),
        external_ids=_object(data, 'external_ids', lambda d: ExternalIds(isrc=_str(d, 'isrc'))) or ExternalIds(),
        external_urls=_external_urls(data),
        is_local=_bool(data, 'is_local'),
        is_playable=_bool(data, 'is_playable'),
        popularity=_int(data, 'popularity'),
        preview_url=_str(data, 'preview_url', None),
        track_number=_int(data, 'track_number'),
        linked_from=_object(data, 'linked_from', _linked_track),
    )
