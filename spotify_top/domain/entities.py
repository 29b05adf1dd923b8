from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar


class TimeRange(Enum):
    """Aggregation window the provider uses to compute top items."""

    LONG_TERM = "long_term"
    SHORT_TERM = "short_term"

    @property
    def label(self) -> str:
        """Human readable name used in section headers."""
        return _TIME_RANGE_LABELS[self]


_TIME_RANGE_LABELS = {
    TimeRange.LONG_TERM: "all time",
    TimeRange.SHORT_TERM: "last four weeks",
}


@dataclass(frozen=True)
class ExternalUrls:
    spotify: str = ""


@dataclass(frozen=True)
class ExternalIds:
    isrc: str = ""


@dataclass(frozen=True)
class Image:
    url: str = ""
    height: int = 0
    width: int = 0


@dataclass(frozen=True)
class Followers:
    total: int = 0
    href: Optional[str] = None


@dataclass(frozen=True)
class Artist:
    """Top artist entry. Only the name is presented; the rest is provider metadata."""

    name: str = ""
    id: str = ""
    uri: str = ""
    href: str = ""
    type: str = ""
    genres: List[str] = field(default_factory=list)
    popularity: int = 0
    followers: Followers = field(default_factory=Followers)
    images: List[Image] = field(default_factory=list)
    external_urls: ExternalUrls = field(default_factory=ExternalUrls)


@dataclass(frozen=True)
class ArtistRef:
    """Simplified artist object embedded in tracks and albums."""

    name: str = ""
    id: str = ""
    uri: str = ""
    href: str = ""
    type: str = ""
    external_urls: ExternalUrls = field(default_factory=ExternalUrls)


@dataclass(frozen=True)
class Album:
    name: str = ""
    album_type: str = ""
    artists: List[ArtistRef] = field(default_factory=list)
    images: List[Image] = field(default_factory=list)
    release_date: str = ""
    release_date_precision: str = ""
    id: str = ""
    uri: str = ""
    href: str = ""
    type: str = ""
    external_urls: ExternalUrls = field(default_factory=ExternalUrls)


@dataclass(frozen=True)
class LinkedTrack:
    """Original track a relinked track stands in for."""

    id: str = ""
    uri: str = ""
    href: str = ""
    type: str = ""
    external_urls: ExternalUrls = field(default_factory=ExternalUrls)


@dataclass(frozen=True)
class Track:
    """Top track entry with its contributing artists in credit order."""

    name: str = ""
    artists: List[ArtistRef] = field(default_factory=list)
    album: Album = field(default_factory=Album)
    id: str = ""
    uri: str = ""
    href: str = ""
    type: str = ""
    disc_number: int = 0
    duration_ms: int = 0
    explicit: bool = False
    external_ids: ExternalIds = field(default_factory=ExternalIds)
    external_urls: ExternalUrls = field(default_factory=ExternalUrls)
    is_local: bool = False
    is_playable: bool = False
    popularity: int = 0
    preview_url: Optional[str] = None
    track_number: int = 0
    linked_from: Optional[LinkedTrack] = None

    @property
    def primary_artist(self) -> Optional[str]:
        """Name of the first credited artist, None when the track has none."""
        if not self.artists:
            return None
        return self.artists[0].name


ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class TopItemsPage(Generic[ItemT]):
    """Ranked items plus the paging metadata returned alongside them."""

    items: List[ItemT] = field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0
    href: str = ""
    previous: Optional[str] = None
    next: Optional[str] = None


class ArtistResult(TopItemsPage[Artist]):
    """Decoded /me/top/artists response."""


class TrackResult(TopItemsPage[Track]):
    """Decoded /me/top/tracks response."""


@dataclass(frozen=True)
class TopItemsReport(Generic[ItemT]):
    """Joined output of one flow: one page per time range."""

    all_time: TopItemsPage[ItemT]
    last_four_weeks: TopItemsPage[ItemT]

    def for_range(self, time_range: TimeRange) -> TopItemsPage[ItemT]:
        if time_range is TimeRange.LONG_TERM:
            return self.all_time
        return self.last_four_weeks
