from __future__ import annotations

from typing import Protocol

from .entities import ArtistResult, TimeRange, TrackResult


class TopItemsSource(Protocol):
    """Port for a provider of a user's top artists and tracks.

    Implementations raise subclasses of TopItemsError and must be safe to call
    from several threads at once.
    """

    def top_artists(self, time_range: TimeRange) -> ArtistResult:
        """Return the user's top artists for the given window."""

    def top_tracks(self, time_range: TimeRange) -> TrackResult:
        """Return the user's top tracks for the given window."""
