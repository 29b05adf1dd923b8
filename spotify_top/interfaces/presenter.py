import sys
from typing import Iterable, List, Optional, TextIO

from spotify_top.domain.entities import Artist, TimeRange, TopItemsPage, TopItemsReport, Track

UNKNOWN_ARTIST = 'Unknown Artist'


def section_header(kind: str, time_range: TimeRange) -> str:
    """Header line, e.g. 'Top five artists all time:'."""
    return f"Top five {kind} {time_range.label}:"


def artist_line(rank: int, artist: Artist) -> str:
    return f"{rank}. {artist.name}"


def track_line(rank: int, track: Track) -> str:
    # Tracks without credited artists still get a line
    return f"{rank}. {track.name} - {track.primary_artist or UNKNOWN_ARTIST}"


def format_artists(page: TopItemsPage[Artist]) -> List[str]:
    return [artist_line(rank, artist) for rank, artist in enumerate(page.items, start=1)]


def format_tracks(page: TopItemsPage[Track]) -> List[str]:
    return [track_line(rank, track) for rank, track in enumerate(page.items, start=1)]


class Presenter:
    """Prints ranked top item lists, in the order the provider returned them."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved late so redirected stdout (tests, pipes) is honoured
        return self._stream if self._stream is not None else sys.stdout

    def _write_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.stream.write(line + "\n")

    def _show_report(self, kind: str, report: TopItemsReport, formatter) -> None:
        self._write_lines([section_header(kind, TimeRange.LONG_TERM)])
        self._write_lines(formatter(report.all_time))
        self._write_lines(["", section_header(kind, TimeRange.SHORT_TERM)])
        self._write_lines(formatter(report.last_four_weeks))

    def show_artists(self, report: TopItemsReport[Artist]) -> None:
        self._show_report('artists', report, format_artists)

    def show_tracks(self, report: TopItemsReport[Track]) -> None:
        self._show_report('tracks', report, format_tracks)

    def separator(self) -> None:
        self._write_lines([""])
        self.stream.flush()
