import logging
from typing import Callable, Optional

from spotify_top.application.fanout import FanOutCoordinator
from spotify_top.crosscutting.logging import CorrelationContext, log_flow_complete, log_flow_start
from spotify_top.domain.entities import Artist, TimeRange, TopItemsPage, TopItemsReport, Track
from spotify_top.domain.ports import TopItemsSource

logger = logging.getLogger(__name__)

ARTISTS_FLOW = 'artists'
TRACKS_FLOW = 'tracks'


class TopItemsService:
    """Runs the artists and tracks flows against a TopItemsSource."""

    def __init__(self, source: TopItemsSource, coordinator: Optional[FanOutCoordinator] = None):
        self.source = source
        self.coordinator = coordinator or FanOutCoordinator()

    def _run_flow(self, flow: str, fetch: Callable[[TimeRange], TopItemsPage]) -> TopItemsReport:
        log_flow_start(logger, flow)
        with CorrelationContext(flow=flow):
            results = self.coordinator.run(fetch, (TimeRange.LONG_TERM, TimeRange.SHORT_TERM))

        report = TopItemsReport(
            all_time=results[TimeRange.LONG_TERM],
            last_four_weeks=results[TimeRange.SHORT_TERM],
        )
        log_flow_complete(logger, flow, {
            time_range.value: len(report.for_range(time_range).items) for time_range in TimeRange
        })
        return report

    def top_artists(self) -> TopItemsReport[Artist]:
        """Fetch both windows of top artists concurrently.

        Raises:
            FanOutError: if either request failed
        """
        return self._run_flow(ARTISTS_FLOW, self.source.top_artists)

    def top_tracks(self) -> TopItemsReport[Track]:
        """Fetch both windows of top tracks concurrently.

        Raises:
            FanOutError: if either request failed
        """
        return self._run_flow(TRACKS_FLOW, self.source.top_tracks)
