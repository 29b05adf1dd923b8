import contextvars
import logging
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Sequence, Tuple, TypeVar

from spotify_top.crosscutting.logging import CorrelationContext
from spotify_top.domain.entities import TimeRange
from spotify_top.domain.errors import FanOutError

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_TIME_RANGES: Tuple[TimeRange, ...] = (TimeRange.LONG_TERM, TimeRange.SHORT_TERM)


class FanOutCoordinator:
    """Runs one fetch per time range concurrently and joins on all of them.

    Each task reports through its own Future. After every task has finished,
    failures are gathered in time-range order; if there is at least one, the
    whole batch fails with a FanOutError carrying all of them. Siblings of a
    failed task are never cancelled.
    """

    def __init__(self, max_workers: int = 2):
        self.max_workers = max_workers

    def _run_task(self, fetch: Callable[[TimeRange], T], time_range: TimeRange) -> T:
        with CorrelationContext(time_range=time_range.value):
            logger.debug("Task started")
            result = fetch(time_range)
            logger.debug("Task finished")
            return result

    def run(self, fetch: Callable[[TimeRange], T],
            time_ranges: Sequence[TimeRange] = DEFAULT_TIME_RANGES) -> Dict[TimeRange, T]:
        """Run ``fetch`` once per time range and return results keyed by range.

        Raises:
            FanOutError: if any task raised; holds every failure.
        """
        if not time_ranges:
            return {}

        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix='spotify-top') as executor:
            futures: List[Tuple[TimeRange, Future]] = []
            for time_range in time_ranges:
                # A Context can only be entered by one thread at a time, so copy per task
                ctx = contextvars.copy_context()
                futures.append((time_range, executor.submit(ctx.run, self._run_task, fetch, time_range)))

            wait([future for _, future in futures], return_when=ALL_COMPLETED)

        results: Dict[TimeRange, T] = {}
        errors: List[Tuple[TimeRange, BaseException]] = []
        for time_range, future in futures:
            error = future.exception()
            if error is not None:
                logger.info(f"Fetch for {time_range.value} failed: {error}")
                errors.append((time_range, error))
            else:
                results[time_range] = future.result()

        if errors:
            raise FanOutError(errors)

        return results
