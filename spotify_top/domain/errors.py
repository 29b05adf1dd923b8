from __future__ import annotations

from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .entities import TimeRange


class TopItemsError(Exception):
    """Base class for failures while fetching or decoding top items."""


class TransportError(TopItemsError):
    """Network failure or timeout before a response was received."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class APIError(TopItemsError):
    """Provider answered with a status other than 200."""

    def __init__(self, status_code: int, status: str) -> None:
        super().__init__(f"resp had non 200 status code: {status}")
        self.status_code = status_code
        self.status = status


class DecodeError(TopItemsError):
    """Response body is not valid JSON or does not have the expected shape."""


class FanOutError(TopItemsError):
    """One or more concurrent fetches of a flow failed.

    Holds every failure, ordered by time range, so a dual failure is reported
    in full rather than whichever task finished last.
    """

    def __init__(self, errors: List[Tuple["TimeRange", BaseException]]) -> None:
        if not errors:
            raise ValueError("FanOutError requires at least one error")
        self.errors = list(errors)
        parts = [f"{time_range.value}: {error}" for time_range, error in self.errors]
        super().__init__("; ".join(parts))

    @property
    def first(self) -> BaseException:
        """Failure of the earliest time range."""
        return self.errors[0][1]
