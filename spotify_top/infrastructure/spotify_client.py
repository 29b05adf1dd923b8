import logging
from typing import Dict
from urllib.parse import urlencode

import requests

from spotify_top.crosscutting.config import DEFAULT_BASE_URL, DEFAULT_LIMIT, DEFAULT_TIMEOUT_S
from spotify_top.domain.entities import ArtistResult, TimeRange, TrackResult
from spotify_top.domain.errors import APIError, TransportError
from spotify_top.domain.ports import TopItemsSource
from spotify_top.infrastructure.decoding import decode_artists, decode_tracks

logger = logging.getLogger(__name__)

ARTISTS = 'artists'
TRACKS = 'tracks'
FAMILIES = (ARTISTS, TRACKS)


class SpotifyTopClient(TopItemsSource):
    """Fetches /me/top/{artists,tracks} with a pre-supplied bearer token.

    Every call is a single GET: no retries, no token refresh. Instances hold no
    mutable state after construction, so one client can serve concurrent tasks.
    """

    def __init__(self,
                 access_token: str,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout_s: float = DEFAULT_TIMEOUT_S,
                 limit: int = DEFAULT_LIMIT):
        """Initialize client.

        Args:
            access_token: Spotify bearer token, sent as is (may be empty)
            base_url: Base of the top items endpoints
            timeout_s: Per-request timeout in seconds
            limit: Number of items requested per time range
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        self._access_token = access_token
        self.base_url = base_url.rstrip('/')
        self.timeout_s = timeout_s
        self.limit = limit

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self._access_token}',
            'Content-Type': 'application/x-www-form-urlencoded',
        }

    def build_url(self, family: str, time_range: TimeRange) -> str:
        """Return the fully qualified URL for one endpoint family and window."""
        if family not in FAMILIES:
            raise ValueError(f"Unknown endpoint family: {family!r}")
        if not isinstance(time_range, TimeRange):
            raise ValueError(f"time_range must be a TimeRange, got {time_range!r}")
        query = urlencode({'limit': self.limit, 'time_range': time_range.value})
        return f"{self.base_url}/{family}?{query}"

    def request(self, family: str, time_range: TimeRange) -> bytes:
        """Issue the GET and return the raw body of a 200 response.

        Raises:
            TransportError: connection failure or timeout
            APIError: any status other than 200
        """
        url = self.build_url(family, time_range)
        logger.debug(f"GET {url}")

        try:
            response = requests.get(url, headers=self._headers(), timeout=self.timeout_s)
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}", cause=e) from e

        if response.status_code != 200:
            raise APIError(response.status_code, f"{response.status_code} {response.reason or ''}".strip())

        return response.content

    def top_artists(self, time_range: TimeRange) -> ArtistResult:
        """Fetch and decode top artists for a window."""
        result = decode_artists(self.request(ARTISTS, time_range))
        logger.debug(f"Decoded {len(result.items)} artists ({time_range.value})")
        return result

    def top_tracks(self, time_range: TimeRange) -> TrackResult:
        """Fetch and decode top tracks for a window."""
        result = decode_tracks(self.request(TRACKS, time_range))
        logger.debug(f"Decoded {len(result.items)} tracks ({time_range.value})")
        return result
