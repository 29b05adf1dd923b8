import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


DEFAULT_BASE_URL = 'https://api.spotify.com/v1/me/top'
DEFAULT_TIMEOUT_S = 2.0
DEFAULT_LIMIT = 5
DEFAULT_LOG_LEVEL = 'WARNING'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

# Environment variable names
SPOTIFY_KEY_VAR = 'SPOTIFY_KEY'
BASE_URL_VAR = 'SPOTIFY_TOP_BASE_URL'
LOG_LEVEL_VAR = 'SPOTIFY_TOP_LOG_LEVEL'
LOG_FILE_VAR = 'SPOTIFY_TOP_LOG_FILE'


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read once at startup and passed down explicitly."""

    spotify_key: str = ''
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = DEFAULT_TIMEOUT_S
    limit: int = DEFAULT_LIMIT
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None

    def summary(self) -> dict:
        """Get configuration summary (without sensitive data)."""
        return {
            'base_url': self.base_url,
            'timeout_s': self.timeout_s,
            'limit': self.limit,
            'log_level': self.log_level,
            'log_file': self.log_file,
            'has_spotify_key': bool(self.spotify_key),
        }


def load_settings(environ: Optional[Mapping[str, str]] = None,
                  use_dotenv: bool = True) -> Settings:
    """Build settings from the environment.

    When ``environ`` is None the process environment is used, after loading a
    ``.env`` file that never overrides variables already set. A missing
    SPOTIFY_KEY is not an error here; the provider rejects the request instead.

    Raises:
        ConfigError: if the base URL is empty or the log level is unknown.
    """
    if environ is None:
        if use_dotenv:
            load_dotenv(override=False)
        environ = os.environ

    base_url = environ.get(BASE_URL_VAR, DEFAULT_BASE_URL).strip().rstrip('/')
    if not base_url:
        raise ConfigError(f"{BASE_URL_VAR} must not be empty")

    log_level = environ.get(LOG_LEVEL_VAR, DEFAULT_LOG_LEVEL).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(
            f"{LOG_LEVEL_VAR} must be one of {', '.join(LOG_LEVELS)}, got '{log_level}'"
        )

    log_file = environ.get(LOG_FILE_VAR) or None

    return Settings(
        spotify_key=environ.get(SPOTIFY_KEY_VAR, ''),
        base_url=base_url,
        log_level=log_level,
        log_file=log_file,
    )
