import argparse
import logging
import signal
import sys
import time
from typing import List, Mapping, Optional

from spotify_top.application.fanout import FanOutCoordinator
from spotify_top.application.top_items import TopItemsService
from spotify_top.crosscutting.config import ConfigError, Settings, load_settings
from spotify_top.crosscutting.logging import log_error, setup_logging
from spotify_top.domain.errors import FanOutError, TopItemsError
from spotify_top.infrastructure.spotify_client import SpotifyTopClient
from spotify_top.interfaces.presenter import Presenter

logger = logging.getLogger(__name__)


class CLI:
    """Command Line Interface for spotify-top."""

    def __init__(self,
                 environ: Optional[Mapping[str, str]] = None,
                 presenter: Optional[Presenter] = None,
                 use_dotenv: bool = True):
        """Initialize CLI.

        Args:
            environ: Environment to read settings from (defaults to os.environ)
            presenter: Output sink for the ranked lists (defaults to stdout)
            use_dotenv: Load a .env file when reading the process environment
        """
        self._environ = environ
        self._use_dotenv = use_dotenv
        self.presenter = presenter or Presenter()
        self.parser = self._create_parser()
        self._setup_signal_handlers()
        self._start_time = None

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser. The tool takes no options."""
        return argparse.ArgumentParser(
            prog='spotify-top',
            description='Print your top five Spotify artists and tracks, '
                        'all time and for the last four weeks. '
                        'The bearer token is read from SPOTIFY_KEY.'
        )

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            logger.warning(f"Received signal {signum}, shutting down...")
            sys.exit(130)

        signal.signal(signal.SIGTERM, signal_handler)

    def _log_duration(self) -> None:
        if self._start_time:
            duration = time.time() - self._start_time
            logger.info(f"CLI execution time: {duration:.2f}s")

    def _create_client(self, settings: Settings) -> SpotifyTopClient:
        """Create the top items client from settings."""
        return SpotifyTopClient(
            settings.spotify_key,
            base_url=settings.base_url,
            timeout_s=settings.timeout_s,
            limit=settings.limit,
        )

    def _create_service(self, settings: Settings) -> TopItemsService:
        return TopItemsService(self._create_client(settings), FanOutCoordinator(max_workers=2))

    def _report_failure(self, error: BaseException) -> None:
        if isinstance(error, FanOutError):
            for time_range, cause in error.errors:
                log_error(logger, f"Fetching {time_range.value} top items failed", cause,
                          time_range=time_range.value)
        else:
            log_error(logger, "Fetching top items failed", error)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Run the CLI: artists flow, blank line, tracks flow.

        Exits with status 1 on any fetch, decode or configuration failure.
        """
        self._start_time = time.time()

        self.parser.parse_args(argv)

        try:
            settings = load_settings(self._environ, use_dotenv=self._use_dotenv)
            setup_logging(settings.log_level, settings.log_file)
            logger.debug(f"Configuration: {settings.summary()}")

            service = self._create_service(settings)

            artists = service.top_artists()
            self.presenter.show_artists(artists)
            self.presenter.separator()

            tracks = service.top_tracks()
            self.presenter.show_tracks(tracks)

        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            sys.exit(1)
        except TopItemsError as e:
            self._report_failure(e)
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Operation cancelled by user")
            sys.exit(130)
        except Exception as e:
            log_error(logger, "CLI error", e)
            sys.exit(1)
        finally:
            self._log_duration()


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    cli = CLI()
    cli.run(argv)


if __name__ == '__main__':
    main()
