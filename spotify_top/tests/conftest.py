import logging
import os
import sys

import pytest


def _ensure_project_root_on_sys_path() -> None:
    here = os.path.dirname(__file__)
    project_root = os.path.abspath(os.path.join(here, "..", ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_sys_path()


@pytest.fixture(autouse=True)
def _clear_spotify_top_env():
    """Ensure the bearer token and tool settings do not leak across tests.
    A developer .env may set these variables; clear before each test and
    restore afterwards so tests explicitly setting them remain deterministic.
    """
    keys = ['SPOTIFY_KEY', 'SPOTIFY_TOP_BASE_URL', 'SPOTIFY_TOP_LOG_LEVEL', 'SPOTIFY_TOP_LOG_FILE']
    backup = {k: os.environ.get(k) for k in keys}
    for k in keys:
        os.environ.pop(k, None)
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def _reset_spotify_top_logger():
    """Drop handlers bound to a previous test's captured streams."""
    yield
    logger = logging.getLogger('spotify_top')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
