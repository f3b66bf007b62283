"""Logging configuration for the application."""

import logging
import sys

from gatekeeper.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are noisy at INFO.
_QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "aiosqlite", "asyncio")


def setup_logging() -> None:
    """Configure application-wide logging to stdout.

    DEBUG when settings.debug is True, otherwise INFO. SQL statement logging
    stays controlled by DATABASE_ECHO rather than the root level.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name (usually __name__)."""
    return logging.getLogger(name)
