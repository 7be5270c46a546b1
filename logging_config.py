"""
Logging Configuration

Console (and optional file) logging for the orbit tracker entry points.
Library modules only call logging.getLogger(__name__); nothing is
configured on import.

Usage:
    from logging_config import configure_logging, get_logger

    configure_logging("DEBUG")
    logger = get_logger(__name__)
    logger.warning("No position for satellite 37387")
"""

import logging
import sys
from typing import Iterable, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output
NOISY_LOGGERS = ("matplotlib", "PIL", "werkzeug", "urllib3")


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None,
                      quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level : int or str
        Logging level, e.g. logging.DEBUG or "INFO"; unknown names fall back to INFO
    log_file : str, optional
        Also append records to this file
    quiet : iterable of str
        Logger names held at WARNING regardless of `level`
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=_resolve_level(level),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_from_env() -> None:
    """Configure logging from TrackerConfig (LOG_LEVEL, LOG_FILE)."""
    from config import TrackerConfig

    configure_logging(TrackerConfig.LOG_LEVEL, TrackerConfig.LOG_FILE)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
