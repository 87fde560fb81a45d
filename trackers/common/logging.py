"""Console logging for the tracker CLIs."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: int | str = logging.INFO, module_name: str = "trackers") -> logging.Logger:
    """Attach a console handler to the package logger.

    Calling again replaces the handler installed by a previous call, so the
    handler always writes to the current ``sys.stderr``.

    Args:
        level: Logging level or level name ("DEBUG", "INFO", ...).
        module_name: Logger that receives the handler.

    Returns:
        The configured logger.
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")

    logger = logging.getLogger(module_name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_trackers_console", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._trackers_console = True
    logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger
