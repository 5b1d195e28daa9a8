"""Logging setup shared by the resolver API and the evaluation CLI."""

import logging
import sys

PACKAGE_LOGGER = "ingredient_resolver"
LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"

# HTTP client loggers that report every FDC request at INFO.
_HTTP_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Send package logs to stderr at ``level``; repeat calls only change the level.

    stdout stays free for the CLI report table. HTTP client request logs are
    held at WARNING unless ``level`` is DEBUG.
    """
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved)
    logger.propagate = False
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    http_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
    return logger
