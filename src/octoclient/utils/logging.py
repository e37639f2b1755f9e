"""Logging setup and helpers."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)8s] %(name)s: %(message)s"
DEV_LOG_FORMAT = "%(asctime)s [%(levelname)8s] %(name)s (%(filename)s:%(lineno)d): %(message)s"


def is_dev() -> bool:
    """Whether the process runs in development mode."""
    return os.getenv("ENVIRONMENT") == "dev"


def configure_logging(debug: bool = False) -> None:
    """Log to stderr, at DEBUG level in development mode or when asked to."""
    dev = is_dev()
    logging.basicConfig(
        level=logging.DEBUG if dev or debug else logging.INFO,
        format=DEV_LOG_FORMAT if dev else LOG_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger("aiohttp.client").setLevel(logging.WARNING)


def log_error(logger: logging.Logger, msg: str, exc: BaseException) -> None:
    """Log an error, with traceback only in development mode."""
    if is_dev():
        logger.error("%s: %s", msg, exc, exc_info=exc)
    else:
        logger.error("%s: %s", msg, exc)
