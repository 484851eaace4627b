"""Logging setup shared by the CLI and workers."""

from __future__ import annotations

import logging
from typing import Optional

ROOT_LOGGER = "fep"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"

# httpx logs request URLs, and Gemini takes its API key as a query param.
QUIET_LOGGERS = ("httpx", "httpcore", "psycopg")


def configure_logging(level: str = "INFO") -> None:
    """Attach one stderr handler; `level` applies to the pipeline's own loggers."""
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    logging.getLogger(ROOT_LOGGER).setLevel(level.upper())
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or ROOT_LOGGER)
