"""Logging configuration helpers for consistent console output."""

from __future__ import annotations

import logging
from logging.config import dictConfig

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def configure_logging(level: str) -> None:
    log_level = (level or "INFO").upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                }
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": log_level, "handlers": ["stdout"]},
            # The SDK logs every request at INFO; keep it quieter than our own output.
            "loggers": {
                "google_genai": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
        }
    )
    for name in UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
