"""Logging setup for the FileMaster backend."""
from __future__ import annotations

import logging
import logging.config

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _validate_log_level(log_level: str) -> str:
    level = (log_level or "").strip().upper()
    if level not in VALID_LEVELS:
        raise ValueError(f"Invalid log level: {log_level!r}. Must be one of {list(VALID_LEVELS)}")
    return level


def setup_logging(log_level: str = "INFO") -> None:
    """Route all ``filemaster`` loggers to stderr at *log_level*.

    Existing loggers (uvicorn's in particular) are left enabled.
    """
    level = _validate_log_level(log_level)
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "filemaster": {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(config)
    logging.getLogger(__name__).debug("logging initialized: level=%s", level)
