"""Logging setup for the planner service."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

from hustle.core.context import get_request_id

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s"

# Per-statement SQL logging would print every streak chunk.
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "openai")


class RequestIdFilter(logging.Filter):
    """Stamp log records with the active request id."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - minimal logic
        record.request_id = get_request_id() or "-"
        return True


def build_logging_config(log_level: str) -> Dict[str, Any]:
    level = log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"planner": {"format": LOG_FORMAT}},
        "filters": {"request_id": {"()": "hustle.core.logging.RequestIdFilter"}},
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "planner",
                "filters": ["request_id"],
                "level": level,
            }
        },
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        "root": {"handlers": ["stderr"], "level": level},
    }


def configure_logging(*, log_level: str = "INFO") -> None:
    """Install the handler once; later calls are ignored."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(build_logging_config(log_level))
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    configure_logging._configured = True  # type: ignore[attr-defined]
