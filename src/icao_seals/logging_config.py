"""Logging configuration for applications using the seal codecs."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

from .config import SealSettings, get_settings

DEFAULT_LOG_FORMAT = (
    "%(asctime)s - %(levelname)s - [%(component_name)s] - [%(name)s] - "
    "[%(module)s.%(funcName)s:%(lineno)d] - %(message)s"
)

LOG_OFF_LEVEL = "OFF"


class ComponentNameFilter(logging.Filter):
    """Filter to inject the component name into log records."""

    def __init__(self, component_name: str) -> None:
        super().__init__()
        self.component_name = component_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.component_name = self.component_name
        return True


class SealJSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component_name", "unknown"),
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    component_name: str = "icao-seals",
    settings: SealSettings | None = None,
    stream=None,
) -> None:
    """
    Configure root logging from settings.

    Args:
        component_name: Name shown in every log record
        settings: Settings to use (defaults to ``get_settings()``)
        stream: Output stream (defaults to stdout)
    """
    settings = settings or get_settings()
    root_logger = logging.getLogger()

    # Replace, not stack, handlers on repeated calls
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if settings.log_level == LOG_OFF_LEVEL:
        root_logger.setLevel(logging.CRITICAL + 1)
        return

    root_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    handler = logging.StreamHandler(stream or sys.stdout)
    if settings.log_format == "json":
        handler.setFormatter(SealJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    handler.addFilter(ComponentNameFilter(component_name))
    root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured. Component: %s, Level: %s", component_name, settings.log_level)
