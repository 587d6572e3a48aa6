"""JSON log formatting for Lambda's stdout-based log capture."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

LOG_FIELDS = ("levelname", "name", "message")

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Formatter emitting level, logger, message, timestamp and any ``extra=`` fields."""

    return JsonFormatter(
        " ".join(f"%({field})s" for field in LOG_FIELDS),
        rename_fields=FIELD_RENAME_MAP,
        timestamp=True,
    )


def configure_logging(level: str = "INFO") -> None:
    """Attach the JSON formatter to the root logger.

    The Lambda runtime installs its own root handler before user code runs,
    so existing handlers are reformatted rather than replaced.
    """

    root = logging.getLogger()
    root.setLevel(level.upper())
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        if not isinstance(handler.formatter, JsonFormatter):
            handler.setFormatter(create_json_formatter())
