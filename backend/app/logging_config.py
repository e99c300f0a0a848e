"""
Structured JSON logging for the student records service.

Every log line is one JSON object on stdout. Entries are grouped into
channels (http, db, store) and carry the ID of the HTTP request that
produced them, so a single request can be followed across the handler,
the store and the database layer.
"""

import logging
import json
import os
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

# ──────────────────────────────────────────────────────────────
# Request ID of the request currently being served. Set by the
# request ID middleware and read by the formatter for every entry.
# ──────────────────────────────────────────────────────────────
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CHANNELS = ("http", "db", "store")


class StructuredJsonFormatter(logging.Formatter):
    """
    Render a LogRecord as a single-line JSON document.

    Keys emitted:
    - timestamp: UTC time with millisecond precision
    - level: INFO, WARNING, ERROR, ...
    - message: the formatted log message
    - channel: http, db, store (or "app" for foreign loggers)
    - context: request_id plus identifiers such as student_id / usn
    - extra: measurements and other metadata (duration_ms, status_code)
    """

    def format(self, record: logging.LogRecord) -> str:
        channel = getattr(record, "channel", None)
        if not channel:
            channel = record.name.split(".")[-1] if record.name.startswith("app.") else "app"

        entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": channel,
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = None):
    """
    Install the JSON formatter on the root logger.

    Safe to call more than once: the root handlers are replaced rather
    than appended to, so repeated application factories (tests) do not
    duplicate output.
    """
    level_name = (level or LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logging.getLogger(f"app.{channel}").setLevel(log_level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for a channel (http, db, store)."""
    return logging.getLogger(f"app.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None):
    """
    Log a message with structured context attached.

    Args:
        logger: Channel logger from get_logger()
        level: Level name (INFO, WARNING, ERROR, DEBUG)
        message: Human-readable message
        context: Identifiers for the entity involved (student_id, usn)
        extra_data: Metadata such as duration_ms or status_code
    """
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        message,
        extra={
            "context": context or {},
            "extra_data": extra_data or {},
            "channel": logger.name.split(".")[-1]
        }
    )


def generate_request_id() -> str:
    """Return a fresh UUID4 string for request tracing."""
    return str(uuid.uuid4())
