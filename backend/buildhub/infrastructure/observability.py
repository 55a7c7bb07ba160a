"""Structured Logging — JSON log lines carrying build/repository identifiers.

Invariants:
    - Every line has timestamp (the record's creation time, UTC), level, logger, message
    - Build-pipeline extras (build_id, repository_id, event, ...) included only when set
    - setup_logging() is idempotent: re-running it replaces the handler it installed
"""

import logging
import json
from datetime import datetime, timezone

# Keys passed via `extra=` across the save pipeline, pub/sub client and error handlers
PIPELINE_EXTRA_KEYS = (
    "build_id", "repository_id", "event", "attempt", "error_code",
    "msg_id", "children", "path",
)

# Per-request chatter from libraries the pipeline drives
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(pipeline_extras(record))
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines for local development, extras appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = pipeline_extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def pipeline_extras(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key] for key in PIPELINE_EXTRA_KEYS
        if record.__dict__.get(key) is not None
    }


_handler: logging.Handler | None = None


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the application handler on the root logger."""
    global _handler
    if _handler is not None:
        logging.root.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    logging.root.addHandler(_handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return _handler
