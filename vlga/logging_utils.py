from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

LOG_FORMATS = ("plain", "text", "json")

_RESERVED = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    "event", "message",
}


class StructuredFormatter(logging.Formatter):
    """
    `plain` prints the bare message, as the run log reads; `text` prints
    key=value pairs; `json` prints one object per line.
    """

    def __init__(self, fmt: str = "plain") -> None:
        super().__init__()
        if fmt not in LOG_FORMATS:
            raise ValueError(f"Unknown log format {fmt!r}; expected one of {LOG_FORMATS}")
        self.fmt = fmt

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        extras = {k: v for k, v in record.__dict__.items()
                  if not k.startswith("_") and k not in _RESERVED}
        if self.fmt == "plain":
            if extras:
                message = " ".join([message, *(f"{k}={v}" for k, v in extras.items())])
            if record.exc_info:
                return f"{message}\n{self.formatException(record.exc_info)}"
            return message

        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", "log"),
        }
        if message and message != payload["event"]:
            payload["message"] = message
        payload.update(extras)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if self.fmt == "json":
            return json.dumps(payload, default=str)
        return " ".join(f"{k}={v}" for k, v in payload.items())


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Installs a single stdout handler on the root logger. Arguments left as
    None fall back to the LOG_LEVEL and LOG_FORMAT environment variables.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("LOG_FORMAT", "plain")).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(fmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger.log(level, event, extra={"event": event, **fields})
