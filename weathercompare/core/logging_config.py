"""Logging setup: JSON (or plain) records on stderr plus an in-memory tail for /logs."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger import jsonlogger

from weathercompare.core.config import settings

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, str]] = deque(maxlen=settings.log_buffer_size)

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(service)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s"


class _ServiceNameFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


class LogBufferHandler(logging.Handler):
    """Keep the newest records first, in a bounded deque served by ``/logs``."""

    def __init__(self, buffer: deque[dict[str, str]] | None = None) -> None:
        super().__init__()
        self.buffer = _LOG_BUFFER if buffer is None else buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry = {
                "time": created.isoformat().replace("+00:00", "Z"),
                "level": record.levelname,
                "name": record.name,
                "service": getattr(record, "service", settings.service_name),
                "message": record.getMessage(),
            }
            provider = getattr(record, "provider", None)
            if provider:
                entry["provider"] = str(provider)
        except Exception:  # noqa: BLE001
            self.handleError(record)
            return
        self.buffer.appendleft(entry)


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "plain":
        return logging.Formatter(PLAIN_FORMAT)
    if log_format == "json":
        return jsonlogger.JsonFormatter(
            JSON_FORMAT, rename_fields={"asctime": "time", "levelname": "level"}
        )
    raise ValueError(f"Unsupported log format: {log_format}")


def setup_logging(service_name: Optional[str] = None) -> None:
    """Configure the root logger once for the API process."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    service_filter = _ServiceNameFilter(service_name or settings.service_name)

    stream = logging.StreamHandler()
    stream.setFormatter(build_formatter(settings.log_format))
    stream.addFilter(service_filter)

    buffer_handler = LogBufferHandler()
    buffer_handler.addFilter(service_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stream)
    root.addHandler(buffer_handler)
    root.setLevel(settings.log_level.upper())
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(limit: int = 100) -> list[dict[str, str]]:
    return list(_LOG_BUFFER)[:limit]


__all__ = ["LogBufferHandler", "build_formatter", "get_log_buffer", "setup_logging"]
