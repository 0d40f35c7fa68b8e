"""Shared logging configuration for the API and the moderation dashboard."""

from __future__ import annotations

import logging
import os
from collections import deque
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger import jsonlogger

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, str]] = deque(maxlen=200)


class _ServiceNameFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.service = self.service_name
        return True


_CONTEXT_KEYS = ("submission_id", "action", "blob_path")


class _BufferHandler(logging.Handler):
    """Keep recent records (with moderation context) for the admin log view."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - trivial
        try:
            timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
            entry = {
                "time": timestamp,
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            for key in _CONTEXT_KEYS:
                value = getattr(record, key, None)
                if value is not None:
                    entry[key] = str(value)
            _LOG_BUFFER.appendleft(entry)
        except Exception:
            # Never break logging for buffer failures
            return


def setup_logging(service_name: Optional[str] = None) -> None:
    """Configure root logging with a JSON formatter and consistent metadata."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    service = service_name or os.getenv("SERVICE_NAME", "ia-showcase")

    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s %(service)s")
    )
    handler.addFilter(_ServiceNameFilter(service))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.addHandler(_BufferHandler())
    root.setLevel(log_level)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(limit: int = 100, submission_id: str | None = None) -> list[dict[str, str]]:
    entries = list(_LOG_BUFFER)
    if submission_id:
        entries = [entry for entry in entries if entry.get("submission_id") == submission_id]
    return entries[:limit]


__all__ = ["setup_logging", "get_log_buffer"]
