"""Custom logging handlers for Splunk forwarding."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests  # type: ignore[import-untyped]


class SplunkHECHandler(logging.Handler):
    """Forward log records to a Splunk HTTP Event Collector endpoint."""

    def __init__(self, hec_url: str, token: str, timeout: float = 2.5) -> None:
        super().__init__()
        self.url = hec_url.rstrip("/") + "/event"
        self.headers = {"Authorization": f"Splunk {token}"}
        self.timeout = timeout

    def build_event(self, record: logging.LogRecord) -> dict[str, Any]:
        """Shape a log record into an HEC event payload."""
        event: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            event["exception"] = logging.Formatter().formatException(record.exc_info)
        return {"time": record.created or time.time(), "event": event}

    def emit(self, record: logging.LogRecord) -> None:
        """Post the event to Splunk, reporting sink errors via handleError."""
        try:
            requests.post(self.url, headers=self.headers, json=self.build_event(record), timeout=self.timeout)
        except Exception:
            self.handleError(record)
