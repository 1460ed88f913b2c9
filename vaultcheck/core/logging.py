"""Structured logging configuration.

Provides:
  - JSON-formatted log output for CI runs
  - Human-readable colored output for local campaigns
  - Check / actor / sequence correlation fields
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

_EXTRA_FIELDS = ("check_id", "tag", "actor", "outcome", "sequence_id", "step")


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter for CI and log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_entry["module"] = record.module
            log_entry["function"] = record.funcName
            log_entry["line"] = record.lineno

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else "Unknown",
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class DevFormatter(logging.Formatter):
    """Colored human-readable formatter for local runs."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.now(timezone.utc).strftime("%H:%M:%S")
        prefix = f"{color}{ts} [{record.levelname:>8s}]{self.RESET}"
        msg = record.getMessage()

        check_id = getattr(record, "check_id", None)
        if check_id:
            msg = f"[{check_id}] {msg}"

        sequence_id = getattr(record, "sequence_id", None)
        if sequence_id:
            step = getattr(record, "step", None)
            where = sequence_id if step is None else f"{sequence_id}@{step}"
            msg = f"<{where}> {msg}"

        base = f"{prefix} {record.name}: {msg}"
        if record.exc_info and record.exc_info[1]:
            base += "\n" + self.formatException(record.exc_info)
        return base


def setup_logging(env: str = "development", log_level: str = "INFO") -> None:
    """Configure logging for the harness.

    Args:
        env: Harness environment (development/staging/production)
        log_level: Minimum log level
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if env in ("staging", "production"):
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(DevFormatter())

    root.addHandler(handler)


class CampaignLogFilter(logging.Filter):
    """Filter that stamps the active sequence and call index onto log records.

    The campaign advances ``step`` as it executes each call; records logged
    before the first call carry ``step=None``.
    """

    def __init__(self, sequence_id: str = "", step: int | None = None) -> None:
        super().__init__()
        self.sequence_id = sequence_id
        self.step = step

    def filter(self, record: logging.LogRecord) -> bool:
        record.sequence_id = self.sequence_id  # type: ignore[attr-defined]
        record.step = self.step  # type: ignore[attr-defined]
        return True
