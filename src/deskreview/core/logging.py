"""Logging setup: JSON lines on stdout, structured context via ``extra``."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

# Attributes present on every LogRecord; anything else came in through ``extra``.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter suitable for stdout shipping."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED or key.startswith("_"):
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            log_obj[key] = value
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, ensure_ascii=False)


def configure_logging(level: str = "INFO", *, json_output: bool = True) -> None:
    """Install a single stdout handler on the root logger. Idempotent."""
    root = logging.getLogger()
    if not any(getattr(h, "_deskreview", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        if json_output:
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
            )
        handler._deskreview = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())
