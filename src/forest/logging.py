"""Structured JSON logging helpers shared across the package."""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Any

SERVICE_NAME = "forest-skill-orchestrator"

_logger = logging.getLogger("forest")


def configure_logging(service_name: str = SERVICE_NAME) -> logging.Logger:
    level_name = os.getenv("FOREST_LOG_LEVEL", "INFO").upper()
    root = logging.getLogger("forest")
    root.setLevel(getattr(logging, level_name, logging.INFO))
    if not any(getattr(h, "_forest_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._forest_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.propagate = False
    log_json(logging.DEBUG, "logging_configured", service=service_name, log_level=level_name)
    return root


def log_json(level: int, event: str, **fields: Any) -> None:
    if not _logger.isEnabledFor(level):
        return
    record = {"ts": round(time.time(), 3), "level": logging.getLevelName(level), "event": event}
    record.update(fields)
    _logger.log(level, json.dumps(record, default=str, sort_keys=False))


__all__ = ["SERVICE_NAME", "configure_logging", "log_json"]
