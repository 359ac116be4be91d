"""Structured JSON logging shared by the API server and the smoke runner.

Every record becomes one JSON line on stdout. Structured fields travel in
``extra=`` (or as a dict message) and land at the top level of the line.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any

_HANDLER_NAME = "robot_api.json"
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Whatever a bare record already carries is plumbing, not an extra.
_STANDARD_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_FIELDS}


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON object.

    ``ts``, ``level`` and ``logger`` are always present and cannot be
    overridden by extras.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        if isinstance(record.msg, dict):
            body = dict(record.msg)
        else:
            body = {"message": record.getMessage()}
        body.update(_extras(record))
        if record.exc_info:
            body["exc_info"] = self.formatException(record.exc_info)

        line = {
            **body,
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
        }
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(level: str | int | None = None) -> None:
    """Attach the JSON handler to the root logger and route uvicorn through it.

    Does nothing when the root logger already has handlers, so repeated
    imports, reloads and test runs keep whatever is configured.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    lvl = _resolve_level(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(lvl)

    for name in _UVICORN_LOGGERS:
        uv = logging.getLogger(name)
        uv.handlers.clear()
        uv.propagate = True
        uv.setLevel(lvl)


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or "robot_api")
