from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception
from typing import Any

from campus_portal.app.core.env import pick

PLAIN_FORMAT = "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _stack_limit() -> int:
    return int(os.getenv("LOG_STACK_LIMIT", "4000"))


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Values passed through ``extra=`` are grouped: record/attachment fields under
    ``context``, request fields under ``http``. Empty groups are left out.
    """

    context_fields = ("collection", "record_id", "attachment", "username")
    # LogRecord attribute -> key in the "http" group
    http_fields = {"http_method": "method", "path": "path", "status_code": "status"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }

        context = self._collect(record, {name: name for name in self.context_fields})
        if context:
            payload["context"] = context
        http = self._collect(record, self.http_fields)
        if http:
            payload["http"] = http
        if record.exc_info:
            payload["error"] = self._error(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)

    @staticmethod
    def _collect(record: logging.LogRecord, fields: dict[str, str]) -> dict[str, Any]:
        return {key: getattr(record, attr) for attr, key in fields.items() if getattr(record, attr, None) is not None}

    @staticmethod
    def _error(exc_info) -> dict[str, Any]:
        exc_type, exc, _ = exc_info
        stack = "".join(format_exception(*exc_info))
        limit = _stack_limit()
        if len(stack) > limit:
            stack = stack[:limit] + "...(truncated)"
        error: dict[str, Any] = {"stack": stack}
        if exc_type is not None:
            error["type"] = exc_type.__name__
        if exc is not None:
            error["message"] = str(exc)
        return error


def _read_level(level: str | None) -> str:
    explicit = level or os.getenv("LOG_LEVEL")
    if explicit:
        return explicit.upper()
    return pick(prod="INFO", test="INFO", nonprod="DEBUG")


def _read_format(fmt: str | None) -> str:
    explicit = fmt or os.getenv("LOG_FORMAT")
    if explicit:
        return explicit.lower()
    return pick(prod="json", nonprod="plain")


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure the root logger for the process.

    Arguments win over ``LOG_LEVEL`` / ``LOG_FORMAT``, which win over the
    environment defaults (INFO and json in prod, DEBUG and plain elsewhere).
    uvicorn's loggers are routed through the same handler.
    """
    level = _read_level(level)
    formatter = "json" if _read_format(fmt) == "json" else "plain"
    uvicorn = {"level": "INFO", "handlers": [], "propagate": True}

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": PLAIN_FORMAT, "datefmt": DATE_FORMAT},
                "json": {"()": JsonFormatter, "datefmt": DATE_FORMAT},
            },
            "handlers": {
                "stream": {"class": "logging.StreamHandler", "level": level, "formatter": formatter},
            },
            "root": {"level": level, "handlers": ["stream"]},
            "loggers": {name: dict(uvicorn) for name in ("uvicorn", "uvicorn.error", "uvicorn.access")},
        }
    )
