"""
Narrative Context - Structured Logging

JSON log formatting plus a trace id carried in a context variable, so every log
line emitted while one optimization runs can be correlated.
"""

import contextvars
import json
import logging
import sys
import time
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

_trace_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("trace_id", default=None)

# LogRecord attributes that are never copied into the JSON payload as extras
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    }
)

ROOT_LOGGER = "narrative_context"


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        trace_id = _trace_id_ctx.get()
        if trace_id:
            log_data["trace_id"] = trace_id

        for key, value in record.__dict__.items():
            if key in log_data or key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", json_format: bool = True) -> logging.Logger:
    """
    Configure the package logger.

    Handlers are replaced rather than appended, so calling this twice does not
    duplicate output. Logs go to stderr; stdout belongs to the CLI and the
    stdio MCP transport.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


def get_trace_id() -> str | None:
    """Get current trace ID from context."""
    return _trace_id_ctx.get()


def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx.set(trace_id)


@contextmanager
def trace(span_name: str, tags: dict[str, Any] | None = None) -> Generator[str, None, None]:
    """
    Run a block under a trace id, logging span start, completion and errors.

    Reuses the active trace id when one is set, otherwise generates one and
    restores the previous (empty) value on exit.

    Example:
        with trace("engine.optimize", {"budget": 2000}):
            result = engine.optimize(request)
    """
    logger = logging.getLogger(ROOT_LOGGER)
    tags = tags or {}

    token = None
    trace_id = _trace_id_ctx.get()
    if trace_id is None:
        trace_id = str(uuid4())
        token = _trace_id_ctx.set(trace_id)

    start_time = time.perf_counter()
    logger.debug(f"Span started: {span_name}", extra={"span_name": span_name, "tags": tags})
    try:
        yield trace_id
    except Exception as e:
        logger.error(
            f"Span error: {span_name}",
            extra={"span_name": span_name, "error": str(e), "tags": tags},
            exc_info=True,
        )
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Span completed: {span_name}",
            extra={"span_name": span_name, "duration_ms": round(duration_ms, 2), "tags": tags},
        )
        if token is not None:
            _trace_id_ctx.reset(token)
