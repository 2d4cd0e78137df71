# file_guard/utils/logging.py
"""Structured logging with JSON format and decision context.

Provides:
- JSON-formatted diagnostic output on stderr
- Per-invocation decision context (session, hook event, tool, decision) via
  ContextVar, attached to every log line
- Centralized logger configuration
"""

import json
import logging
from contextvars import ContextVar
from typing import Any, TextIO

CONTEXT_FIELDS = ("session_id", "hook_event", "tool", "decision")

# Context of the decision being made by this invocation
log_context_var: ContextVar[dict[str, str]] = ContextVar("log_context", default={})


def bind_log_context(**fields: str) -> None:
    """Add fields to the decision context of the current invocation.

    Unknown names and empty values are ignored.

    Args:
        **fields: Any of session_id, hook_event, tool, decision.
    """
    context = dict(log_context_var.get())
    context.update({k: v for k, v in fields.items() if k in CONTEXT_FIELDS and v})
    log_context_var.set(context)


def get_log_context() -> dict[str, str]:
    return dict(log_context_var.get())


def clear_log_context() -> None:
    log_context_var.set({})


class StructuredFormatter(logging.Formatter):
    """JSON formatter for guard diagnostics.

    Each line carries timestamp, level, logger and message, followed by the
    bound decision context so a blocked attempt can be traced to its session.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(log_context_var.get())

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_structured_logging(
    level: int | str = logging.WARNING,
    stream: TextIO | None = None,
    structured: bool = True,
) -> logging.Handler:
    """Configure diagnostic logging for the guard.

    Sets up a StreamHandler (stderr by default) on the root logger. Stdout is
    never used: the caller reads the decision from the exit status and stderr.

    Args:
        level: Logging level name or number (default: WARNING).
        stream: Target stream. Defaults to sys.stderr.
        structured: Emit JSON lines instead of plain text.

    Returns:
        The installed handler, so callers can remove it again.
    """
    handler = logging.StreamHandler(stream)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logging.root.addHandler(handler)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.root.setLevel(level)
    return handler
