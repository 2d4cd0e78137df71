# file_guard/utils/__init__.py
"""Utility functions for the sensitive file guard."""

from file_guard.utils.logging import (
    StructuredFormatter,
    bind_log_context,
    clear_log_context,
    configure_structured_logging,
    get_log_context,
)

__all__ = [
    "StructuredFormatter",
    "bind_log_context",
    "clear_log_context",
    "configure_structured_logging",
    "get_log_context",
]
