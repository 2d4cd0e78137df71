# file_guard/interfaces/hook/__init__.py
"""Hook interface for the sensitive file guard.

Provides the stdin/exit-status entry point invoked by the caller once per
candidate file operation.
"""

from file_guard.interfaces.hook.runner import (
    EXIT_ALLOWED,
    EXIT_BLOCKED,
    DecisionRunner,
    main,
    parse_payload,
    run_hook,
)
from file_guard.interfaces.hook.schemas import AccessRequest

__all__ = [
    "AccessRequest",
    "DecisionRunner",
    "EXIT_ALLOWED",
    "EXIT_BLOCKED",
    "main",
    "parse_payload",
    "run_hook",
]
