# file_guard/interfaces/hook/schemas.py
"""Pydantic model for the hook request sent by the caller on stdin.

Only ``tool_input.file_path`` matters for the decision. Fields of the wrong
type degrade to "absent" instead of failing the request.
"""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class AccessRequest(BaseModel):
    """A proposed file access, as described by the caller.

    Attributes:
        tool_name: Tool about to run (e.g. Read, Edit, Write).
        file_path: Target path, or None when the request carries none.
        session_id: Caller session, used as the log correlation ID.
        hook_event_name: Caller event name (e.g. PreToolUse).
        cwd: Working directory reported by the caller.
    """

    tool_name: str = Field("", description="Tool about to run")
    file_path: str | None = Field(None, description="Path the tool will touch")
    session_id: str = Field("", description="Caller session identifier")
    hook_event_name: str = Field("", description="Caller event name")
    cwd: str | None = Field(None, description="Caller working directory")

    @classmethod
    def from_document(
        cls,
        document: dict[str, Any],
        path_fields: Iterable[str] = ("file_path",),
    ) -> "AccessRequest":
        """Build a request from a parsed payload.

        Args:
            document: Top-level JSON object from the caller.
            path_fields: Keys of ``tool_input`` to try, first non-empty wins.

        Returns:
            AccessRequest with file_path None if no usable path was found.
        """
        file_path = None
        tool_input = document.get("tool_input")
        if isinstance(tool_input, dict):
            for key in path_fields:
                value = tool_input.get(key)
                if isinstance(value, str) and value:
                    file_path = value
                    break

        return cls(
            tool_name=_text(document.get("tool_name")),
            file_path=file_path,
            session_id=_text(document.get("session_id")),
            hook_event_name=_text(document.get("hook_event_name")),
            cwd=_text(document.get("cwd")) or None,
        )
