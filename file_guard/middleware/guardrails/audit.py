# file_guard/middleware/guardrails/audit.py
"""Append-only audit trail for guard decisions.

Each record is one JSON object on its own line. Appends open the file in
append mode and write the whole line with a single call while holding an
exclusive file lock, so concurrent guard processes never interleave records.
Readers ignore a trailing line without a newline (a write cut short by a
crash).
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from file_guard.middleware.guardrails.core import AuditLogError

logger = logging.getLogger(__name__)

EVENT_BLOCKED = "BLOCKED"
EVENT_ALLOWED = "ALLOWED"

if os.name == "nt":  # Windows
    import msvcrt

    def _lock(fd: int) -> None:
        # Lock the first byte; LK_LOCK retries for about 10 seconds
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_LOCK, 1)

    def _unlock(fd: int) -> None:
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)

else:  # Unix/Linux/Mac
    import fcntl

    def _lock(fd: int) -> None:
        fcntl.flock(fd, fcntl.LOCK_EX)

    def _unlock(fd: int) -> None:
        fcntl.flock(fd, fcntl.LOCK_UN)


class AuditRecord(BaseModel):
    """One audited access attempt.

    Serialized with camelCase keys: timestamp, filePath, tool,
    workingDirectory, event.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    timestamp: str = Field(..., description="ISO-8601 time of the decision (UTC)")
    file_path: str = Field(..., alias="filePath", description="Path as requested")
    tool: str = Field("", description="Tool that attempted the access")
    working_directory: str = Field("", alias="workingDirectory")
    event: Literal["BLOCKED", "ALLOWED"] = EVENT_BLOCKED

    @classmethod
    def create(
        cls,
        file_path: str,
        tool: str,
        event: str = EVENT_BLOCKED,
        working_directory: str = "",
    ) -> "AuditRecord":
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            file_path=file_path,
            tool=tool,
            working_directory=working_directory,
            event=event,
        )

    def to_line(self) -> str:
        return self.model_dump_json(by_alias=True) + "\n"


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


class AuditLog:
    """Append-only JSON-lines audit file.

    The parent directory is created once, right before the first append of
    this instance.

    Attributes:
        path: Location of the audit file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._directory_ready = False

    def _ensure_directory(self) -> None:
        if not self._directory_ready:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._directory_ready = True

    def append(self, record: AuditRecord) -> None:
        """Append one record as a complete line.

        Args:
            record: Record to persist.

        Raises:
            AuditLogError: If the directory or file cannot be written.
        """
        data = record.to_line().encode("utf-8")
        try:
            self._ensure_directory()
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o600)
            try:
                _lock(fd)
                try:
                    _write_all(fd, data)
                finally:
                    _unlock(fd)
            finally:
                os.close(fd)
        except OSError as e:
            raise AuditLogError(f"Cannot write audit log {self.path}: {e}") from e

    def read(self) -> list[AuditRecord]:
        return read_audit_records(self.path)


def read_audit_records(path: str | Path) -> list[AuditRecord]:
    """Read every complete record from an audit file.

    Args:
        path: Audit file location.

    Returns:
        Records in file order. A missing file yields an empty list.
    """
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        return []

    lines = raw.split(b"\n")
    if lines[-1]:
        logger.warning("Ignoring partial trailing line in audit log %s", path)

    records = []
    for lineno, line in enumerate(lines[:-1], start=1):
        if not line.strip():
            continue
        try:
            records.append(AuditRecord.model_validate_json(line))
        except ValidationError as e:
            logger.warning("Skipping unreadable audit line %d in %s: %s", lineno, path, e)
    return records
