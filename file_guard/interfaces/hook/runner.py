# file_guard/interfaces/hook/runner.py
"""PreToolUse hook runner - fires BEFORE a tool touches a file.

Reads one JSON request from stdin, classifies the target path and answers
through the exit status:

Exit codes:
    0 - File access is allowed
    2 - File access is blocked, or the request could not be understood

Human-readable explanations go to stderr. Blocked attempts are appended to
the audit log; a failing audit write is reported but never changes the
decision.
"""

import json
import logging
import os
import sys
from typing import Any, TextIO

from file_guard.config import Settings
from file_guard.interfaces.hook.schemas import AccessRequest
from file_guard.middleware.guardrails.audit import (
    EVENT_ALLOWED,
    EVENT_BLOCKED,
    AuditLog,
    AuditRecord,
)
from file_guard.middleware.guardrails.core import (
    AuditLogError,
    GuardConfig,
    GuardrailViolation,
    MalformedPayload,
    PatternClassifier,
    check_access,
)
from file_guard.utils.logging import (
    bind_log_context,
    clear_log_context,
    configure_structured_logging,
)

logger = logging.getLogger(__name__)

EXIT_ALLOWED = 0
EXIT_BLOCKED = 2


def parse_payload(payload: bytes, max_input_size: int) -> dict[str, Any] | None:
    """Parse the buffered request payload.

    Args:
        payload: Everything the caller wrote to stdin.
        max_input_size: Largest accepted payload in bytes.

    Returns:
        The top-level JSON object, or None for an empty payload.

    Raises:
        MalformedPayload: If the payload is too large, not UTF-8, not JSON,
            or not a JSON object.
    """
    if len(payload) > max_input_size:
        raise MalformedPayload(f"Input exceeds maximum size of {max_input_size} bytes")

    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedPayload(f"Input is not valid UTF-8: {e}") from e

    if not text.strip():
        return None

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"Invalid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedPayload("Input must be a JSON object")
    return document


def format_denial(violation: GuardrailViolation) -> str:
    """Format the stderr message shown to the caller for a blocked access."""
    tool = violation.tool_name or "access"
    return (
        f"[BLOCKED] {violation}\n"
        f"Reason: {violation.reason}\n"
        f"Tool: {tool}\n"
        "\n"
        "HINT: This file may contain credentials or secrets and cannot be "
        "accessed. Use environment variables or a secret manager instead, or "
        "ask the user to share only the non-sensitive values."
    )


def write_stderr(message: str, stream: TextIO | None = None) -> None:
    """Write a message for the caller, never raising.

    The caller may have closed its end of the pipe; the decision still has to
    reach it through the exit status, so a failed write is only logged.
    """
    try:
        print(message, file=stream or sys.stderr)
    except (OSError, ValueError) as e:
        logger.warning("Cannot write to error channel: %s", e)


def _working_directory(request: AccessRequest) -> str:
    try:
        return os.getcwd()
    except OSError:
        return request.cwd or ""


class DecisionRunner:
    """Single-shot decision runner for one hook invocation.

    Attributes:
        config: GuardConfig for this invocation.
        classifier: PatternClassifier built from the config.
        audit_log: AuditLog receiving records.
    """

    def __init__(
        self,
        config: GuardConfig | None = None,
        classifier: PatternClassifier | None = None,
        audit_log: AuditLog | None = None,
        stderr: TextIO | None = None,
    ):
        self.config = config or GuardConfig()
        self.classifier = classifier or self.config.build_classifier()
        self.audit_log = audit_log or AuditLog(self.config.audit_log_path)
        self._stderr = stderr

    @property
    def stderr(self) -> TextIO:
        return self._stderr or sys.stderr

    def _emit(self, message: str) -> None:
        write_stderr(message, self.stderr)

    def run(self, payload: bytes) -> int:
        """Decide on one request.

        Never raises: any unexpected failure is reported and blocks.

        Args:
            payload: Raw request bytes.

        Returns:
            EXIT_ALLOWED or EXIT_BLOCKED.
        """
        clear_log_context()
        try:
            return self._run(payload)
        except Exception as e:
            bind_log_context(decision="error")
            logger.exception("Unexpected guard failure")
            self._emit(f"ERROR: {type(e).__name__}: {e}")
            return EXIT_BLOCKED

    def _run(self, payload: bytes) -> int:
        try:
            document = parse_payload(payload, self.config.max_input_size)
        except MalformedPayload as e:
            bind_log_context(decision="malformed")
            logger.warning("Rejecting malformed request: %s", e)
            self._emit(f"ERROR: {e}. Blocking the operation.")
            return EXIT_BLOCKED

        if document is None:
            logger.debug("Empty request, nothing to check")
            return EXIT_ALLOWED

        request = AccessRequest.from_document(document, self.config.path_fields)
        bind_log_context(
            session_id=request.session_id,
            hook_event=request.hook_event_name,
            tool=request.tool_name,
        )

        try:
            check_access(
                request.tool_name, request.file_path, self.config, self.classifier
            )
        except GuardrailViolation as e:
            bind_log_context(decision="blocked")
            self._emit(format_denial(e))
            self._record(request, EVENT_BLOCKED)
            return EXIT_BLOCKED

        bind_log_context(decision="allowed")
        logger.debug("Allowed %s", request.file_path or "request without a path")
        if self.config.log_allowed and request.file_path:
            self._record(request, EVENT_ALLOWED)
        return EXIT_ALLOWED

    def _record(self, request: AccessRequest, event: str) -> None:
        record = AuditRecord.create(
            file_path=request.file_path or "",
            tool=request.tool_name,
            event=event,
            working_directory=_working_directory(request),
        )
        try:
            self.audit_log.append(record)
        except AuditLogError as e:
            logger.warning("Audit write failed: %s", e)
            self._emit(f"WARNING: {e}")


def run_hook(payload: bytes) -> int:
    """Load settings, configure logging and run one decision.

    Args:
        payload: Raw request bytes.

    Returns:
        Exit status for the process.
    """
    try:
        settings = Settings()
    except ValueError as e:
        write_stderr(f"ERROR: Invalid guard configuration: {e}")
        return EXIT_BLOCKED

    handler = configure_structured_logging(
        settings.log_level, stream=sys.stderr, structured=settings.structured_logs
    )
    try:
        runner = DecisionRunner(GuardConfig.from_settings(settings))
        return runner.run(payload)
    finally:
        logging.root.removeHandler(handler)


def main() -> None:
    """Console entry point: read stdin, decide, exit."""
    try:
        payload = sys.stdin.buffer.read()
    except OSError as e:
        write_stderr(f"ERROR: Cannot read request: {e}")
        sys.exit(EXIT_BLOCKED)
    sys.exit(run_hook(payload))
