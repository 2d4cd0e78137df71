# file_guard/middleware/guardrails/__init__.py
"""Sensitive file guardrails for agent tool calls.

The rule table and classifier live in core; the append-only audit trail
lives in audit.

Example:
    Classifying a path:

    >>> from file_guard.middleware.guardrails import classify
    >>> decision = classify(".aws/credentials")
    >>> decision.blocked, decision.reason
    (True, 'AWS credentials')

    Handling guardrail violations:

    >>> from file_guard.middleware.guardrails import GuardConfig, GuardrailViolation, check_access
    >>> try:
    ...     check_access("Read", "id_rsa", GuardConfig())
    ... except GuardrailViolation as e:
    ...     print(f"Blocked: {e.violation_type} - {e.reason}")
    Blocked: sensitive_file - SSH private key
"""

from file_guard.middleware.guardrails.audit import (
    EVENT_ALLOWED,
    EVENT_BLOCKED,
    AuditLog,
    AuditRecord,
    read_audit_records,
)
from file_guard.middleware.guardrails.core import (
    DEFAULT_REASON,
    DEFAULT_REASONS,
    DEFAULT_RULES,
    AuditLogError,
    Contains,
    Decision,
    GuardConfig,
    GuardrailError,
    GuardrailViolation,
    MalformedPayload,
    PatternClassifier,
    Regex,
    SensitivityRule,
    Suffix,
    check_access,
    classify,
    normalize_path,
    segment,
)

__all__ = [
    "AuditLog",
    "AuditLogError",
    "AuditRecord",
    "Contains",
    "DEFAULT_REASON",
    "DEFAULT_REASONS",
    "DEFAULT_RULES",
    "Decision",
    "EVENT_ALLOWED",
    "EVENT_BLOCKED",
    "GuardConfig",
    "GuardrailError",
    "GuardrailViolation",
    "MalformedPayload",
    "PatternClassifier",
    "Regex",
    "SensitivityRule",
    "Suffix",
    "check_access",
    "classify",
    "normalize_path",
    "read_audit_records",
    "segment",
]
