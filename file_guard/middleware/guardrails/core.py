# file_guard/middleware/guardrails/core.py
"""Sensitive path classification for agent file operations.

This module provides the guardrail framework used by the hook runner:
1. SensitivityRule - a matcher (Suffix, Contains or Regex) plus a reason key
2. PatternClassifier - normalizes a path and judges it against the rule table
3. GuardConfig - explicit configuration passed into the runner
4. check_access() - main check function, raises GuardrailViolation on a match

Matching runs on the normalized, lower-cased path anchored with a leading
"/", so a rule can write a segment boundary as "/" and still match a bare
relative name (".npmrc" is seen as "/.npmrc").

Example:
    >>> from file_guard.middleware.guardrails import classify
    >>> classify("./config/../.env").blocked
    True
    >>> classify("README.md").blocked
    False
"""

import logging
import posixpath
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from file_guard.config import DEFAULT_AUDIT_LOG_PATH, Settings

logger = logging.getLogger(__name__)

DEFAULT_REASON = "Sensitive file"


# ============================================================================
# Matchers and Rules
# ============================================================================


@dataclass(frozen=True)
class Suffix:
    """Matches when the anchored path ends with ``text``."""

    text: str

    def matches(self, subject: str) -> bool:
        return subject.endswith(self.text)


@dataclass(frozen=True)
class Contains:
    """Matches when ``text`` occurs anywhere in the anchored path."""

    text: str

    def matches(self, subject: str) -> bool:
        return self.text in subject


@dataclass(frozen=True)
class Regex:
    """Matches when ``pattern`` is found in the anchored path (re.search)."""

    pattern: str
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def matches(self, subject: str) -> bool:
        return self._compiled.search(subject) is not None


Matcher = Union[Suffix, Contains, Regex]


def segment(name: str) -> Regex:
    """Match the directory ``name`` itself or anything below it."""
    return Regex(rf"/{re.escape(name)}(/|$)")


@dataclass(frozen=True)
class SensitivityRule:
    """A single sensitive-path rule.

    Attributes:
        matcher: How the anchored, normalized path is tested.
        reason_key: Short label of the rule category (env_file, key_file, ...).
    """

    matcher: Matcher
    reason_key: str

    def matches(self, subject: str) -> bool:
        return self.matcher.matches(subject)


DEFAULT_RULES: tuple[SensitivityRule, ...] = (
    # Environment files
    SensitivityRule(Suffix(".env"), "env_file"),
    SensitivityRule(Regex(r"/\.env[.-][^/]+$"), "env_file"),
    # Secret directories
    SensitivityRule(segment("config/secrets"), "secret_dir"),
    SensitivityRule(segment(".ssh"), "secret_dir"),
    SensitivityRule(segment(".gnupg"), "secret_dir"),
    # Keys and certificates
    SensitivityRule(Suffix(".pem"), "key_file"),
    SensitivityRule(Suffix(".key"), "key_file"),
    SensitivityRule(Suffix(".p12"), "key_file"),
    SensitivityRule(Suffix(".pfx"), "key_file"),
    # SSH private keys outside ~/.ssh
    SensitivityRule(Regex(r"/id_(rsa|dsa|ecdsa|ed25519)$"), "credential_file"),
    # Cloud and cluster credentials
    SensitivityRule(Suffix("/.aws/credentials"), "credential_file"),
    SensitivityRule(Suffix("/.aws/config"), "credential_file"),
    SensitivityRule(
        Suffix("/gcloud/application_default_credentials.json"), "credential_file"
    ),
    SensitivityRule(Suffix("/.azure/credentials"), "credential_file"),
    SensitivityRule(Suffix("/.docker/config.json"), "credential_file"),
    SensitivityRule(Suffix("/.kube/config"), "credential_file"),
    # Package manager auth
    SensitivityRule(Suffix("/.npmrc"), "credential_file"),
    SensitivityRule(Suffix("/.pypirc"), "credential_file"),
    SensitivityRule(Suffix("/.netrc"), "credential_file"),
    SensitivityRule(Suffix("/.gem/credentials"), "credential_file"),
    SensitivityRule(Regex(r"/\.cargo/credentials(\.toml)?$"), "credential_file"),
    # Database password files
    SensitivityRule(Suffix("/.pgpass"), "credential_file"),
    SensitivityRule(Suffix("/.my.cnf"), "credential_file"),
)

# First substring found in the anchored path names the category shown to the
# user. The path is tested with a trailing "/" added, so a needle ending in
# "/" marks the end of a segment: ".pem/" only matches a final ".pem" and
# "/.ssh/" also matches the directory itself. Directory entries come first so
# "config/secrets/.env" reads as a secrets directory rather than an
# environment file.
DEFAULT_REASONS: tuple[tuple[str, str], ...] = (
    ("/config/secrets/", "Secrets directory"),
    ("/id_rsa", "SSH private key"),
    ("/id_dsa", "SSH private key"),
    ("/id_ecdsa", "SSH private key"),
    ("/id_ed25519", "SSH private key"),
    ("/.ssh/", "SSH directory"),
    ("/.gnupg/", "GPG keyring"),
    ("/.aws/", "AWS credentials"),
    ("/gcloud/", "Google Cloud credentials"),
    ("/.azure/", "Azure credentials"),
    ("/.docker/", "Docker registry credentials"),
    ("/.kube/", "Kubernetes credentials"),
    ("/.npmrc", "npm auth token"),
    ("/.pypirc", "PyPI credentials"),
    ("/.netrc", "netrc credentials"),
    ("/.gem/", "RubyGems credentials"),
    ("/.cargo/", "Cargo registry token"),
    ("/.pgpass", "PostgreSQL password file"),
    ("/.my.cnf", "MySQL option file"),
    ("/.env.", "Environment file"),
    ("/.env-", "Environment file"),
    (".env/", "Environment file"),
    (".pem/", "Private key or certificate"),
    (".key/", "Private key"),
    (".p12/", "PKCS#12 keystore"),
    (".pfx/", "PKCS#12 keystore"),
)


# ============================================================================
# Classification
# ============================================================================


@dataclass(frozen=True)
class Decision:
    """Outcome of classifying one path.

    Attributes:
        blocked: True if the path matched at least one rule.
        reason: Human-readable category, set only when blocked.
        path: The normalized path that was judged.
        reason_key: Category of the first rule that matched.
    """

    blocked: bool
    reason: str | None = None
    path: str = ""
    reason_key: str | None = None


def normalize_path(path: str) -> str:
    """Collapse separators and relative segments, then lower-case.

    Backslashes are treated as separators so Windows-style and mixed paths
    are judged like their POSIX form.

    Args:
        path: Raw path as sent by the caller.

    Returns:
        Normalized path, e.g. "./config/../.env" -> ".env".
    """
    return posixpath.normpath(path.replace("\\", "/")).lower()


def _anchor(normalized: str) -> str:
    return normalized if normalized.startswith("/") else "/" + normalized


class PatternClassifier:
    """Judges paths against an ordered rule table.

    Match-or-not is the union of all rules. Rule order only affects which
    reason_key is reported; the display reason comes from the reason table.
    """

    def __init__(
        self,
        rules: Iterable[SensitivityRule] = DEFAULT_RULES,
        reasons: Iterable[tuple[str, str]] = DEFAULT_REASONS,
    ):
        self.rules = tuple(rules)
        self.reasons = tuple(reasons)

    def reason_for(self, subject: str) -> str:
        """Return the first category whose substring occurs in ``subject``."""
        terminated = subject.rstrip("/") + "/"
        for needle, reason in self.reasons:
            if needle in terminated:
                return reason
        return DEFAULT_REASON

    def classify(self, path: str | None) -> Decision:
        """Decide whether ``path`` is sensitive.

        Args:
            path: File path to check. Empty or None means nothing to check.

        Returns:
            Decision with blocked=True and a reason when any rule matches.
        """
        if not path:
            return Decision(blocked=False)

        normalized = normalize_path(path)
        subject = _anchor(normalized)
        for rule in self.rules:
            if rule.matches(subject):
                return Decision(
                    blocked=True,
                    reason=self.reason_for(subject),
                    path=normalized,
                    reason_key=rule.reason_key,
                )
        return Decision(blocked=False, path=normalized)


_default_classifier = PatternClassifier()


def classify(path: str | None) -> Decision:
    """Classify ``path`` against the built-in rule table."""
    return _default_classifier.classify(path)


# ============================================================================
# Guard Configuration
# ============================================================================


@dataclass
class GuardConfig:
    """Configuration for one guard invocation.

    Attributes:
        audit_log_path: JSON-lines file receiving audit records.
        log_allowed: If True, ALLOWED outcomes are audited as well.
        max_input_size: Largest accepted payload in bytes.
        guarded_tools: If set, ONLY these tools are inspected; others pass.
        path_fields: Keys of tool_input holding the candidate path, in order.
        extra_sensitive_suffixes: Additional Suffix rules.
        extra_sensitive_segments: Additional directory segments.
    """

    audit_log_path: Path = DEFAULT_AUDIT_LOG_PATH
    log_allowed: bool = False
    max_input_size: int = 1_000_000
    guarded_tools: set[str] = field(default_factory=set)
    path_fields: tuple[str, ...] = ("file_path", "notebook_path")
    extra_sensitive_suffixes: set[str] = field(default_factory=set)
    extra_sensitive_segments: set[str] = field(default_factory=set)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GuardConfig":
        """Build a GuardConfig from environment-backed settings."""
        return cls(
            audit_log_path=Path(settings.audit_log_path),
            log_allowed=settings.log_allowed,
            max_input_size=settings.max_input_size,
            guarded_tools=set(settings.guarded_tools),
            path_fields=tuple(settings.path_fields),
            extra_sensitive_suffixes=set(settings.extra_sensitive_suffixes),
            extra_sensitive_segments=set(settings.extra_sensitive_segments),
        )

    def get_all_rules(self) -> tuple[SensitivityRule, ...]:
        """Get the built-in rules followed by the configured extras."""
        extras = [
            SensitivityRule(Suffix(normalize_path(s)), "custom")
            for s in sorted(self.extra_sensitive_suffixes)
            if s
        ]
        for name in sorted(self.extra_sensitive_segments):
            cleaned = normalize_path(name).strip("/")
            if cleaned and cleaned != ".":
                extras.append(SensitivityRule(segment(cleaned), "custom"))
        return DEFAULT_RULES + tuple(extras)

    def build_classifier(self) -> PatternClassifier:
        if not self.extra_sensitive_suffixes and not self.extra_sensitive_segments:
            return _default_classifier
        return PatternClassifier(self.get_all_rules())

    def is_guarded_tool(self, tool_name: str) -> bool:
        if not self.guarded_tools:
            return True
        return tool_name.lower() in {t.lower() for t in self.guarded_tools}


# ============================================================================
# Errors and Checks
# ============================================================================


class GuardrailError(Exception):
    """Base class for guard errors."""


class MalformedPayload(GuardrailError):
    """Raised when the request payload cannot be parsed."""


class AuditLogError(GuardrailError):
    """Raised when an audit record cannot be appended."""


class GuardrailViolation(GuardrailError):
    """Raised when a tool call targets a sensitive path."""

    def __init__(
        self,
        message: str,
        tool_name: str,
        violation_type: str,
        path: str = "",
        decision: Decision | None = None,
    ):
        super().__init__(message)
        self.tool_name = tool_name
        self.violation_type = violation_type
        self.path = path
        self.decision = decision

    @property
    def reason(self) -> str:
        if self.decision and self.decision.reason:
            return self.decision.reason
        return DEFAULT_REASON


def check_access(
    tool_name: str,
    path: str | None,
    config: GuardConfig,
    classifier: PatternClassifier | None = None,
) -> Decision:
    """Check if a tool call may touch ``path``.

    Args:
        tool_name: Name of the tool being called.
        path: Candidate file path, or None when the request carried none.
        config: Guard configuration.
        classifier: Classifier to use. Defaults to the one built from config.

    Returns:
        The allowing Decision.

    Raises:
        GuardrailViolation: If the path matches a sensitive rule.
    """
    if not path:
        return Decision(blocked=False)

    if not config.is_guarded_tool(tool_name):
        logger.debug("Tool '%s' is not guarded, skipping check", tool_name)
        return Decision(blocked=False, path=normalize_path(path))

    classifier = classifier or config.build_classifier()
    decision = classifier.classify(path)
    if decision.blocked:
        msg = f"Access to sensitive file blocked: {path}"
        logger.info(
            "GUARDRAIL BLOCKED: %s (tool: %s, reason: %s)",
            msg,
            tool_name,
            decision.reason,
        )
        raise GuardrailViolation(msg, tool_name, "sensitive_file", path, decision)
    return decision
