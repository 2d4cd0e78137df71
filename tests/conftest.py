# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- Temporary audit log paths
- Guard configuration and runners writing to them
- Clean FILE_GUARD_* environment
"""

import io
import os
from collections.abc import Generator
from pathlib import Path

import pytest

from file_guard.interfaces.hook import DecisionRunner
from file_guard.middleware.guardrails import GuardConfig


@pytest.fixture(autouse=True)
def clean_guard_env(monkeypatch) -> None:
    """Remove FILE_GUARD_* variables so settings start from defaults."""
    for key in list(os.environ):
        if key.upper().startswith("FILE_GUARD_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def audit_path(tmp_path) -> Path:
    """Audit log location inside a not-yet-created directory."""
    return tmp_path / "logs" / "audit.jsonl"


@pytest.fixture
def guard_config(audit_path) -> GuardConfig:
    return GuardConfig(audit_log_path=audit_path)


@pytest.fixture
def error_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def runner(guard_config, error_stream) -> Generator[DecisionRunner, None, None]:
    """DecisionRunner writing to a temporary audit log and a captured stderr."""
    yield DecisionRunner(guard_config, stderr=error_stream)
