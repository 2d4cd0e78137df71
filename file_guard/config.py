# file_guard/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
Every variable is read with the ``FILE_GUARD_`` prefix, e.g.
``FILE_GUARD_LOG_ALLOWED=true``.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AUDIT_LOG_PATH = Path(".claude") / "logs" / "sensitive_file_access.jsonl"


class Settings(BaseSettings):
    """Guard settings loaded from environment variables.

    No .env file is read: it is one of the files this guard protects.
    List values are given as JSON, e.g. ``FILE_GUARD_GUARDED_TOOLS='["Read"]'``.
    """

    # Audit trail
    audit_log_path: Path = DEFAULT_AUDIT_LOG_PATH
    log_allowed: bool = False  # Also record ALLOWED outcomes

    # Request handling
    max_input_size: int = 1_000_000  # 1MB
    guarded_tools: list[str] = []  # Empty means every tool is inspected
    path_fields: list[str] = ["file_path", "notebook_path"]

    # Additional rules, merged with the built-in table
    extra_sensitive_suffixes: list[str] = []
    extra_sensitive_segments: list[str] = []

    # Diagnostics
    log_level: str = "WARNING"
    structured_logs: bool = False

    model_config = SettingsConfigDict(
        env_prefix="FILE_GUARD_",
        extra="ignore",  # Ignore unknown env vars
        case_sensitive=False,  # Allow case-insensitive env var names
    )
