# file_guard/__init__.py
"""Pre-execution guard that blocks agent tool calls touching sensitive files."""

__version__ = "0.1.0"
