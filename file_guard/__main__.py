# file_guard/__main__.py
"""Allow running the guard with ``python -m file_guard``."""

from file_guard.interfaces.hook.runner import main

main()
