"""CLI entry point for configuration introspection.

Usage:
    python -m stepflow.config
    python -m stepflow.config --check
    python -m stepflow.config --json
"""

from .introspection import main

if __name__ == "__main__":
    raise SystemExit(main())
