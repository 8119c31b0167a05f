"""Entry point for running zinebook as a module.

Usage:
    python -m zinebook <command> [options]
"""
from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
