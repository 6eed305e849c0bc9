"""
CLI entry point for searchrelay.

This module serves as the entry point when searchrelay.cli is executed as a module
with `python -m searchrelay.cli`.
"""

from .main import main

if __name__ == "__main__":
    main()
