"""
hexasm Command-Line Interface
=============================

This package provides the `hexasm` command-line tool, implemented as a
Click application with consistent error reporting and exit codes.
"""

__all__ = ["hexasm"]
