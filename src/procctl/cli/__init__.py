"""
Command-line interface for the procctl package.
"""

from .main import build_parser, main_cli, run

__all__ = [
    "build_parser",
    "main_cli",
    "run",
]
