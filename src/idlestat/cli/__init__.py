"""
Command-line interface for the idlestat package.

This module provides the main CLI entry point for the trace analyzer.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
