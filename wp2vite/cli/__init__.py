"""
CLI module for wp2vite.

Provides the ``wp2vite`` entry point that can be installed as a console script.
"""

from wp2vite.cli.commands import main

__all__ = ["main"]
