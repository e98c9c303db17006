"""
CLI module for repodrift.

The command-line interface providing tree, snapshot, drift, diff, history
and show commands.
"""

from repodrift_cli.main import app

__all__ = ["app"]
