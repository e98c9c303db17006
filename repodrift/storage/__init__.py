"""
Storage module for repodrift.

This module provides SQLite-based persistence for snapshots and drift
records, implementing the store used by the drift detector.
"""

from repodrift.storage.database import Database, init_database

__all__ = [
    "Database",
    "init_database",
]
