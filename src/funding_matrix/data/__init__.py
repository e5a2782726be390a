"""Snapshot persistence layer.

Provides the SnapshotStore boundary, the aiosqlite-backed implementation,
and its connection manager.
"""

from funding_matrix.data.database import SnapshotDatabase
from funding_matrix.data.store import SnapshotStore, SqliteSnapshotStore

__all__ = ["SnapshotDatabase", "SnapshotStore", "SqliteSnapshotStore"]
