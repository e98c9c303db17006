"""
SQLite Database Layer for repodrift

This module persists snapshots and drift records, and implements the store
operations the drift detector depends on.

Design Decisions:
    - SQLite for zero-config, file-based storage
    - Trees and change sets are stored as JSON documents and rehydrated
      into typed FileNode / FileChangeSet values on read
    - One connection per operation; no state is shared between calls
    - Drift record status only moves pending -> completed | error

Schema:
    snapshots: Captured tree plus generated documentation per project
    drift_records: One row per drift comparison and its lifecycle state
"""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

from repodrift.config import DEFAULT_DB_PATH
from repodrift.exceptions import InvalidTransitionError, RecordNotFoundError, StorageError
from repodrift.models import (
    DriftRecord,
    DriftStatus,
    FileChangeSet,
    FileNode,
    SnapshotRecord,
    utc_now,
)

logger = logging.getLogger(__name__)

_DRIFT_COLUMNS = """
    record_id, project_id, snapshot_id, current_structure, previous_structure,
    file_changes, structure_diff, architecture_diff, drift_score, status,
    created_at, completed_at
"""


def _dump_tree(tree: Optional[FileNode]) -> Optional[str]:
    return json.dumps(tree.to_dict()) if tree is not None else None


def _load_tree(raw: Optional[str]) -> Optional[FileNode]:
    return FileNode.from_dict(json.loads(raw)) if raw else None


def _parse_ts(raw: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(raw) if raw else None


class Database:
    """
    SQLite database manager for repodrift.

    Handles all persistence operations including:
    - Storing and retrieving snapshots
    - Creating and finishing drift records
    - Querying drift history

    Usage:
        db = Database("./.repodrift/repodrift.db")
        snapshot = db.save_snapshot("proj", tree, markdown)
        records = db.list_drift_records("proj")
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        """
        Initialize the database connection.

        Args:
            db_path: Path to the SQLite database file.
                     Parent directories will be created if needed.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        try:
            conn = sqlite3.connect(str(self._db_path))
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database: {e}", {"path": str(self._db_path)})
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize the database schema if not exists."""
        with self._connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    snapshot_id TEXT PRIMARY KEY,
                    project_id TEXT NOT NULL,
                    structure TEXT,
                    markdown TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL
                );

                CREATE TABLE IF NOT EXISTS drift_records (
                    record_id TEXT PRIMARY KEY,
                    project_id TEXT NOT NULL,
                    snapshot_id TEXT NOT NULL,
                    current_structure TEXT,
                    previous_structure TEXT,
                    file_changes TEXT,
                    structure_diff TEXT NOT NULL DEFAULT '',
                    architecture_diff TEXT NOT NULL DEFAULT '',
                    drift_score INTEGER NOT NULL DEFAULT 0,
                    status TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    completed_at TIMESTAMP
                );

                CREATE INDEX IF NOT EXISTS idx_snapshots_project
                    ON snapshots(project_id);

                CREATE INDEX IF NOT EXISTS idx_drift_project
                    ON drift_records(project_id, status);
            """)

    # Snapshots

    def save_snapshot(
        self,
        project_id: str,
        structure: Optional[FileNode],
        markdown: str,
    ) -> SnapshotRecord:
        """
        Store a new snapshot.

        Args:
            project_id: Project the snapshot belongs to
            structure: Normalized tree, or None if it was not captured
            markdown: Documentation generated for the tree

        Returns:
            The stored SnapshotRecord
        """
        snapshot = SnapshotRecord(
            id=str(uuid.uuid4()),
            project_id=project_id,
            structure=structure,
            markdown=markdown,
        )
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO snapshots
                (snapshot_id, project_id, structure, markdown, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    snapshot.id,
                    project_id,
                    _dump_tree(structure),
                    markdown,
                    snapshot.created_at.isoformat(),
                ),
            )
        logger.debug("Saved snapshot %s for project %s", snapshot.id, project_id)
        return snapshot

    def _row_to_snapshot(self, row: sqlite3.Row) -> SnapshotRecord:
        return SnapshotRecord(
            id=row["snapshot_id"],
            project_id=row["project_id"],
            structure=_load_tree(row["structure"]),
            markdown=row["markdown"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def get_snapshot(self, snapshot_id: str) -> Optional[SnapshotRecord]:
        """
        Load a single snapshot by ID.

        Returns:
            The SnapshotRecord if found, None otherwise
        """
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM snapshots WHERE snapshot_id = ?",
                (snapshot_id,),
            ).fetchone()
        return self._row_to_snapshot(row) if row is not None else None

    def list_snapshots(self, project_id: str) -> list[SnapshotRecord]:
        """All snapshots of a project, most recent first."""
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM snapshots
                WHERE project_id = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (project_id,),
            ).fetchall()
        return [self._row_to_snapshot(row) for row in rows]

    def get_latest_snapshot(self, project_id: str) -> Optional[SnapshotRecord]:
        """The most recent snapshot of a project, or None."""
        with self._connection() as conn:
            row = conn.execute(
                """
                SELECT * FROM snapshots
                WHERE project_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT 1
                """,
                (project_id,),
            ).fetchone()
        return self._row_to_snapshot(row) if row is not None else None

    def delete_snapshot(self, snapshot_id: str) -> bool:
        """
        Delete one snapshot.

        Returns:
            True if a snapshot was deleted
        """
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM snapshots WHERE snapshot_id = ?",
                (snapshot_id,),
            )
            return cursor.rowcount > 0

    def delete_project_snapshots(self, project_id: str) -> int:
        """
        Delete every snapshot of a project.

        Returns:
            Number of snapshots deleted
        """
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM snapshots WHERE project_id = ?",
                (project_id,),
            )
            return cursor.rowcount

    # Drift records

    def create_pending_drift_record(
        self,
        project_id: str,
        snapshot_id: str,
        current_tree: FileNode,
        previous_tree: Optional[FileNode],
    ) -> str:
        """
        Insert a drift record in the PENDING state.

        Args:
            project_id: Project the comparison belongs to
            snapshot_id: Reference snapshot identifier
            current_tree: Tree captured for this comparison
            previous_tree: Baseline tree, or None

        Returns:
            The generated record_id
        """
        record_id = str(uuid.uuid4())
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO drift_records
                (record_id, project_id, snapshot_id, current_structure,
                 previous_structure, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record_id,
                    project_id,
                    snapshot_id,
                    _dump_tree(current_tree),
                    _dump_tree(previous_tree),
                    DriftStatus.PENDING.value,
                    utc_now().isoformat(),
                ),
            )
        return record_id

    def _require_pending(self, conn: sqlite3.Connection, record_id: str, target: DriftStatus) -> None:
        row = conn.execute(
            "SELECT status FROM drift_records WHERE record_id = ?",
            (record_id,),
        ).fetchone()
        if row is None:
            raise RecordNotFoundError("Drift record", record_id)
        if DriftStatus(row["status"]).is_terminal:
            raise InvalidTransitionError(record_id, row["status"], target.value)

    def complete_drift_record(
        self,
        record_id: str,
        file_changes: FileChangeSet,
        structure_diff: str,
        architecture_diff: str,
        score: int,
    ) -> DriftRecord:
        """
        Store the computed fields and move a record to COMPLETED.

        Returns:
            The completed DriftRecord

        Raises:
            RecordNotFoundError: If the record does not exist
            InvalidTransitionError: If the record is already finished
        """
        with self._connection() as conn:
            self._require_pending(conn, record_id, DriftStatus.COMPLETED)
            conn.execute(
                """
                UPDATE drift_records
                SET file_changes = ?, structure_diff = ?, architecture_diff = ?,
                    drift_score = ?, status = ?, completed_at = ?
                WHERE record_id = ?
                """,
                (
                    json.dumps(file_changes.to_dict()),
                    structure_diff,
                    architecture_diff,
                    score,
                    DriftStatus.COMPLETED.value,
                    utc_now().isoformat(),
                    record_id,
                ),
            )
        logger.debug("Drift record %s completed", record_id)
        return self._fetch_drift_record(record_id)

    def mark_drift_record_error(self, record_id: str) -> None:
        """
        Move a PENDING record to ERROR and stamp its completion time.

        Raises:
            RecordNotFoundError: If the record does not exist
            InvalidTransitionError: If the record is already finished
        """
        with self._connection() as conn:
            self._require_pending(conn, record_id, DriftStatus.ERROR)
            conn.execute(
                """
                UPDATE drift_records
                SET status = ?, completed_at = ?
                WHERE record_id = ?
                """,
                (DriftStatus.ERROR.value, utc_now().isoformat(), record_id),
            )
        logger.debug("Drift record %s marked as error", record_id)

    def _row_to_drift_record(self, row: sqlite3.Row) -> DriftRecord:
        return DriftRecord(
            id=row["record_id"],
            project_id=row["project_id"],
            snapshot_id=row["snapshot_id"],
            current_structure=_load_tree(row["current_structure"]),
            previous_structure=_load_tree(row["previous_structure"]),
            file_changes=FileChangeSet.from_dict(
                json.loads(row["file_changes"]) if row["file_changes"] else None
            ),
            structure_diff=row["structure_diff"],
            architecture_diff=row["architecture_diff"],
            drift_score=row["drift_score"],
            status=DriftStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            completed_at=_parse_ts(row["completed_at"]),
        )

    def _fetch_drift_record(self, record_id: str) -> DriftRecord:
        record = self.get_drift_record(record_id)
        if record is None:
            raise RecordNotFoundError("Drift record", record_id)
        return record

    def get_drift_record(self, record_id: str) -> Optional[DriftRecord]:
        """
        Load a drift record in any state.

        Returns:
            The DriftRecord if found, None otherwise
        """
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {_DRIFT_COLUMNS} FROM drift_records WHERE record_id = ?",
                (record_id,),
            ).fetchone()
        return self._row_to_drift_record(row) if row is not None else None

    def list_drift_records(self, project_id: str, limit: Optional[int] = None) -> list[DriftRecord]:
        """
        Completed drift records of a project, most recently completed first.

        Args:
            project_id: Project to query
            limit: Maximum number of records to return

        Returns:
            List of DriftRecords
        """
        query = f"""
            SELECT {_DRIFT_COLUMNS} FROM drift_records
            WHERE project_id = ? AND status = ?
            ORDER BY completed_at DESC, rowid DESC
        """
        params: list[Any] = [project_id, DriftStatus.COMPLETED.value]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_drift_record(row) for row in rows]

    def get_latest_drift_record(self, project_id: str) -> Optional[DriftRecord]:
        """The most recently completed drift record of a project, or None."""
        records = self.list_drift_records(project_id, limit=1)
        return records[0] if records else None

    def count_drift_records(self, status: Optional[DriftStatus] = None) -> int:
        """Count drift records, optionally restricted to one status."""
        with self._connection() as conn:
            if status is None:
                cursor = conn.execute("SELECT COUNT(*) FROM drift_records")
            else:
                cursor = conn.execute(
                    "SELECT COUNT(*) FROM drift_records WHERE status = ?",
                    (status.value,),
                )
            return cursor.fetchone()[0]


# Module-level convenience functions

def init_database(db_path: str | Path = DEFAULT_DB_PATH) -> Database:
    """
    Initialize and return a database instance.

    Args:
        db_path: Path to the database file

    Returns:
        Configured Database instance
    """
    return Database(db_path)
