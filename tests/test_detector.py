"""
Tests for the drift detector.

Tests the persisted comparison lifecycle against SQLite and a fake store.
"""

import tempfile
from pathlib import Path

import pytest

from repodrift.drift import DriftDetector, analyze_drift, detect_drift
from repodrift.drift.reports import NO_ARCHITECTURE_CHANGES
from repodrift.models import DriftRecord, DriftSeverity, DriftStatus, FileChangeSet, utc_now
from repodrift.storage import Database
from tests.fixtures import ARCHITECTURE_V1, ARCHITECTURE_V2, BASE_TREE, CHANGED_TREE


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Database(Path(tmpdir) / "test.db")


class FakeStore:
    """In-memory store that records every lifecycle call."""

    def __init__(self, fail_on_complete=False):
        self.records = {}
        self.calls = []
        self.fail_on_complete = fail_on_complete

    def create_pending_drift_record(self, project_id, snapshot_id, current_tree, previous_tree):
        record_id = f"rec-{len(self.records) + 1}"
        self.records[record_id] = DriftRecord(
            id=record_id,
            project_id=project_id,
            snapshot_id=snapshot_id,
            current_structure=current_tree,
            previous_structure=previous_tree,
        )
        self.calls.append(("create", record_id))
        return record_id

    def complete_drift_record(self, record_id, file_changes, structure_diff, architecture_diff, score):
        self.calls.append(("complete", record_id))
        if self.fail_on_complete:
            raise ConnectionError("database went away")
        record = self.records[record_id]
        record.file_changes = file_changes
        record.structure_diff = structure_diff
        record.architecture_diff = architecture_diff
        record.drift_score = score
        record.status = DriftStatus.COMPLETED
        record.completed_at = utc_now()
        return record

    def mark_drift_record_error(self, record_id):
        self.calls.append(("error", record_id))
        self.records[record_id].status = DriftStatus.ERROR
        self.records[record_id].completed_at = utc_now()

    def list_drift_records(self, project_id):
        return [
            r for r in self.records.values()
            if r.project_id == project_id and r.status == DriftStatus.COMPLETED
        ]


class TestAnalyzeDrift:
    """Tests for the pure comparison steps."""

    def test_full_analysis(self):
        analysis = analyze_drift(CHANGED_TREE, BASE_TREE, ARCHITECTURE_V2, ARCHITECTURE_V1)

        assert analysis.file_changes == FileChangeSet(
            added=("src/api/billing.ts",),
            removed=("src/api/auth.ts",),
            modified=("src/index.ts",),
        )
        assert "## Added Files" in analysis.structure_diff
        assert "## Removed" in analysis.architecture_diff
        assert analysis.drift_score == 36
        assert analysis.severity == DriftSeverity.MEDIUM

    def test_no_drift(self):
        analysis = analyze_drift(BASE_TREE, BASE_TREE, ARCHITECTURE_V1, ARCHITECTURE_V1)

        assert analysis.file_changes.is_empty
        assert analysis.architecture_diff == NO_ARCHITECTURE_CHANGES
        assert analysis.drift_score == 0


class TestDriftDetector:
    """Tests for the persisted lifecycle."""

    def test_detect_drift_completes_record(self, temp_db):
        """Test that a successful comparison is stored as completed."""
        detector = DriftDetector(temp_db)

        record = detector.detect_drift(
            "proj", CHANGED_TREE, "snap-1", BASE_TREE, ARCHITECTURE_V2, ARCHITECTURE_V1
        )

        assert record.status == DriftStatus.COMPLETED
        assert record.completed_at is not None
        assert record.drift_score == 36
        assert record.snapshot_id == "snap-1"
        assert record.current_structure == CHANGED_TREE
        assert record.previous_structure == BASE_TREE
        assert temp_db.get_drift_record(record.id) == record

    def test_first_comparison_without_baseline(self, temp_db):
        """Test that a missing previous tree marks every file as added."""
        record = detect_drift(temp_db, "proj", BASE_TREE, "snap-1", None, ARCHITECTURE_V1, ARCHITECTURE_V1)

        assert len(record.file_changes.added) == 5
        assert record.file_changes.removed == ()
        assert record.previous_structure is None
        assert record.drift_score == 10

    def test_failed_comparison_marks_error_and_reraises(self, temp_db):
        """Test that an exception during comparison is recorded and propagated."""
        detector = DriftDetector(temp_db)

        with pytest.raises(AttributeError):
            detector.detect_drift("proj", None, "snap-1", BASE_TREE, "a", "b")

        assert temp_db.count_drift_records(DriftStatus.ERROR) == 1
        assert temp_db.count_drift_records(DriftStatus.PENDING) == 0
        assert temp_db.list_drift_records("proj") == []

    def test_failed_completion_marks_error(self):
        """Test that a failing completing write still marks the record."""
        store = FakeStore(fail_on_complete=True)
        detector = DriftDetector(store)

        with pytest.raises(ConnectionError):
            detector.detect_drift("proj", BASE_TREE, "snap-1", None, "", "")

        assert store.calls == [("create", "rec-1"), ("complete", "rec-1"), ("error", "rec-1")]
        record = store.records["rec-1"]
        assert record.status == DriftStatus.ERROR
        assert record.completed_at is not None
        assert record.drift_score == 0

    def test_no_retry_after_error(self):
        """Test that the detector makes exactly one attempt."""
        store = FakeStore(fail_on_complete=True)

        with pytest.raises(ConnectionError):
            DriftDetector(store).detect_drift("proj", BASE_TREE, "snap-1", None, "", "")

        assert [c for c, _ in store.calls].count("complete") == 1

    def test_detect_against_snapshot(self, temp_db):
        """Test comparing against a stored snapshot record."""
        snapshot = temp_db.save_snapshot("proj", BASE_TREE, ARCHITECTURE_V1)
        detector = DriftDetector(temp_db)

        record = detector.detect_against_snapshot("proj", BASE_TREE, ARCHITECTURE_V1, snapshot)

        assert record.snapshot_id == snapshot.id
        assert record.drift_score == 0
        assert "No structural changes detected." in record.structure_diff

    def test_history_most_recent_first(self, temp_db):
        """Test that history lists completed records newest first."""
        detector = DriftDetector(temp_db)
        first = detector.detect_drift("proj", BASE_TREE, "s1", None, "", "")
        second = detector.detect_drift("proj", CHANGED_TREE, "s1", BASE_TREE, "", "")

        history = detector.history("proj")

        assert [r.id for r in history] == [second.id, first.id]

    def test_independent_records_per_call(self):
        """Test that repeated comparisons never share a record."""
        store = FakeStore()
        detector = DriftDetector(store)

        a = detector.detect_drift("proj", BASE_TREE, "s1", BASE_TREE, "", "")
        b = detector.detect_drift("proj", BASE_TREE, "s1", BASE_TREE, "", "")

        assert a.id != b.id
        assert len(detector.history("proj")) == 2
