"""
Drift Detection for repodrift

This module runs one drift comparison between a current repository tree
and a reference snapshot, and brackets it with the persistence calls that
record its lifecycle.

Lifecycle:
    PENDING: record created before any computation
    COMPLETED: file changes, both reports and the score are stored
    ERROR: comparison raised; the record is marked and the exception
           propagates to the caller

Academic Context:
    Input: Current tree, previous tree (or None), current and previous docs
    Transformation: Tree comparison, report rendering, weighted scoring
    Output: A completed DriftRecord
    Limitation: File changes are size-based, not content-based

Design Decisions:
    - Deterministic: same inputs always produce the same record fields
    - Stateless: the store is passed in; nothing is cached between calls
    - No retries: a failed comparison is terminal, the caller may re-run
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from repodrift.drift.compare import compare_trees
from repodrift.drift.reports import compare_architecture_markdown, generate_structure_diff
from repodrift.drift.scoring import calculate_drift_score
from repodrift.models import (
    DriftRecord,
    DriftSeverity,
    FileChangeSet,
    FileNode,
    SnapshotRecord,
)

logger = logging.getLogger(__name__)


class DriftStore(Protocol):
    """Persistence operations the detector depends on."""

    def create_pending_drift_record(
        self,
        project_id: str,
        snapshot_id: str,
        current_tree: FileNode,
        previous_tree: Optional[FileNode],
    ) -> str: ...

    def complete_drift_record(
        self,
        record_id: str,
        file_changes: FileChangeSet,
        structure_diff: str,
        architecture_diff: str,
        score: int,
    ) -> DriftRecord: ...

    def mark_drift_record_error(self, record_id: str) -> None: ...

    def list_drift_records(self, project_id: str) -> list[DriftRecord]: ...


@dataclass(frozen=True)
class DriftAnalysis:
    """
    The computed part of a drift record, without identity or lifecycle.

    Attributes:
        file_changes: Added / removed / modified file paths
        structure_diff: Markdown report of structural changes
        architecture_diff: Markdown report of documentation changes
        drift_score: Integer in [0, 100]
    """

    file_changes: FileChangeSet
    structure_diff: str
    architecture_diff: str
    drift_score: int

    @property
    def severity(self) -> DriftSeverity:
        return DriftSeverity.from_score(self.drift_score)


def analyze_drift(
    current_tree: FileNode,
    previous_tree: Optional[FileNode],
    current_docs: str,
    previous_docs: str,
) -> DriftAnalysis:
    """
    Compute file changes, both reports and the drift score.

    This is a pure function; nothing is persisted.

    Args:
        current_tree: Tree captured now
        previous_tree: Baseline tree, or None for a first comparison
        current_docs: Documentation generated for the current tree
        previous_docs: Documentation stored with the baseline

    Returns:
        DriftAnalysis with every computed field populated
    """
    file_changes = compare_trees(current_tree, previous_tree)
    structure_diff = generate_structure_diff(file_changes)
    architecture_diff = compare_architecture_markdown(current_docs, previous_docs)
    drift_score = calculate_drift_score(file_changes, architecture_diff)
    return DriftAnalysis(
        file_changes=file_changes,
        structure_diff=structure_diff,
        architecture_diff=architecture_diff,
        drift_score=drift_score,
    )


class DriftDetector:
    """
    Runs drift comparisons and records them through a store.

    Usage:
        detector = DriftDetector(Database(path))
        record = detector.detect_drift(project_id, tree, snapshot_id,
                                       previous_tree, docs, previous_docs)
    """

    def __init__(self, store: DriftStore) -> None:
        """
        Initialize the detector with its persistence collaborator.

        Args:
            store: Object implementing the DriftStore operations
        """
        self._store = store

    def detect_drift(
        self,
        project_id: str,
        current_tree: FileNode,
        snapshot_id: str,
        previous_tree: Optional[FileNode],
        current_docs: str,
        previous_docs: str,
    ) -> DriftRecord:
        """
        Compare the current state against a reference snapshot and persist it.

        Args:
            project_id: Project the comparison belongs to
            current_tree: Tree captured now
            snapshot_id: Identifier of the reference snapshot
            previous_tree: Tree stored with the snapshot, or None
            current_docs: Documentation generated for the current tree
            previous_docs: Documentation stored with the snapshot

        Returns:
            The completed DriftRecord

        Raises:
            Exception: Whatever the comparison or the completing write raised,
                after the record has been marked ERROR
        """
        record_id = self._store.create_pending_drift_record(
            project_id, snapshot_id, current_tree, previous_tree
        )
        logger.debug("Created pending drift record %s for project %s", record_id, project_id)

        try:
            analysis = analyze_drift(current_tree, previous_tree, current_docs, previous_docs)
            record = self._store.complete_drift_record(
                record_id,
                analysis.file_changes,
                analysis.structure_diff,
                analysis.architecture_diff,
                analysis.drift_score,
            )
        except Exception:
            logger.exception("Drift detection failed for record %s", record_id)
            try:
                self._store.mark_drift_record_error(record_id)
            except Exception:
                logger.exception("Could not mark drift record %s as failed", record_id)
            raise

        logger.debug(
            "Completed drift record %s with score %d (%d file changes)",
            record_id,
            record.drift_score,
            record.file_changes.total,
        )
        return record

    def detect_against_snapshot(
        self,
        project_id: str,
        current_tree: FileNode,
        current_docs: str,
        snapshot: SnapshotRecord,
    ) -> DriftRecord:
        """
        Compare the current state against a stored snapshot record.

        Args:
            project_id: Project the comparison belongs to
            current_tree: Tree captured now
            current_docs: Documentation generated for the current tree
            snapshot: The reference snapshot

        Returns:
            The completed DriftRecord
        """
        return self.detect_drift(
            project_id,
            current_tree,
            snapshot.id,
            snapshot.structure,
            current_docs,
            snapshot.markdown,
        )

    def history(self, project_id: str) -> list[DriftRecord]:
        """Completed drift records for a project, most recent first."""
        return self._store.list_drift_records(project_id)


def detect_drift(
    store: DriftStore,
    project_id: str,
    current_tree: FileNode,
    snapshot_id: str,
    previous_tree: Optional[FileNode],
    current_docs: str,
    previous_docs: str,
) -> DriftRecord:
    """
    Run one persisted drift comparison.

    Args:
        store: Persistence collaborator
        project_id: Project the comparison belongs to
        current_tree: Tree captured now
        snapshot_id: Identifier of the reference snapshot
        previous_tree: Tree stored with the snapshot, or None
        current_docs: Documentation generated for the current tree
        previous_docs: Documentation stored with the snapshot

    Returns:
        The completed DriftRecord
    """
    return DriftDetector(store).detect_drift(
        project_id,
        current_tree,
        snapshot_id,
        previous_tree,
        current_docs,
        previous_docs,
    )
