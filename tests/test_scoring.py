"""
Tests for the drift score heuristic.
"""

import pytest

from repodrift.drift import (
    NO_ARCHITECTURE_CHANGES,
    NO_SIGNIFICANT_CHANGES,
    calculate_drift_score,
    compare_architecture_markdown,
    compare_trees,
    score_components,
)
from repodrift.models import DriftSeverity, FileChangeSet
from tests.fixtures import ARCHITECTURE_V1, ARCHITECTURE_V2, BASE_TREE, CHANGED_TREE


def paths(prefix, count):
    return tuple(f"{prefix}{i}.py" for i in range(count))


BOTH_SECTIONS = compare_architecture_markdown("new line\n", "old line\n")


class TestDriftScore:
    """Tests for calculate_drift_score."""

    def test_no_drift_scores_zero(self):
        """Test that identical trees and docs score exactly zero."""
        changes = compare_trees(BASE_TREE, BASE_TREE)
        report = compare_architecture_markdown(ARCHITECTURE_V1, ARCHITECTURE_V1)

        assert calculate_drift_score(changes, report) == 0

    def test_two_added_files(self):
        """Test the per-file weight of additions."""
        changes = FileChangeSet(added=("a", "b"))

        assert calculate_drift_score(changes, NO_ARCHITECTURE_CHANGES) == 4

    def test_saturates_at_hundred(self):
        """Test the upper bound with every component at its cap."""
        changes = FileChangeSet(
            added=paths("add", 10),
            removed=paths("rm", 10),
            modified=paths("mod", 10),
        )

        assert calculate_drift_score(changes, BOTH_SECTIONS) == 100

    @pytest.mark.parametrize(
        "changes, expected",
        [
            (FileChangeSet(added=paths("a", 11)), 20),
            (FileChangeSet(removed=paths("r", 4)), 12),
            (FileChangeSet(removed=paths("r", 6)), 15),
            (FileChangeSet(modified=paths("m", 3)), 3),
            (FileChangeSet(modified=paths("m", 7)), 5),
        ],
    )
    def test_file_component_caps(self, changes, expected):
        """Test each file component's weight and cap."""
        assert calculate_drift_score(changes, NO_ARCHITECTURE_CHANGES) == expected

    def test_single_doc_section(self):
        """Test that one doc section is worth fifteen points."""
        report = compare_architecture_markdown("a\nb\n", "a\n")

        assert calculate_drift_score(FileChangeSet(), report) == 15

    def test_whitespace_doc_change_scores_zero(self):
        assert calculate_drift_score(FileChangeSet(), NO_SIGNIFICANT_CHANGES) == 0

    def test_realistic_comparison(self):
        """Test a comparison with one change of each kind plus doc edits."""
        changes = compare_trees(CHANGED_TREE, BASE_TREE)
        report = compare_architecture_markdown(ARCHITECTURE_V2, ARCHITECTURE_V1)

        assert calculate_drift_score(changes, report) == 30 + 2 + 3 + 1

    def test_score_components(self):
        changes = FileChangeSet(added=("a",), removed=("b",), modified=("c",))

        assert score_components(changes, BOTH_SECTIONS) == {
            "documentation": 30,
            "added": 2,
            "removed": 3,
            "modified": 1,
        }


class TestSeverity:
    """Tests for severity banding."""

    @pytest.mark.parametrize(
        "score, severity",
        [
            (0, DriftSeverity.LOW),
            (19, DriftSeverity.LOW),
            (20, DriftSeverity.MEDIUM),
            (49, DriftSeverity.MEDIUM),
            (50, DriftSeverity.HIGH),
            (100, DriftSeverity.HIGH),
        ],
    )
    def test_from_score(self, score, severity):
        assert DriftSeverity.from_score(score) == severity
