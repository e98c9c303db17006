"""
Drift detection module for repodrift.

This module compares repository trees and their generated documentation,
renders change reports and scores the overall drift.
"""

from repodrift.drift.compare import compare_trees, describe_changes, flatten_files
from repodrift.drift.detector import (
    DriftAnalysis,
    DriftDetector,
    DriftStore,
    analyze_drift,
    detect_drift,
)
from repodrift.drift.reports import (
    NO_ARCHITECTURE_CHANGES,
    NO_SIGNIFICANT_CHANGES,
    NO_STRUCTURE_CHANGES,
    compare_architecture_markdown,
    generate_structure_diff,
)
from repodrift.drift.scoring import calculate_drift_score, score_components

__all__ = [
    "DriftAnalysis",
    "DriftDetector",
    "DriftStore",
    "NO_ARCHITECTURE_CHANGES",
    "NO_SIGNIFICANT_CHANGES",
    "NO_STRUCTURE_CHANGES",
    "analyze_drift",
    "calculate_drift_score",
    "compare_architecture_markdown",
    "compare_trees",
    "describe_changes",
    "detect_drift",
    "flatten_files",
    "generate_structure_diff",
    "score_components",
]
