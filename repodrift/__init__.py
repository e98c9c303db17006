"""
repodrift Engine

Core engine for turning repository listings into file trees and detecting
structural and documentation drift between snapshots.
"""

from repodrift.drift import DriftDetector, analyze_drift, compare_trees, detect_drift
from repodrift.models import (
    DriftRecord,
    DriftSeverity,
    DriftStatus,
    FileChangeSet,
    FileKind,
    FileNode,
    ListingEntry,
)
from repodrift.structure import normalize_structure

__all__ = [
    "DriftDetector",
    "DriftRecord",
    "DriftSeverity",
    "DriftStatus",
    "FileChangeSet",
    "FileKind",
    "FileNode",
    "ListingEntry",
    "analyze_drift",
    "compare_trees",
    "detect_drift",
    "normalize_structure",
]
__version__ = "0.1.0"
