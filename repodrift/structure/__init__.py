"""
Structure module for repodrift.

This module turns flat repository listings into FileNode trees, applying
the fixed ignore policy.
"""

from repodrift.structure.ignore import DEFAULT_POLICY, IgnorePolicy, should_skip
from repodrift.structure.normalizer import (
    TreeBuilder,
    entries_from_github_tree,
    listing_from_directory,
    normalize_structure,
)

__all__ = [
    "DEFAULT_POLICY",
    "IgnorePolicy",
    "should_skip",
    "TreeBuilder",
    "entries_from_github_tree",
    "listing_from_directory",
    "normalize_structure",
]
