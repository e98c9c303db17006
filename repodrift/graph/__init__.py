"""
Graph module for repodrift.

This module provides a NetworkX-based view of snapshot trees for
invariant checks and per-directory change summaries.
"""

from repodrift.graph.tree_graph import (
    TreeGraph,
    parent_path,
    summarize_by_directory,
    tree_paths,
)

__all__ = [
    "TreeGraph",
    "parent_path",
    "summarize_by_directory",
    "tree_paths",
]
