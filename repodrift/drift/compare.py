"""
Tree Comparison for repodrift

Classifies file paths between a current and a previous snapshot tree as
added, removed or modified.

Classification Rules:
    ADDED: path is a file in the current tree only
    REMOVED: path is a file in the previous tree only
    MODIFIED: path is a file in both trees and the recorded sizes differ
              (a missing size on one side counts as different)

Academic Context:
    Input: Two FileNode trees (previous may be None)
    Transformation: Flatten to path -> size maps, then set differences
    Output: FileChangeSet
    Limitation: Size is a proxy for content. Edits that keep the byte size
                are not reported, and size-only changes always are.

Directories never take part in classification. A path that switches
between file and directory shows up as the removal of the old file paths
plus the addition of the new ones.
"""

from typing import Optional

from repodrift.models import FileChange, FileChangeSet, FileNode


def flatten_files(tree: FileNode) -> dict[str, Optional[int]]:
    """
    Map every file path in a tree to its recorded size.

    Insertion order follows a depth-first walk in children order.

    Args:
        tree: Root of the tree to flatten

    Returns:
        Ordered mapping of file path to size (None when unknown)
    """
    return {node.path: node.size for node in tree.iter_files()}


def compare_trees(
    current: FileNode,
    previous: Optional[FileNode],
) -> FileChangeSet:
    """
    Compare two trees and classify file changes.

    This is a pure function implementing the size-based change rules.

    Args:
        current: The tree captured now
        previous: The baseline tree, or None for a first comparison

    Returns:
        FileChangeSet with pairwise-disjoint added/removed/modified paths

    Example:
        >>> changes = compare_trees(tree, None)
        >>> changes.removed, changes.modified
        ((), ())
    """
    current_files = flatten_files(current)

    if previous is None:
        return FileChangeSet(added=tuple(current_files))

    previous_files = flatten_files(previous)

    added: list[str] = []
    modified: list[str] = []
    for path, size in current_files.items():
        if path not in previous_files:
            added.append(path)
        elif previous_files[path] != size:
            modified.append(path)

    removed = [path for path in previous_files if path not in current_files]

    return FileChangeSet(
        added=tuple(added),
        removed=tuple(removed),
        modified=tuple(modified),
    )


def describe_changes(
    current: FileNode,
    previous: Optional[FileNode],
) -> list[FileChange]:
    """
    List every changed file with the sizes recorded on each side.

    Args:
        current: The tree captured now
        previous: The baseline tree, or None

    Returns:
        FileChange entries ordered added, removed, modified
    """
    current_files = flatten_files(current)
    previous_files = flatten_files(previous) if previous is not None else {}
    changes = compare_trees(current, previous)

    details = [
        FileChange(path, "added", current_size=current_files[path])
        for path in changes.added
    ]
    details.extend(
        FileChange(path, "removed", previous_size=previous_files[path])
        for path in changes.removed
    )
    details.extend(
        FileChange(
            path,
            "modified",
            previous_size=previous_files[path],
            current_size=current_files[path],
        )
        for path in changes.modified
    )
    return details
