"""
Tree Graph for repodrift

This module wraps a FileNode tree in a NetworkX directed graph where nodes
are paths and edges point from a directory to each of its children.

Design Decisions:
    - Uses NetworkX DiGraph keyed by path (the root is "")
    - Stores kind, size and name as node attributes
    - Invariant checks report violations instead of raising; the drift
      engine itself never validates its input trees

Graph Properties:
    - A well-formed snapshot is an arborescence rooted at ""
    - Every edge goes from a directory to a node whose path extends it
"""

from typing import Iterable, Iterator, Optional

import networkx as nx

from repodrift.models import FileKind, FileNode


def parent_path(path: str) -> str:
    """Return the parent path of a node path ("" for top-level entries)."""
    head, _, _ = path.rpartition("/")
    return head


class TreeGraph:
    """
    A graph view of a repository snapshot tree.

    Usage:
        graph = TreeGraph.from_tree(root)
        problems = graph.check_invariants()
        sizes = graph.file_sizes()
    """

    def __init__(self) -> None:
        """Initialize an empty tree graph."""
        self._graph: nx.DiGraph = nx.DiGraph()
        self._duplicates: list[str] = []

    @property
    def graph(self) -> nx.DiGraph:
        """Access the underlying NetworkX graph."""
        return self._graph

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @classmethod
    def from_tree(cls, root: FileNode) -> "TreeGraph":
        """
        Build a graph from a FileNode tree.

        Args:
            root: Root node of the tree

        Returns:
            A TreeGraph with one node per distinct path
        """
        tree_graph = cls()
        tree_graph._add(root, None)
        return tree_graph

    def _add(self, node: FileNode, parent: Optional[str]) -> None:
        if node.path in self._graph:
            self._duplicates.append(node.path)
        self._graph.add_node(
            node.path,
            name=node.name,
            kind=node.kind.value,
            size=node.size,
        )
        if parent is not None:
            self._graph.add_edge(parent, node.path)
        for child in node.children or ():
            self._add(child, node.path)

    def check_invariants(self) -> list[str]:
        """
        Check the uniqueness and connectivity invariants of the tree.

        Returns:
            Human-readable violations; empty for a well-formed tree
        """
        problems = [f"duplicate path: {path!r}" for path in self._duplicates]

        if "" not in self._graph:
            problems.append("missing root node")
            return problems

        for path in self._graph.nodes:
            if path == "":
                continue
            expected = parent_path(path)
            if expected not in self._graph:
                problems.append(f"orphan path: {path!r} (no {expected!r})")
            elif not self._graph.has_edge(expected, path):
                problems.append(f"misplaced path: {path!r} is not under {expected!r}")

        for path in self._graph.nodes:
            if self._graph.nodes[path]["kind"] == FileKind.FILE.value and self._graph.out_degree(path):
                problems.append(f"file with children: {path!r}")

        if not problems and not nx.is_arborescence(self._graph):
            problems.append("tree is not connected to the root")

        return problems

    def is_valid(self) -> bool:
        return not self.check_invariants()

    def file_sizes(self) -> dict[str, Optional[int]]:
        """Map every file path to its recorded size."""
        return {
            path: data["size"]
            for path, data in self._graph.nodes(data=True)
            if data["kind"] == FileKind.FILE.value
        }

    def descendants(self, path: str) -> set[str]:
        """All paths below the given directory path."""
        if path not in self._graph:
            return set()
        return nx.descendants(self._graph, path)

    def changed_directories(self, paths: Iterable[str]) -> set[str]:
        """
        Get every directory containing at least one of the given paths.

        Paths missing from the graph are resolved through their path prefix,
        so removed files still count against the directories they lived in.

        Args:
            paths: Changed file paths

        Returns:
            Set of ancestor directory paths, excluding the root
        """
        affected: set[str] = set()
        for path in paths:
            if path in self._graph:
                affected.update(nx.ancestors(self._graph, path))
            else:
                current = parent_path(path)
                while current:
                    affected.add(current)
                    current = parent_path(current)
        affected.discard("")
        return affected


def tree_paths(root: FileNode) -> Iterator[str]:
    """Yield every path in a tree in depth-first children order."""
    for node in root.walk():
        yield node.path


def summarize_by_directory(
    changed_paths: Iterable[str],
    depth: int = 1,
) -> dict[str, int]:
    """
    Count changed paths per top-level directory prefix.

    Args:
        changed_paths: Paths to group
        depth: Number of leading segments that form the group key

    Returns:
        Mapping of directory prefix ("" for root-level files) to count,
        ordered by descending count then prefix
    """
    counts: dict[str, int] = {}
    for path in changed_paths:
        parts = path.split("/")[:-1][:depth]
        key = "/".join(parts)
        counts[key] = counts.get(key, 0) + 1
    return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))
