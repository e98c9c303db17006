"""
Tests for the graph module.

Tests TreeGraph construction, invariant checks and directory summaries.
"""

from repodrift.graph import TreeGraph, parent_path, summarize_by_directory, tree_paths
from repodrift.models import make_root
from tests.fixtures import BASE_TREE, dir_node, file_node


class TestTreeGraph:
    """Tests for the TreeGraph class."""

    def test_node_per_path(self):
        """Test that every tree node becomes a graph node."""
        graph = TreeGraph.from_tree(BASE_TREE)

        assert graph.node_count == len(list(tree_paths(BASE_TREE)))
        assert graph.graph.has_edge("src", "src/api")
        assert graph.graph.nodes["src/api/auth.ts"]["size"] == 990

    def test_valid_tree_has_no_violations(self):
        """Test that a well-formed tree passes the invariant check."""
        graph = TreeGraph.from_tree(BASE_TREE)

        assert graph.check_invariants() == []
        assert graph.is_valid()

    def test_empty_root_is_valid(self):
        """Test that a lone root is a valid tree."""
        assert TreeGraph.from_tree(make_root()).is_valid()

    def test_orphan_detected(self):
        """Test that a node whose parent directory is missing is reported."""
        tree = make_root((file_node("lib/util.py", 10),))

        problems = TreeGraph.from_tree(tree).check_invariants()

        assert any("orphan" in p and "lib/util.py" in p for p in problems)

    def test_misplaced_node_detected(self):
        """Test that a node attached under the wrong directory is reported."""
        tree = make_root((
            dir_node("lib"),
            dir_node("src", file_node("lib/util.py", 10)),
        ))

        problems = TreeGraph.from_tree(tree).check_invariants()

        assert any("misplaced" in p for p in problems)

    def test_duplicate_path_detected(self):
        """Test that repeated paths are reported."""
        tree = make_root((file_node("a.txt", 1), file_node("a.txt", 2)))

        problems = TreeGraph.from_tree(tree).check_invariants()

        assert problems == ["duplicate path: 'a.txt'"]

    def test_file_sizes(self):
        """Test flattening to a path -> size map."""
        sizes = TreeGraph.from_tree(BASE_TREE).file_sizes()

        assert sizes == {
            "README.md": 1200,
            "src/index.ts": 340,
            "src/api/routes.ts": 2048,
            "src/api/auth.ts": 990,
            "package.json": 512,
        }

    def test_descendants(self):
        """Test listing everything below a directory."""
        graph = TreeGraph.from_tree(BASE_TREE)

        assert graph.descendants("src/api") == {"src/api/routes.ts", "src/api/auth.ts"}
        assert graph.descendants("missing") == set()

    def test_changed_directories(self):
        """Test resolving ancestor directories of present and absent paths."""
        graph = TreeGraph.from_tree(BASE_TREE)

        affected = graph.changed_directories(["src/api/auth.ts", "gone/deep/x.py", "README.md"])

        assert affected == {"src", "src/api", "gone", "gone/deep"}


class TestHelpers:
    """Tests for module-level helpers."""

    def test_parent_path(self):
        assert parent_path("src/api/auth.ts") == "src/api"
        assert parent_path("README.md") == ""

    def test_summarize_by_directory(self):
        """Test grouping changed paths by leading directory."""
        counts = summarize_by_directory([
            "src/a.ts",
            "src/api/b.ts",
            "docs/c.md",
            "README.md",
            "src/d.ts",
        ])

        assert counts == {"src": 3, "": 1, "docs": 1}
        assert list(counts) == ["src", "", "docs"]

    def test_summarize_deeper(self):
        counts = summarize_by_directory(["src/api/a.ts", "src/b.ts"], depth=2)

        assert counts == {"src": 1, "src/api": 1}
