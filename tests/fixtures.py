"""
Test fixtures for repodrift.

This module provides sample listings, trees and documentation texts,
plus small helpers for building FileNode trees by hand.
"""

from typing import Optional

from repodrift.models import FileKind, FileNode, make_root


def file_node(path: str, size: Optional[int] = None) -> FileNode:
    """Build a file node from its full path."""
    return FileNode(name=path.rsplit("/", 1)[-1], path=path, kind=FileKind.FILE, size=size)


def dir_node(path: str, *children: FileNode) -> FileNode:
    """Build a directory node from its full path and children."""
    return FileNode(
        name=path.rsplit("/", 1)[-1],
        path=path,
        kind=FileKind.DIR,
        children=tuple(children),
    )


def canonical(tree: FileNode) -> set[tuple[str, str, Optional[int]]]:
    """Order-insensitive view of a tree: (path, kind, size) for every node."""
    return {(node.path, node.kind.value, node.size) for node in tree.walk()}


# A small web project as a source-control host would list it
SAMPLE_LISTING = [
    {"path": "README.md", "kind": "file", "size": 1200},
    {"path": "src", "kind": "directory"},
    {"path": "src/index.ts", "kind": "file", "size": 340},
    {"path": "src/api", "kind": "directory"},
    {"path": "src/api/routes.ts", "kind": "file", "size": 2048},
    {"path": "src/api/auth.ts", "kind": "file", "size": 990},
    {"path": "node_modules/react/index.js", "kind": "file", "size": 80},
    {"path": ".git/HEAD", "kind": "file", "size": 23},
    {"path": "dist/bundle.js", "kind": "file", "size": 99999},
    {"path": "package.json", "kind": "file", "size": 512},
    {"path": "package-lock.json", "kind": "file", "size": 40000},
    {"path": "public/logo.png", "kind": "file", "size": 4096},
]

# The same project as a recursive git tree response
GITHUB_TREE_PAYLOAD = {
    "sha": "9fb037999f264ba9a7fc6274d15fa3ae2ab98312",
    "truncated": False,
    "tree": [
        {"path": "README.md", "mode": "100644", "type": "blob", "size": 1200},
        {"path": "src", "mode": "040000", "type": "tree"},
        {"path": "src/index.ts", "mode": "100644", "type": "blob", "size": 340},
        {"path": "vendor/lib", "mode": "160000", "type": "commit"},
    ],
}

BASE_TREE = make_root((
    file_node("README.md", 1200),
    dir_node(
        "src",
        file_node("src/index.ts", 340),
        dir_node(
            "src/api",
            file_node("src/api/routes.ts", 2048),
            file_node("src/api/auth.ts", 990),
        ),
    ),
    file_node("package.json", 512),
))

# BASE_TREE with one file added, one removed and one resized
CHANGED_TREE = make_root((
    file_node("README.md", 1200),
    dir_node(
        "src",
        file_node("src/index.ts", 360),
        dir_node(
            "src/api",
            file_node("src/api/routes.ts", 2048),
            file_node("src/api/billing.ts", 700),
        ),
    ),
    file_node("package.json", 512),
))

ARCHITECTURE_V1 = """# Architecture

## Overview
The web app is a single-page client talking to a REST API.

## Components
- API layer in src/api
- Auth handled by session cookies
"""

ARCHITECTURE_V2 = """# Architecture

## Overview
The web app is a single-page client talking to a REST API.

## Components
- API layer in src/api
- Billing integration with the payment processor
"""
