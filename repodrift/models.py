"""
Core Data Models for repodrift

This module defines the canonical data structures used throughout the system:
- FileNode: One file or directory in a repository snapshot tree
- ListingEntry: One flat entry from a source-control listing
- FileChangeSet: Added / removed / modified paths between two trees
- DriftRecord: The persisted result of one drift comparison
- SnapshotRecord: A stored tree plus its generated documentation

These models are designed to be:
- Immutable where possible (using frozen dataclasses)
- Serializable to the JSON document shape used by storage
- Clear in their semantic meaning
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class FileKind(Enum):
    """
    Kind of a tree entry.

    Parsing accepts the aliases used by listing providers: "directory" and
    "tree" map to DIR, "blob" maps to FILE.
    """

    FILE = "file"
    DIR = "dir"

    @classmethod
    def parse(cls, value: "str | FileKind") -> "FileKind":
        """Parse a kind tag, accepting provider aliases."""
        if isinstance(value, FileKind):
            return value
        aliases = {
            "file": cls.FILE,
            "blob": cls.FILE,
            "dir": cls.DIR,
            "directory": cls.DIR,
            "tree": cls.DIR,
        }
        try:
            return aliases[value]
        except KeyError:
            raise ValueError(f"Unknown entry kind: {value!r}") from None


@dataclass(frozen=True)
class FileNode:
    """
    Represents one entry in a repository snapshot.

    Attributes:
        name: Last path segment ("" for the root)
        path: Full slash-separated path from the repository root ("" for the root)
        kind: FILE or DIR
        size: Byte size; only meaningful for files, always None for directories
        children: Ordered child nodes for directories, None for files

    Invariants:
        - path is unique across the whole tree
        - every non-root path's parent path exists in the same tree
        - directories have size None and a (possibly empty) children tuple
        - files have children None
    """

    name: str
    path: str
    kind: FileKind
    size: Optional[int] = None
    children: Optional[tuple["FileNode", ...]] = None

    def __post_init__(self) -> None:
        """Validate the kind-dependent shape."""
        if self.kind is FileKind.DIR:
            if self.size is not None:
                raise ValueError(f"Directory {self.path!r} cannot carry a size")
            if self.children is None:
                object.__setattr__(self, "children", ())
        elif self.children is not None:
            raise ValueError(f"File {self.path!r} cannot have children")

    @property
    def is_file(self) -> bool:
        return self.kind is FileKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is FileKind.DIR

    @property
    def is_root(self) -> bool:
        return self.path == ""

    def walk(self):
        """Yield this node and every descendant in depth-first, children order."""
        yield self
        for child in self.children or ():
            yield from child.walk()

    def iter_files(self):
        """Yield every file node below (or at) this node."""
        for node in self.walk():
            if node.is_file:
                yield node

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON document shape stored by the persistence layer."""
        data: dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "type": self.kind.value,
        }
        if self.is_file:
            if self.size is not None:
                data["size"] = self.size
        else:
            data["children"] = [child.to_dict() for child in self.children or ()]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileNode":
        """Rebuild a node (and its subtree) from its JSON document shape."""
        kind = FileKind.parse(data["type"])
        if kind is FileKind.DIR:
            return cls(
                name=data.get("name", ""),
                path=data.get("path", ""),
                kind=kind,
                children=tuple(cls.from_dict(c) for c in data.get("children") or ()),
            )
        return cls(
            name=data.get("name", ""),
            path=data["path"],
            kind=kind,
            size=data.get("size"),
        )


def make_root(children: tuple[FileNode, ...] = ()) -> FileNode:
    """Create an empty-named root directory node."""
    return FileNode(name="", path="", kind=FileKind.DIR, children=children)


@dataclass(frozen=True)
class ListingEntry:
    """
    One entry of a flat recursive repository listing.

    Attributes:
        path: Slash-separated path from the repository root
        kind: FILE or DIR
        size: Byte size for files, if the provider reports one
    """

    path: str
    kind: FileKind
    size: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListingEntry":
        """Build from a ``{"path", "kind"|"type", "size"?}`` mapping."""
        kind = data.get("kind", data.get("type"))
        return cls(path=data["path"], kind=FileKind.parse(kind), size=data.get("size"))


@dataclass(frozen=True)
class FileChangeSet:
    """
    Result of comparing two trees.

    Attributes:
        added: Paths present only in the current tree
        removed: Paths present only in the previous tree
        modified: Paths present in both whose recorded size differs

    Invariants:
        - the three collections are pairwise disjoint
        - a path absent from all three is unchanged
    """

    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        """Total number of changed paths."""
        return len(self.added) + len(self.removed) + len(self.modified)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "added": list(self.added),
            "removed": list(self.removed),
            "modified": list(self.modified),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "FileChangeSet":
        data = data or {}
        return cls(
            added=tuple(data.get("added", ())),
            removed=tuple(data.get("removed", ())),
            modified=tuple(data.get("modified", ())),
        )


@dataclass(frozen=True)
class FileChange:
    """Per-path change detail, with the sizes recorded on each side."""

    path: str
    change: str  # "added" | "removed" | "modified"
    previous_size: Optional[int] = None
    current_size: Optional[int] = None


class DriftStatus(Enum):
    """
    Lifecycle state of a drift record.

    States:
        PENDING: Record created, comparison in progress.
        COMPLETED: All change, report and score fields are populated.
        ERROR: The comparison raised; change/score fields keep their defaults.

    COMPLETED and ERROR are terminal.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not DriftStatus.PENDING


class DriftSeverity(Enum):
    """Coarse banding of a drift score for display."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: int) -> "DriftSeverity":
        if score < 20:
            return cls.LOW
        if score < 50:
            return cls.MEDIUM
        return cls.HIGH


def utc_now() -> datetime:
    """Timezone-aware current time used for every stored timestamp."""
    return datetime.now(timezone.utc)


@dataclass
class DriftRecord:
    """
    The persisted result of one drift comparison.

    Attributes:
        id: Unique identifier of this record
        project_id: Project the comparison belongs to
        snapshot_id: Reference snapshot the current tree was compared against
        current_structure: Tree captured for this comparison
        previous_structure: Baseline tree, None for a first comparison
        file_changes: Added / removed / modified file paths
        structure_diff: Markdown report of structural changes
        architecture_diff: Markdown report of documentation changes
        drift_score: Integer in [0, 100]
        status: Lifecycle state
        created_at: When the pending record was created
        completed_at: When it reached a terminal state, None while pending
    """

    id: str
    project_id: str
    snapshot_id: str
    current_structure: Optional[FileNode] = None
    previous_structure: Optional[FileNode] = None
    file_changes: FileChangeSet = field(default_factory=FileChangeSet)
    structure_diff: str = ""
    architecture_diff: str = ""
    drift_score: int = 0
    status: DriftStatus = DriftStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    @property
    def severity(self) -> DriftSeverity:
        return DriftSeverity.from_score(self.drift_score)


@dataclass
class SnapshotRecord:
    """
    One captured repository tree plus its generated documentation.

    Attributes:
        id: Unique identifier of this snapshot
        project_id: Project the snapshot belongs to
        structure: Normalized tree at capture time, if it was stored
        markdown: Architecture documentation generated for the tree
        created_at: When the snapshot was taken
    """

    id: str
    project_id: str
    structure: Optional[FileNode]
    markdown: str
    created_at: datetime = field(default_factory=utc_now)
