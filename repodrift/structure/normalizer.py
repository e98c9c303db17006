"""
Structure Normalizer for repodrift

Converts a flat recursive listing of repository entries into a rooted,
ordered FileNode tree.

Design Decisions:
    - Entries are appended to their parent's children in input order; the
      output order is a direct function of the listing order
    - Intermediate directories are synthesized lazily and inserted into their
      parent exactly once, whether they appear explicitly or are implied
    - Ignored entries are dropped together with everything beneath them
    - Paths are not validated; a well-formed listing is the provider's job

Academic Context:
    Input: Sequence of (path, kind, size) entries from a listing provider
    Transformation: Path splitting with a directory index keyed by path
    Output: Immutable FileNode tree rooted at the empty path
    Limitation: Duplicate file entries are kept as given
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from repodrift.models import FileKind, FileNode, ListingEntry
from repodrift.structure.ignore import DEFAULT_POLICY, IgnorePolicy

logger = logging.getLogger(__name__)

EntryLike = Union[ListingEntry, Mapping[str, Any]]


class _DirSlot:
    """Mutable directory placeholder used while the tree is being built."""

    __slots__ = ("name", "path", "children")

    def __init__(self, name: str, path: str) -> None:
        self.name = name
        self.path = path
        self.children: list[Union["_DirSlot", FileNode]] = []

    def freeze(self) -> FileNode:
        return FileNode(
            name=self.name,
            path=self.path,
            kind=FileKind.DIR,
            children=tuple(
                child.freeze() if isinstance(child, _DirSlot) else child
                for child in self.children
            ),
        )


class TreeBuilder:
    """
    Incrementally builds a FileNode tree from listing entries.

    Usage:
        builder = TreeBuilder()
        builder.add(ListingEntry("src/index.ts", FileKind.FILE, 120))
        root = builder.build()
    """

    def __init__(self, policy: Optional[IgnorePolicy] = None) -> None:
        self._policy = policy or DEFAULT_POLICY
        self._root = _DirSlot("", "")
        self._dirs: dict[str, _DirSlot] = {"": self._root}
        self._skipped = 0

    @property
    def skipped(self) -> int:
        """Number of entries dropped by the ignore policy."""
        return self._skipped

    def add(self, entry: ListingEntry) -> None:
        """
        Attach one entry, synthesizing any missing ancestor directories.

        Args:
            entry: The listing entry to add
        """
        is_dir = entry.kind is FileKind.DIR
        if self._policy.is_ignored(entry.path, is_dir=is_dir):
            self._skipped += 1
            return

        parts = entry.path.split("/")
        parent = self._ensure_dirs(parts[:-1])

        if is_dir:
            if entry.path not in self._dirs:
                slot = _DirSlot(parts[-1], entry.path)
                self._dirs[entry.path] = slot
                parent.children.append(slot)
        else:
            parent.children.append(
                FileNode(
                    name=parts[-1],
                    path=entry.path,
                    kind=FileKind.FILE,
                    size=entry.size,
                )
            )

    def _ensure_dirs(self, parts: list[str]) -> _DirSlot:
        current = self._root
        current_path = ""
        for part in parts:
            current_path = f"{current_path}/{part}" if current_path else part
            slot = self._dirs.get(current_path)
            if slot is None:
                slot = _DirSlot(part, current_path)
                self._dirs[current_path] = slot
                current.children.append(slot)
            current = slot
        return current

    def build(self) -> FileNode:
        """Freeze the accumulated entries into an immutable tree."""
        return self._root.freeze()


def _coerce_entry(entry: EntryLike) -> ListingEntry:
    if isinstance(entry, ListingEntry):
        return entry
    return ListingEntry.from_dict(entry)


def normalize_structure(
    entries: Iterable[EntryLike],
    policy: Optional[IgnorePolicy] = None,
) -> FileNode:
    """
    Convert a flat repository listing into a FileNode tree.

    This is a pure function: the same listing (in the same order) always
    yields an equal tree.

    Args:
        entries: Listing entries, as ListingEntry values or
                 ``{"path", "kind"|"type", "size"?}`` mappings
        policy: Ignore policy to apply (defaults to the fixed policy)

    Returns:
        Root FileNode of kind DIR with path ""

    Example:
        >>> root = normalize_structure([
        ...     {"path": "src/index.ts", "kind": "file", "size": 10},
        ...     {"path": "node_modules/x/index.js", "kind": "file", "size": 3},
        ... ])
        >>> [c.path for c in root.children]
        ['src']
    """
    builder = TreeBuilder(policy)
    count = 0
    for entry in entries:
        builder.add(_coerce_entry(entry))
        count += 1
    logger.debug("Normalized %d entries (%d ignored)", count, builder.skipped)
    return builder.build()


def entries_from_github_tree(payload: Mapping[str, Any]) -> Iterator[ListingEntry]:
    """
    Convert a recursive git tree response into listing entries.

    Blob entries become files, tree entries become directories. Submodule
    ("commit") entries have no content in the listing and are skipped.

    Args:
        payload: Decoded JSON body with a ``tree`` list of
                 ``{"path", "type", "size"?}`` items

    Yields:
        ListingEntry for each blob or tree item, in payload order
    """
    if payload.get("truncated"):
        logger.warning("Tree listing was truncated by the provider; snapshot is partial")

    for item in payload.get("tree", ()):
        item_type = item.get("type")
        if item_type not in ("blob", "tree"):
            logger.debug("Skipping %s entry %s", item_type, item.get("path"))
            continue
        yield ListingEntry(
            path=item["path"],
            kind=FileKind.parse(item_type),
            size=item.get("size") if item_type == "blob" else None,
        )


def listing_from_directory(
    root: Union[Path, str],
    policy: Optional[IgnorePolicy] = None,
) -> Iterator[ListingEntry]:
    """
    List a local directory the way a source-control host lists a tree.

    Directories are yielded before their contents, in sorted order.
    Symlinks are reported as files and never followed. When a policy is
    given, ignored directories are not descended into.

    Args:
        root: Directory to list
        policy: Optional ignore policy used to prune the walk

    Yields:
        ListingEntry for every directory and file below root
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Directory not found: {root}")

    for current_dir, dirs, files in os.walk(root, topdown=True):
        current = Path(current_dir)
        rel_dir = PurePosixPath(current.relative_to(root).as_posix())
        prefix = "" if str(rel_dir) == "." else f"{rel_dir}/"

        kept: list[str] = []
        for name in sorted(dirs):
            rel = prefix + name
            if policy is not None and policy.is_ignored(rel, is_dir=True):
                continue
            if (current / name).is_symlink():
                yield ListingEntry(rel, FileKind.FILE, (current / name).lstat().st_size)
                continue
            kept.append(name)
            yield ListingEntry(rel, FileKind.DIR)
        dirs[:] = kept

        for name in sorted(files):
            rel = prefix + name
            if policy is not None and policy.is_ignored(rel):
                continue
            yield ListingEntry(rel, FileKind.FILE, (current / name).lstat().st_size)
