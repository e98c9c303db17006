"""
Markdown change reports.

Two reports are rendered for every comparison: the structural report
lists changed file paths, the architecture report lists documentation
lines that were removed or added between two generated documents.
"""

from repodrift.models import FileChangeSet

STRUCTURE_TITLE = "# Repository Structure Changes"
NO_STRUCTURE_CHANGES = "No structural changes detected."

ARCHITECTURE_TITLE = "# Architecture Documentation Changes"
NO_ARCHITECTURE_CHANGES = "No changes detected in architecture documentation."
NO_SIGNIFICANT_CHANGES = "No significant changes detected in architecture documentation."

ADDED_HEADING = "## Added"
REMOVED_HEADING = "## Removed"

_FILE_SECTIONS = (
    ("added", "## Added Files", "new"),
    ("removed", "## Removed Files", "deleted"),
    ("modified", "## Modified Files", "changed"),
)


def generate_structure_diff(changes: FileChangeSet) -> str:
    """
    Render a markdown report of structural changes.

    Sections appear in added, removed, modified order and are omitted when
    empty. With no changes at all a single sentence replaces the sections.

    Args:
        changes: Classified file changes

    Returns:
        Markdown text
    """
    lines = [STRUCTURE_TITLE, ""]

    if changes.is_empty:
        lines.append(NO_STRUCTURE_CHANGES)
        return "\n".join(lines)

    for attr, heading, label in _FILE_SECTIONS:
        paths = getattr(changes, attr)
        if not paths:
            continue
        lines.append(heading)
        lines.append("")
        lines.extend(f"- `{path}` ({label})" for path in paths)
        lines.append("")

    return "\n".join(lines)


def _unmatched_lines(old: list[str], new: list[str]) -> tuple[list[str], list[str]]:
    """
    Split two line lists around one longest common subsequence.

    Every line kept by the subsequence is unchanged; the remaining lines of
    old were removed and the remaining lines of new were added. The common
    prefix and suffix are trimmed before the quadratic table is built.

    Returns:
        (removed, added), each in text order
    """
    start = 0
    while start < len(old) and start < len(new) and old[start] == new[start]:
        start += 1

    end_old, end_new = len(old), len(new)
    while end_old > start and end_new > start and old[end_old - 1] == new[end_new - 1]:
        end_old -= 1
        end_new -= 1

    a = old[start:end_old]
    b = new[start:end_new]

    # lengths[i][j] is the LCS length of a[i:] and b[j:]
    lengths = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) - 1, -1, -1):
        row, below = lengths[i], lengths[i + 1]
        for j in range(len(b) - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    removed: list[str] = []
    added: list[str] = []
    i = j = 0
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            i += 1
            j += 1
        elif lengths[i + 1][j] >= lengths[i][j + 1]:
            removed.append(a[i])
            i += 1
        else:
            added.append(b[j])
            j += 1
    removed.extend(a[i:])
    added.extend(b[j:])
    return removed, added


def diff_lines(previous: str, current: str) -> tuple[list[str], list[str]]:
    """
    Run a line-oriented LCS diff from previous to current.

    A line counts as removed or added only when it lies outside a longest
    common subsequence of the two texts, so lines that survive in order are
    never reported, however far they move relative to inserted blocks.
    Lines are compared with their line endings, so a missing trailing
    newline counts as a change. Lines made only of whitespace are dropped
    from both results.

    Args:
        previous: Older text
        current: Newer text

    Returns:
        (removed_lines, added_lines) without line endings, in text order
    """
    removed, added = _unmatched_lines(
        previous.splitlines(keepends=True),
        current.splitlines(keepends=True),
    )

    def _significant(chunk: list[str]) -> list[str]:
        return [line.rstrip("\r\n") for line in chunk if line.strip()]

    return _significant(removed), _significant(added)


def compare_architecture_markdown(current: str, previous: str) -> str:
    """
    Render a markdown report of documentation changes.

    Args:
        current: Documentation generated for the current tree
        previous: Documentation stored with the reference snapshot

    Returns:
        A fixed sentence when the texts are identical or differ only in
        blank lines, otherwise "## Removed" and "## Added" sections with
        "-" / "+" prefixed lines
    """
    if current == previous:
        return NO_ARCHITECTURE_CHANGES

    removed, added = diff_lines(previous, current)
    if not removed and not added:
        return NO_SIGNIFICANT_CHANGES

    lines = [ARCHITECTURE_TITLE, ""]

    if removed:
        lines.extend([REMOVED_HEADING, ""])
        lines.extend(f"- {line}" for line in removed)
        lines.append("")

    if added:
        lines.extend([ADDED_HEADING, ""])
        lines.extend(f"+ {line}" for line in added)
        lines.append("")

    return "\n".join(lines)


def count_change_sections(architecture_diff: str) -> int:
    """Count "## Added" / "## Removed" heading lines in an architecture report."""
    return sum(
        1
        for line in architecture_diff.splitlines()
        if line in (ADDED_HEADING, REMOVED_HEADING)
    )
