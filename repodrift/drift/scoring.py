"""
Drift score heuristic.

The score is additive and clamped to [0, 100]:

    documentation sections  min(60, sections * 15)
    added files             min(20, added * 2)
    removed files           min(15, removed * 3)
    modified files          min(5, modified * 1)

Documentation change dominates. A removed file weighs more than an added
one, and size-based modifications weigh least.
"""

from repodrift.drift.reports import count_change_sections
from repodrift.models import FileChangeSet

DOC_SECTION_POINTS = 15
DOC_MAX = 60
ADDED_POINTS = 2
ADDED_MAX = 20
REMOVED_POINTS = 3
REMOVED_MAX = 15
MODIFIED_POINTS = 1
MODIFIED_MAX = 5
SCORE_MAX = 100


def score_components(changes: FileChangeSet, architecture_diff: str) -> dict[str, int]:
    """
    Break the drift score down into its four capped components.

    Args:
        changes: Classified file changes
        architecture_diff: Rendered documentation report

    Returns:
        Mapping of component name to points
    """
    sections = count_change_sections(architecture_diff)
    return {
        "documentation": min(DOC_MAX, sections * DOC_SECTION_POINTS),
        "added": min(ADDED_MAX, len(changes.added) * ADDED_POINTS),
        "removed": min(REMOVED_MAX, len(changes.removed) * REMOVED_POINTS),
        "modified": min(MODIFIED_MAX, len(changes.modified) * MODIFIED_POINTS),
    }


def calculate_drift_score(changes: FileChangeSet, architecture_diff: str) -> int:
    """
    Calculate the drift score for one comparison.

    Args:
        changes: Classified file changes
        architecture_diff: Rendered documentation report

    Returns:
        Integer in [0, 100]; higher means more drift

    Example:
        >>> calculate_drift_score(FileChangeSet(added=("a", "b")), "")
        4
    """
    total = sum(score_components(changes, architecture_diff).values())
    return min(SCORE_MAX, round(total))
