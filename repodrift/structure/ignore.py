"""
Ignore Policy for repository listings

Decides which listing entries never make it into a snapshot tree. The
policy is a fixed set of gitignore-style patterns compiled with pathspec.
Matching is case-sensitive and is applied to every ancestor prefix of a
path, so anything beneath an ignored directory is ignored as well.
"""

from typing import Iterable, Optional

from pathspec import PathSpec

DOT_ENTRIES = [
    ".*",
]

DEPENDENCY_DIRS = [
    "node_modules/",
    "bower_components/",
    "jspm_packages/",
    "venv/",
]

VCS_DIRS = [
    ".git/",
    ".hg/",
    ".svn/",
]

OS_METADATA = [
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
]

BUILD_DIRS = [
    "dist/",
    "build/",
    "out/",
    ".next/",
    ".turbo/",
    ".vercel/",
]

COVERAGE_DIRS = [
    "coverage/",
    "htmlcov/",
    ".nyc_output/",
]

CACHE_DIRS = [
    ".cache/",
    "__pycache__/",
    ".pytest_cache/",
    ".mypy_cache/",
]

LOG_AND_TEMP = [
    "*.log",
    "*.tmp",
    "*.temp",
    "*.swp",
    "*~",
]

LOCK_FILES = [
    "package-lock.json",
    "pnpm-lock.yaml",
    "yarn.lock",
    "poetry.lock",
    "Pipfile.lock",
    "Cargo.lock",
    "composer.lock",
    "Gemfile.lock",
]

ENV_FILES = [
    ".env",
    ".env.*",
]

BINARY_EXTENSIONS = [
    # images
    "*.ico",
    "*.png",
    "*.jpg",
    "*.jpeg",
    "*.gif",
    "*.svg",
    "*.webp",
    "*.bmp",
    # fonts
    "*.woff",
    "*.woff2",
    "*.ttf",
    "*.eot",
    "*.otf",
    # archives and compiled artifacts
    "*.pdf",
    "*.zip",
    "*.tar",
    "*.gz",
    "*.exe",
    "*.dll",
    "*.so",
    "*.dylib",
    "*.bin",
    "*.pyc",
    "*.class",
    "*.jar",
]

DEFAULT_PATTERNS: tuple[str, ...] = tuple(
    DOT_ENTRIES
    + DEPENDENCY_DIRS
    + VCS_DIRS
    + OS_METADATA
    + BUILD_DIRS
    + COVERAGE_DIRS
    + CACHE_DIRS
    + LOG_AND_TEMP
    + LOCK_FILES
    + ENV_FILES
    + BINARY_EXTENSIONS
)


class IgnorePolicy:
    """
    Evaluates repository paths against the fixed ignore pattern set.

    Extra patterns may be appended; they can only widen what is ignored.

    Usage:
        policy = IgnorePolicy()
        policy.is_ignored("node_modules/x/index.js")  # True
        policy.is_ignored("src/index.ts")             # False
    """

    def __init__(self, extra_patterns: Optional[Iterable[str]] = None) -> None:
        extra = [
            line.strip()
            for line in extra_patterns or ()
            if line.strip() and not line.lstrip().startswith(("#", "!"))
        ]
        self._patterns = DEFAULT_PATTERNS + tuple(extra)
        self._spec = PathSpec.from_lines("gitwildmatch", self._patterns)

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    def is_ignored(self, path: str, is_dir: bool = False) -> bool:
        """
        Check whether a path (or any of its ancestor directories) is ignored.

        Args:
            path: Slash-separated path relative to the repository root
            is_dir: True if the path itself names a directory

        Returns:
            True if the entry must be excluded from the tree
        """
        parts = path.split("/")
        for idx in range(1, len(parts)):
            if self._spec.match_file("/".join(parts[:idx]) + "/"):
                return True

        if self._spec.match_file(path):
            return True
        return is_dir and self._spec.match_file(path + "/")


DEFAULT_POLICY = IgnorePolicy()


def should_skip(path: str, is_dir: bool = False) -> bool:
    """Module-level shortcut against the default policy."""
    return DEFAULT_POLICY.is_ignored(path, is_dir=is_dir)
