"""Ignore-pattern evaluation and file enumeration over a project root.

Patterns are globs matched against the root-relative path using
gitignore syntax via pathspec, with every pattern anchored at the
project root: ``*.log`` ignores ``app.log`` but keeps ``logs/app.log``,
and ``node_modules/**`` only prunes the top-level ``node_modules``.
Use ``**/*.log`` to match at any depth.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

import pathspec

from leaflet.errors import InvalidRootError

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "node_modules/**",
    "dist/**",
    "build/**",
    ".git/**",
    "*.log",
    "*.lock",
)


def anchor_pattern(pattern: str) -> str:
    """Anchor a glob at the root so it matches the whole relative path.

    gitignore lets a pattern without an inner slash match at any depth;
    a leading slash restricts it to the root like any other glob.
    """
    negated = pattern.startswith("!")
    body = pattern[1:] if negated else pattern
    if body and not body.startswith(("#", "/")) and "/" not in body.rstrip("/"):
        body = "/" + body
    return ("!" if negated else "") + body


def validate_root(root: str) -> Path:
    """Check that a project root exists and is a directory.

    Args:
        root: Path to the project root.

    Returns:
        The absolute root path.

    Raises:
        InvalidRootError: If the path is missing or not a directory.
    """
    path = Path(os.path.abspath(root))
    if not path.exists():
        raise InvalidRootError(str(path), "does not exist")
    if not path.is_dir():
        raise InvalidRootError(str(path), "is not a directory")
    return path


class PathMatcher:
    """Enumerates the non-ignored regular files below a project root.

    Symlinks and directories that cannot be listed are skipped; each
    skip is logged and recorded in ``warnings``.
    """

    def __init__(
        self, root: str, ignore_patterns: Optional[Iterable[str]] = None
    ) -> None:
        """Initialize the matcher.

        Args:
            root: Project root directory.
            ignore_patterns: Extra glob patterns appended to the defaults.
        """
        self.root = Path(os.path.abspath(root))
        self.ignore_patterns = [*DEFAULT_IGNORE_PATTERNS, *(ignore_patterns or [])]
        self._spec = pathspec.GitIgnoreSpec.from_lines(
            anchor_pattern(p) for p in self.ignore_patterns
        )
        self.warnings: list[str] = []

    def is_ignored(self, relative_path: str) -> bool:
        """Check a root-relative POSIX path against the ignore patterns.

        Args:
            relative_path: Path relative to the project root. A trailing
                slash marks a directory.

        Returns:
            True if any ignore pattern matches.
        """
        return self._spec.match_file(relative_path)

    def list_files(self) -> list[str]:
        """Enumerate every non-ignored regular file under the root.

        Directories are visited top-down with entries sorted by name,
        so each directory's files precede its subdirectories.

        Returns:
            Absolute file paths, each non-ignored file exactly once.

        Raises:
            InvalidRootError: If the root is missing or not a directory.
        """
        root = validate_root(str(self.root))
        self.warnings = []
        files: list[str] = []

        for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            current = Path(dirpath)

            kept = []
            for name in sorted(dirnames):
                path = current / name
                if self.is_ignored(path.relative_to(root).as_posix() + "/"):
                    continue
                if path.is_symlink():
                    self._warn("Skipping symlinked directory %s", path)
                    continue
                kept.append(name)
            # os.walk only descends into the names left in dirnames
            dirnames[:] = kept

            for name in sorted(filenames):
                path = current / name
                if self.is_ignored(path.relative_to(root).as_posix()):
                    continue
                if path.is_symlink():
                    self._warn("Skipping symlink %s", path)
                    continue
                if not path.is_file():
                    continue
                files.append(str(path))

        logger.debug("Matched %d files under %s", len(files), root)
        return files

    def _on_walk_error(self, error: OSError) -> None:
        self._warn("Skipping unreadable directory %s: %s", error.filename, error.strerror)

    def _warn(self, message: str, *args: object) -> None:
        logger.warning(message, *args)
        self.warnings.append(message % args)
