"""Bounded source sampling for LLM context.

Concatenates code files in matcher order, each preceded by a header
comment naming its root-relative path, until a character budget is
spent. The file that crosses the budget is truncated and marked
"(partial)", and no further files are read.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from leaflet.errors import FileReadError
from leaflet.inventory.reading import read_text
from leaflet.inventory.stats import extension_key

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_BUDGET = 50_000

CODE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".js",
        ".ts",
        ".jsx",
        ".tsx",
        ".py",
        ".java",
        ".cpp",
        ".c",
        ".cs",
        ".go",
        ".rs",
        ".php",
        ".rb",
        ".swift",
        ".kt",
        ".scala",
    }
)


def filter_code_files(files: Iterable[str]) -> list[str]:
    """Keep only paths with a source-code extension, preserving order."""
    return [path for path in files if extension_key(path) in CODE_EXTENSIONS]


class SourceSampler:
    """Builds a size-bounded text sample of a project's code files.

    The budget counts content characters only; headers are not charged
    against it.
    """

    def __init__(self, root: str, max_size: int = DEFAULT_SAMPLE_BUDGET) -> None:
        """Initialize the sampler.

        Args:
            root: Project root, used to compute header paths.
            max_size: Maximum number of content characters to include.

        Raises:
            ValueError: If ``max_size`` is negative.
        """
        if max_size < 0:
            raise ValueError(f"Sample budget must be >= 0, got {max_size}")
        self.root = Path(os.path.abspath(root))
        self.max_size = max_size

    def sample(self, files: Iterable[str]) -> str:
        """Concatenate code files up to the budget.

        Args:
            files: File paths in matcher order. Non-code files are
                filtered out.

        Returns:
            The concatenated sample, empty when the budget is 0.
        """
        parts: list[str] = []
        total = 0

        for path in filter_code_files(files):
            if total >= self.max_size:
                break

            try:
                content = read_text(path)
            except FileReadError as e:
                logger.warning("Could not read file %s: %s", path, e.cause)
                continue

            relative = self._relative(path)
            if total + len(content) <= self.max_size:
                parts.append(f"\n// File: {relative}\n")
                parts.append(content)
                total += len(content)
            else:
                remaining = self.max_size - total
                parts.append(f"\n// File: {relative} (partial)\n")
                parts.append(content[:remaining])
                logger.debug("Sample budget reached at %s", relative)
                break

        return "".join(parts)

    def _relative(self, path: str) -> str:
        return Path(os.path.relpath(os.path.abspath(path), self.root)).as_posix()
