"""Line and language statistics over a project's files."""

import logging
import os
from dataclasses import dataclass, field
from typing import Sequence

from leaflet.errors import FileReadError
from leaflet.inventory.reading import read_text

logger = logging.getLogger(__name__)


@dataclass
class FileStats:
    """Aggregated statistics for a list of files.

    Attributes:
        total_files: Number of paths examined, readable or not.
        total_lines: Sum of line counts of the readable files.
        language_breakdown: Extension key mapped to cumulative lines.
        skipped: Paths that could not be read.
    """

    total_files: int = 0
    total_lines: int = 0
    language_breakdown: dict[str, int] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)


def count_lines(content: str) -> int:
    """Count newline-delimited segments; an empty file has one line."""
    return content.count("\n") + 1


def extension_key(path: str) -> str:
    """Return the lower-cased extension with its dot, or "" if none.

    A trailing dot counts as an extension (``"notes."`` gives ``"."``),
    and a leading dot does not (``".gitignore"`` gives ``""``).
    """
    return os.path.splitext(os.path.basename(path))[1].lower()


def aggregate_stats(files: Sequence[str]) -> FileStats:
    """Tally lines per extension over a list of files.

    Files are accumulated in the given order. A file that cannot be
    read is logged and skipped for the line counts but still counted
    in ``total_files``, which is defined as the number of paths
    examined.

    Args:
        files: File paths in matcher order.

    Returns:
        The aggregated FileStats.
    """
    stats = FileStats(total_files=len(files))

    for path in files:
        try:
            content = read_text(path)
        except FileReadError as e:
            logger.warning("Could not analyze file %s: %s", path, e.cause)
            stats.skipped.append(path)
            continue

        lines = count_lines(content)
        key = extension_key(path)
        stats.total_lines += lines
        stats.language_breakdown[key] = stats.language_breakdown.get(key, 0) + lines

    logger.debug(
        "Aggregated %d files, %d lines (%d unreadable)",
        stats.total_files,
        stats.total_lines,
        len(stats.skipped),
    )
    return stats
