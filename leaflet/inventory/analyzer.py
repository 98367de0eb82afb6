"""File inventory facade for a single project.

Combines the path matcher, tree builder, statistics aggregator, source
sampler and metadata reader into the two operations consumed by the
documentation pipeline: the project inventory and the source sample.
"""

import logging
import os
import time
from typing import Iterable, Optional

from leaflet.errors import AnalysisError, InvalidRootError
from leaflet.inventory.matcher import PathMatcher
from leaflet.inventory.metadata import read_project_metadata
from leaflet.inventory.sampler import DEFAULT_SAMPLE_BUDGET, SourceSampler
from leaflet.inventory.stats import aggregate_stats
from leaflet.inventory.structure import FileStructure, ProjectMetadata
from leaflet.inventory.tree import build_directory_tree

logger = logging.getLogger(__name__)


class FileAnalyzer:
    """Inventories the files of one project root.

    Every call enumerates the filesystem afresh and builds its results
    from scratch, so one analyzer holds no state between analyses.
    """

    def __init__(
        self, project_path: str, ignore_patterns: Optional[Iterable[str]] = None
    ) -> None:
        """Initialize the analyzer.

        Args:
            project_path: Root directory of the project.
            ignore_patterns: Extra ignore globs added to the defaults.
        """
        self.project_path = os.path.abspath(project_path)
        self.matcher = PathMatcher(self.project_path, ignore_patterns)

    @property
    def warnings(self) -> list[str]:
        """Traversal warnings recorded by the most recent enumeration."""
        return list(self.matcher.warnings)

    def list_files(self) -> list[str]:
        """Enumerate the project's non-ignored files.

        Raises:
            InvalidRootError: If the root is missing or not a directory.
        """
        return self.matcher.list_files()

    def analyze_project(self) -> tuple[FileStructure, ProjectMetadata]:
        """Build the file structure and metadata for the project.

        Either the whole inventory succeeds or an exception is raised
        before any result is returned.

        Returns:
            The FileStructure and the ProjectMetadata snapshot.

        Raises:
            InvalidRootError: If the root is missing or not a directory.
            AnalysisError: If the traversal fails unexpectedly.
        """
        start = time.monotonic()
        try:
            files = self.list_files()
            root = build_directory_tree(files, self.project_path)
            stats = aggregate_stats(files)
            metadata = read_project_metadata(self.project_path)
        except InvalidRootError:
            raise
        except (OSError, ValueError) as e:
            raise AnalysisError(f"Failed to analyze project: {e}") from e

        structure = FileStructure(
            root=root,
            total_files=stats.total_files,
            total_lines=stats.total_lines,
            language_breakdown=stats.language_breakdown,
        )
        logger.info(
            "Analyzed %s: %d files, %d lines in %.2fs",
            self.project_path,
            structure.total_files,
            structure.total_lines,
            time.monotonic() - start,
        )
        return structure, metadata

    def get_source_code_sample(self, max_size: int = DEFAULT_SAMPLE_BUDGET) -> str:
        """Build a bounded sample of the project's code files.

        Args:
            max_size: Character budget for file contents.

        Returns:
            The concatenated source sample.
        """
        sampler = SourceSampler(self.project_path, max_size=max_size)
        sample = sampler.sample(self.list_files())
        logger.info("Extracted source sample of %d characters", len(sample))
        return sample
