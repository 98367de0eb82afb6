"""Exception hierarchy for the documentation generator.

Fatal errors abort the whole operation and surface to the caller.
Per-file read failures (FileReadError) are recoverable and handled
locally by the inventory components.
"""

from typing import Optional


class LeafletError(Exception):
    """Base class for all application errors."""


class InvalidRootError(LeafletError):
    """The project root is missing or is not a directory."""

    def __init__(self, root: str, reason: str = "does not exist") -> None:
        self.root = root
        self.reason = reason
        super().__init__(f"Invalid project root {root}: {reason}")


class FileReadError(LeafletError):
    """A single file could not be read or decoded as text."""

    def __init__(self, path: str, cause: Optional[Exception] = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read file {path}: {cause}")


class AnalysisError(LeafletError):
    """The project inventory could not be completed."""


class AIServiceError(LeafletError):
    """The semantic analysis call to the LLM failed."""


class AIResponseError(AIServiceError):
    """The LLM response could not be parsed into an analysis."""


class RepoImportError(LeafletError):
    """A repository or local directory could not be imported."""


class AnalysisNotFoundError(LeafletError):
    """No stored analysis exists for the requested id."""

    def __init__(self, analysis_id: str) -> None:
        self.analysis_id = analysis_id
        super().__init__(f"Analysis not found: {analysis_id}")
