"""Data models for semantic project analysis and documentation output.

A ProjectAnalysis combines the file inventory with the fields the LLM
infers (name, description, technologies, dependencies, documentation
sections). Serialization uses the camelCase keys of the stored
``analysis.json`` format.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from leaflet.inventory.structure import FileStructure, ProjectMetadata

logger = logging.getLogger(__name__)

DEPENDENCY_TYPES = ("production", "development", "peer")
SECTION_TYPES = ("readme", "api", "setup", "contributing", "inline")


@dataclass
class Dependency:
    """A project dependency reported by the semantic analysis.

    Attributes:
        name: Package name.
        version: Version string or constraint.
        type: One of production, development or peer.
        description: What the dependency is used for.
    """

    name: str
    version: str = ""
    type: str = "production"
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary."""
        return {
            "name": self.name,
            "version": self.version,
            "type": self.type,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dependency:
        """Deserialize from a dictionary.

        Unknown dependency types are normalized to "production".

        Raises:
            KeyError: If the name is missing.
        """
        dep_type = data.get("type", "production")
        return cls(
            name=str(data["name"]),
            version=str(data.get("version") or ""),
            type=dep_type if dep_type in DEPENDENCY_TYPES else "production",
            description=data.get("description"),
        )


@dataclass
class DocumentationSection:
    """A documentation section proposed by the semantic analysis.

    Attributes:
        type: Section kind (readme, api, setup, contributing, inline).
        title: Section title.
        content: Section body text.
        priority: Importance from 1 (highest) to 5.
        files: Files the section refers to.
    """

    type: str
    title: str
    content: str = ""
    priority: int = 3
    files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary."""
        return {
            "type": self.type,
            "title": self.title,
            "content": self.content,
            "priority": self.priority,
            "files": self.files,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentationSection:
        """Deserialize from a dictionary.

        Raises:
            KeyError: If type or title is missing.
            ValueError: If the type or priority is invalid.
        """
        section_type = data["type"]
        if section_type not in SECTION_TYPES:
            raise ValueError(f"Unknown section type: {section_type}")
        return cls(
            type=section_type,
            title=str(data["title"]),
            content=str(data.get("content") or ""),
            priority=int(data.get("priority", 3)),
            files=list(data.get("files") or []),
        )


@dataclass
class ProjectAnalysis:
    """Complete analysis of a project.

    Attributes:
        project_name: Project name.
        description: What the project does.
        technology: Technologies and frameworks used.
        structure: File inventory of the project.
        dependencies: Project dependencies.
        entry_points: Main entry points of the application.
        documentation: Proposed documentation sections.
        metadata: Project metadata snapshot.
    """

    project_name: str
    description: str
    structure: FileStructure
    metadata: ProjectMetadata
    technology: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    entry_points: list[str] = field(default_factory=list)
    documentation: list[DocumentationSection] = field(default_factory=list)

    def sections(self, section_type: str) -> list[DocumentationSection]:
        """Return the documentation sections of one type, in order."""
        return [s for s in self.documentation if s.type == section_type]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary in the stored analysis.json format.
        """
        return {
            "projectName": self.project_name,
            "description": self.description,
            "technology": self.technology,
            "structure": self.structure.to_dict(),
            "dependencies": [d.to_dict() for d in self.dependencies],
            "entryPoints": self.entry_points,
            "documentation": [s.to_dict() for s in self.documentation],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectAnalysis:
        """Deserialize from a dictionary in the analysis.json format."""
        return cls(
            project_name=data["projectName"],
            description=data.get("description", ""),
            structure=FileStructure.from_dict(data["structure"]),
            metadata=ProjectMetadata.from_dict(data["metadata"]),
            technology=list(data.get("technology", [])),
            dependencies=[Dependency.from_dict(d) for d in data.get("dependencies", [])],
            entry_points=list(data.get("entryPoints", [])),
            documentation=[
                DocumentationSection.from_dict(s) for s in data.get("documentation", [])
            ],
        )


@dataclass
class AnalysisResult:
    """Outcome of a documentation generation run.

    Attributes:
        success: Whether the analysis completed.
        data: The analysis, when successful.
        error: Error message, when failed.
        processing_time: Elapsed wall time in milliseconds.
    """

    success: bool
    processing_time: int = 0
    data: Optional[ProjectAnalysis] = None
    error: Optional[str] = None


@dataclass
class DocumentationOptions:
    """Options controlling generated documentation.

    Attributes:
        output_format: json, markdown or html.
        template: Template set name.
        include_inline: Ask for inline code comment guidance.
        include_api_docs: Generate API documentation.
        include_setup_guide: Generate a setup guide.
        tone: technical, friendly or formal.
        verbosity: minimal, standard or detailed.
    """

    output_format: str = "json"
    template: str = "default"
    include_inline: bool = False
    include_api_docs: bool = False
    include_setup_guide: bool = False
    tone: str = "friendly"
    verbosity: str = "standard"


def parse_dependencies(items: Any) -> list[Dependency]:
    """Convert raw LLM dependency entries, dropping malformed ones."""
    dependencies = []
    for item in items if isinstance(items, list) else []:
        try:
            dependencies.append(Dependency.from_dict(item))
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("Dropping malformed dependency entry %r: %s", item, e)
    return dependencies


def parse_sections(items: Any) -> list[DocumentationSection]:
    """Convert raw LLM documentation entries, dropping malformed ones."""
    sections = []
    for item in items if isinstance(items, list) else []:
        try:
            sections.append(DocumentationSection.from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Dropping malformed documentation entry %r: %s", item, e)
    return sections
