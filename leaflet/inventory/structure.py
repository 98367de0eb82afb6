"""Data models for the project file inventory.

Defines the directory tree, the aggregated file statistics, and the
project metadata snapshot. These models form the shared vocabulary
between the inventory components, the semantic analysis step, and
the documentation renderers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class NodeKind(str, Enum):
    """Kinds of nodes in a directory tree."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class DirectoryNode:
    """A file or directory in the project tree.

    Attributes:
        name: Base name of the file or directory.
        kind: Whether this node is a file or a directory.
        full_path: Absolute path of the node.
        children: Child nodes in first-seen order. None for files,
            a (possibly empty) list for directories.
    """

    name: str
    kind: NodeKind
    full_path: str
    children: Optional[list[DirectoryNode]] = None

    def __post_init__(self) -> None:
        if self.kind == NodeKind.DIRECTORY and self.children is None:
            self.children = []
        elif self.kind == NodeKind.FILE and self.children is not None:
            raise ValueError(f"File node {self.full_path} cannot have children")

    @property
    def is_file(self) -> bool:
        """Whether this node is a file leaf."""
        return self.kind == NodeKind.FILE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Walks the subtree with an explicit stack, so depth is unbounded.

        Returns:
            Dictionary representation of this node and its subtree.
        """
        result = self._node_dict()
        stack = [(self, result)]
        while stack:
            node, data = stack.pop()
            for child in node.children or []:
                child_data = child._node_dict()
                data["children"].append(child_data)
                if child.children is not None:
                    stack.append((child, child_data))
        return result

    def _node_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.kind.value,
            "path": self.full_path,
        }
        if self.children is not None:
            data["children"] = []
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DirectoryNode:
        """Deserialize from a dictionary.

        Args:
            data: Dictionary with node fields.

        Returns:
            A new DirectoryNode with its subtree.
        """
        root = cls._from_node_dict(data)
        stack = [(root, data)]
        while stack:
            node, node_data = stack.pop()
            if node.children is None:
                continue
            for child_data in node_data.get("children") or []:
                child = cls._from_node_dict(child_data)
                node.children.append(child)
                stack.append((child, child_data))
        return root

    @classmethod
    def _from_node_dict(cls, data: dict[str, Any]) -> DirectoryNode:
        kind = NodeKind(data.get("type", "file"))
        return cls(
            name=data["name"],
            kind=kind,
            full_path=data.get("path", ""),
            children=[] if kind == NodeKind.DIRECTORY else None,
        )


@dataclass
class FileStructure:
    """Inventory of a project: its tree plus aggregated statistics.

    ``total_files`` counts every path the matcher yielded, while
    ``total_lines`` and ``language_breakdown`` only reflect files that
    could be read. An undecodable file therefore adds one to
    ``total_files`` and nothing to the line counts.

    Attributes:
        root: Root directory node.
        total_files: Number of files examined.
        total_lines: Sum of line counts of readable files.
        language_breakdown: Lower-cased extension (with leading dot, or
            empty string) mapped to cumulative line count.
    """

    root: DirectoryNode
    total_files: int = 0
    total_lines: int = 0
    language_breakdown: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary representation of this file structure.
        """
        return {
            "root": self.root.to_dict(),
            "totalFiles": self.total_files,
            "totalLines": self.total_lines,
            "languageBreakdown": dict(self.language_breakdown),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileStructure:
        """Deserialize from a dictionary.

        Args:
            data: Dictionary with file structure fields.

        Returns:
            A new FileStructure instance.
        """
        return cls(
            root=DirectoryNode.from_dict(data["root"]),
            total_files=data.get("totalFiles", 0),
            total_lines=data.get("totalLines", 0),
            language_breakdown=dict(data.get("languageBreakdown", {})),
        )


@dataclass
class ProjectMetadata:
    """Read-only snapshot of project-level metadata.

    Attributes:
        created_at: Creation time of the project root directory.
        last_modified: Last modification time of the project root.
        version: Project version, "1.0.0" when no manifest declares one.
        license: License identifier from the manifest, if any.
        repository: Repository URL from the manifest, if any.
        author: Author from the manifest, if any.
        has_git: Whether a .git directory was found at the root.
    """

    created_at: datetime
    last_modified: datetime
    version: str = "1.0.0"
    license: Optional[str] = None
    repository: Optional[str] = None
    author: Optional[str] = None
    has_git: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary representation with ISO-8601 timestamps.
        """
        return {
            "createdAt": self.created_at.isoformat(),
            "lastModified": self.last_modified.isoformat(),
            "version": self.version,
            "license": self.license,
            "repository": self.repository,
            "author": self.author,
            "hasGit": self.has_git,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectMetadata:
        """Deserialize from a dictionary.

        Args:
            data: Dictionary with metadata fields.

        Returns:
            A new ProjectMetadata instance.
        """
        return cls(
            created_at=datetime.fromisoformat(data["createdAt"]),
            last_modified=datetime.fromisoformat(data["lastModified"]),
            version=data.get("version") or "1.0.0",
            license=data.get("license"),
            repository=data.get("repository"),
            author=data.get("author"),
            has_git=data.get("hasGit", False),
        )
