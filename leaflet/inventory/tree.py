"""Directory tree construction and rendering.

Builds a hierarchical DirectoryNode tree from the flat file list
produced by the PathMatcher, and renders it as a text listing. All
walks use an explicit stack so deeply nested repositories cannot
exhaust the interpreter's recursion limit.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from leaflet.inventory.structure import DirectoryNode, NodeKind

logger = logging.getLogger(__name__)


def build_directory_tree(files: Iterable[str], root: str) -> DirectoryNode:
    """Build a directory tree from absolute file paths.

    Intermediate directories are created on first encounter and every
    new node is appended to its parent, so children keep the order in
    which their first path appeared in ``files``. Nodes are indexed by
    absolute path for the duration of this call only; a path seen twice
    reuses its existing node.

    Args:
        files: Absolute paths of files below ``root``.
        root: Project root directory.

    Returns:
        The root directory node, named after the root's basename.

    Raises:
        ValueError: If a path lies outside ``root`` or a file path is
            also used as a directory.
    """
    root_path = Path(os.path.abspath(root))
    root_node = DirectoryNode(
        name=root_path.name, kind=NodeKind.DIRECTORY, full_path=str(root_path)
    )
    index: dict[str, DirectoryNode] = {str(root_path): root_node}

    for file_path in files:
        relative = Path(os.path.relpath(os.path.abspath(file_path), root_path))
        parts = relative.parts
        if not parts or parts == (".",):
            continue
        if parts[0] == os.pardir:
            raise ValueError(f"{file_path} is not under {root_path}")

        parent = root_node
        current = root_path
        for position, part in enumerate(parts):
            current = current / part
            key = str(current)
            node = index.get(key)
            if node is None:
                if parent.children is None:
                    raise ValueError(f"{parent.full_path} is both a file and a directory")
                is_leaf = position == len(parts) - 1
                node = DirectoryNode(
                    name=part,
                    kind=NodeKind.FILE if is_leaf else NodeKind.DIRECTORY,
                    full_path=key,
                )
                index[key] = node
                parent.children.append(node)
            parent = node

    logger.debug("Built tree with %d nodes under %s", len(index), root_path)
    return root_node


def iter_nodes(root: DirectoryNode) -> Iterator[DirectoryNode]:
    """Yield every node of a tree in depth-first pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))


def count_files(root: DirectoryNode) -> int:
    """Count the file leaves of a tree."""
    return sum(1 for node in iter_nodes(root) if node.is_file)


def format_directory_tree(root: DirectoryNode, indent_unit: str = "  ") -> str:
    """Render a tree as an indented text listing.

    Args:
        root: Root node of the tree to render.
        indent_unit: Indentation added per depth level.

    Returns:
        One line per node, directories suffixed with a slash.
    """
    lines: list[str] = []
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        indent = indent_unit * depth
        if node.kind == NodeKind.DIRECTORY:
            lines.append(f"{indent}📁 {node.name}/")
            for child in reversed(node.children or []):
                stack.append((child, depth + 1))
        else:
            lines.append(f"{indent}📄 {node.name}")
    return "".join(f"{line}\n" for line in lines)
