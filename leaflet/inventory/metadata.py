"""Project metadata extraction from manifests and the filesystem.

Reads ``package.json`` (or, for Python projects, the ``[project]``
table of ``pyproject.toml``) for version, license, repository and
author, and stats the project root for its timestamps. Manifest
errors are logged and fall back to defaults; this step never fails
an analysis.
"""

import json
import logging
import os
import tomllib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from leaflet.inventory.structure import ProjectMetadata

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"

_REPOSITORY_URL_KEYS = ("Repository", "repository", "Source", "source", "Homepage", "homepage")


def _as_text(value: Any, *keys: str) -> Optional[str]:
    """Coerce a manifest field that may be a string or a mapping."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        for key in keys:
            if isinstance(value.get(key), str):
                return value[key]
    return None


def _read_package_json(path: Path) -> dict[str, Optional[str]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("package.json is not a JSON object")
    version = data.get("version")
    return {
        "version": version if isinstance(version, str) else None,
        "license": _as_text(data.get("license"), "type"),
        "repository": _as_text(data.get("repository"), "url"),
        "author": _as_text(data.get("author"), "name"),
    }


def _read_pyproject(path: Path) -> dict[str, Optional[str]]:
    with open(path, "rb") as f:
        data = tomllib.load(f)
    project = data.get("project", {})
    if not isinstance(project, dict):
        raise ValueError("[project] is not a table")

    repository = None
    urls = project.get("urls")
    if isinstance(urls, dict):
        repository = _as_text(urls, *_REPOSITORY_URL_KEYS)

    author = None
    authors = project.get("authors")
    if isinstance(authors, list) and authors:
        author = _as_text(authors[0], "name", "email")

    version = project.get("version")
    return {
        "version": version if isinstance(version, str) else None,
        "license": _as_text(project.get("license"), "text"),
        "repository": repository,
        "author": author,
    }


def _read_manifest(root: Path) -> dict[str, Optional[str]]:
    """Read the first manifest found at the root, or return empty fields."""
    readers = (
        (root / "package.json", _read_package_json),
        (root / "pyproject.toml", _read_pyproject),
    )
    for path, reader in readers:
        if not path.is_file():
            continue
        try:
            fields = reader(path)
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", path.name, e)
            return {}
        logger.debug("Read project metadata from %s", path)
        return fields
    return {}


def _root_timestamps(root: Path) -> tuple[datetime, datetime]:
    try:
        stat = root.stat()
    except OSError as e:
        logger.warning("Could not stat %s: %s", root, e)
        now = datetime.now(timezone.utc)
        return now, now
    # st_birthtime is only exposed on some platforms
    created = getattr(stat, "st_birthtime", None) or stat.st_ctime
    return (
        datetime.fromtimestamp(created, tz=timezone.utc),
        datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


def read_project_metadata(root: str) -> ProjectMetadata:
    """Build a metadata snapshot for a project root.

    Args:
        root: Project root directory.

    Returns:
        A ProjectMetadata with version defaulting to "1.0.0" and the
        other manifest fields left unset when absent.
    """
    root_path = Path(os.path.abspath(root))
    fields = _read_manifest(root_path)
    created_at, last_modified = _root_timestamps(root_path)

    return ProjectMetadata(
        created_at=created_at,
        last_modified=last_modified,
        version=fields.get("version") or DEFAULT_VERSION,
        license=fields.get("license"),
        repository=fields.get("repository"),
        author=fields.get("author"),
        has_git=(root_path / ".git").is_dir(),
    )
