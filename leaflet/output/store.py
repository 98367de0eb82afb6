"""Directory-based storage for completed analyses.

Each analysis lives in its own directory under the output root, named
by a millisecond timestamp id, and always contains ``analysis.json``.
Markdown and HTML runs also keep the generated document next to it,
and a ``templates/`` subdirectory when scaffolds were requested.
"""

import json
import logging
import re
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from leaflet.errors import AnalysisNotFoundError

logger = logging.getLogger(__name__)

ANALYSIS_FILE = "analysis.json"

_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def download_url(analysis_id: str) -> str:
    """Return the API download path for an analysis id."""
    return f"/api/download/{analysis_id}"


class AnalysisStore:
    """Creates, lists, loads and deletes stored analyses."""

    def __init__(self, output_dir: str = "output") -> None:
        """Initialize the store.

        Args:
            output_dir: Root directory holding one directory per analysis.
        """
        self.output_dir = Path(output_dir)

    def create(self) -> tuple[str, Path]:
        """Allocate a new, empty analysis directory.

        Returns:
            The new analysis id and its directory.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stamp = int(time.time() * 1000)
        while True:
            path = self.output_dir / str(stamp)
            try:
                path.mkdir()
            except FileExistsError:
                stamp += 1
                continue
            logger.debug("Created analysis directory %s", path)
            return str(stamp), path

    def path_for(self, analysis_id: str) -> Path:
        """Return the directory of an analysis id.

        Raises:
            AnalysisNotFoundError: If the id is not a plain path component.
        """
        if not _ID_PATTERN.fullmatch(analysis_id):
            raise AnalysisNotFoundError(analysis_id)
        return self.output_dir / analysis_id

    def save(self, analysis_id: str, analysis: dict[str, Any]) -> Path:
        """Write the analysis JSON of an existing analysis directory."""
        path = self.path_for(analysis_id) / ANALYSIS_FILE
        path.write_text(json.dumps(analysis, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        return path

    def load(self, analysis_id: str) -> dict[str, Any]:
        """Load a stored analysis.

        Args:
            analysis_id: Id returned by ``create``.

        Returns:
            The parsed analysis.json content.

        Raises:
            AnalysisNotFoundError: If the analysis or its JSON is missing.
        """
        path = self.path_for(analysis_id) / ANALYSIS_FILE
        if not path.is_file():
            raise AnalysisNotFoundError(analysis_id)
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def delete(self, analysis_id: str) -> None:
        """Remove a stored analysis directory.

        Raises:
            AnalysisNotFoundError: If no such analysis exists.
        """
        path = self.path_for(analysis_id)
        if not path.is_dir():
            raise AnalysisNotFoundError(analysis_id)
        shutil.rmtree(path)
        logger.info("Deleted analysis %s", analysis_id)

    def history(self) -> list[dict[str, Any]]:
        """List stored analyses, newest first.

        Directories without a readable analysis.json are skipped with
        a warning.

        Returns:
            Summary entries with id, projectName, description,
            technologies, createdAt and downloadUrl.
        """
        if not self.output_dir.is_dir():
            return []

        entries = []
        for path in self.output_dir.iterdir():
            if not path.is_dir() or not _ID_PATTERN.fullmatch(path.name):
                continue
            analysis_file = path / ANALYSIS_FILE
            if not analysis_file.is_file():
                continue
            try:
                with open(analysis_file, encoding="utf-8") as f:
                    analysis = json.load(f)
                stat = path.stat()
            except (OSError, ValueError) as e:
                logger.warning("Could not read analysis for %s: %s", path.name, e)
                continue

            created = getattr(stat, "st_birthtime", None) or stat.st_ctime
            entries.append(
                {
                    "id": path.name,
                    "projectName": analysis.get("projectName"),
                    "description": analysis.get("description"),
                    "technologies": analysis.get("technology", []),
                    "createdAt": datetime.fromtimestamp(created, tz=timezone.utc).isoformat(),
                    "downloadUrl": download_url(path.name),
                }
            )

        entries.sort(key=lambda e: (e["createdAt"], e["id"]), reverse=True)
        return entries
