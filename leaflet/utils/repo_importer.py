"""Repository import into a temporary working directory.

Clones remote git repositories (shallow, via the git CLI) or copies
local directories into a temp area, so analyses never touch the
caller's original tree. Old imports are pruned by age.
"""

import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional

from leaflet.errors import RepoImportError

logger = logging.getLogger(__name__)

_DEFAULT_TEMP_DIR = Path(__file__).parent.parent.parent / "temp"


def extract_repo_name(repo_url: str) -> str:
    """Extract the repository name from a clone URL.

    Args:
        repo_url: HTTPS, SSH or local git URL.

    Returns:
        The last path segment without ``.git``, or "unknown-repo".
    """
    url = repo_url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    name = url.replace(":", "/").split("/")[-1]
    return name or "unknown-repo"


class RepoImporter:
    """Imports projects into a temp directory for analysis."""

    def __init__(self, temp_dir: Optional[str] = None) -> None:
        """Initialize the importer.

        Args:
            temp_dir: Directory for imported projects. Defaults to temp/
                at the repository root.
        """
        self.temp_dir = Path(temp_dir) if temp_dir else _DEFAULT_TEMP_DIR

    def _target_dir(self, name: str) -> Path:
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return self.temp_dir / f"{name}-{int(time.time() * 1000)}"

    def import_repository(self, repo_url: str, branch: str = "main") -> Path:
        """Shallow-clone a git repository into the temp directory.

        The clone's .git directory is removed afterwards.

        Args:
            repo_url: URL of the repository to clone.
            branch: Branch to check out.

        Returns:
            Path of the cloned working tree.

        Raises:
            RepoImportError: If git is missing or the clone fails.
        """
        target = self._target_dir(extract_repo_name(repo_url))
        logger.info("Cloning repository %s (%s) into %s", repo_url, branch, target)

        try:
            subprocess.run(
                ["git", "clone", "--depth", "1", "--branch", branch, repo_url, str(target)],
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            shutil.rmtree(target, ignore_errors=True)
            raise RepoImportError(
                f"Failed to import repository: {e.stderr.strip() or e}"
            ) from e
        except FileNotFoundError as e:
            raise RepoImportError("Failed to import repository: git not found in PATH") from e

        shutil.rmtree(target / ".git", ignore_errors=True)
        logger.info("Repository imported successfully: %s", target)
        return target

    def import_local_directory(self, dir_path: str) -> Path:
        """Copy a local directory into the temp directory.

        Symlinks are copied as links, not followed.

        Args:
            dir_path: Directory to copy.

        Returns:
            Path of the copy.

        Raises:
            RepoImportError: If the source is missing or the copy fails.
        """
        source = Path(dir_path)
        if not source.is_dir():
            raise RepoImportError(
                f"Failed to import local directory: Directory does not exist: {dir_path}"
            )

        target = self._target_dir(source.resolve().name)
        logger.info("Copying local directory %s into %s", source, target)
        try:
            shutil.copytree(source, target, symlinks=True)
        except (OSError, shutil.Error) as e:
            shutil.rmtree(target, ignore_errors=True)
            raise RepoImportError(f"Failed to import local directory: {e}") from e

        logger.info("Local directory imported successfully: %s", target)
        return target

    def remove(self, path: Path) -> None:
        """Delete one imported project. Failures are logged, never raised."""
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning("Could not remove imported project %s: %s", path, e)
            return
        logger.debug("Removed imported project %s", path)

    def cleanup_temp_files(self, max_age_hours: float = 24) -> list[str]:
        """Remove imported projects older than a maximum age.

        Failures are logged, never raised.

        Args:
            max_age_hours: Age after which an entry is removed.

        Returns:
            Names of the removed entries.
        """
        removed: list[str] = []
        if not self.temp_dir.exists():
            return removed

        cutoff = time.time() - max_age_hours * 3600
        try:
            entries = list(self.temp_dir.iterdir())
        except OSError as e:
            logger.warning("Failed to cleanup temp files: %s", e)
            return removed

        for entry in entries:
            try:
                if entry.stat().st_mtime >= cutoff:
                    continue
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                logger.warning("Could not remove temp entry %s: %s", entry, e)
                continue
            removed.append(entry.name)
            logger.info("Cleaned up old temp entry: %s", entry.name)

        return removed

    def validate_repository(self, repo_url: str) -> bool:
        """Check that a remote repository is reachable.

        Args:
            repo_url: URL of the repository.

        Returns:
            True if ``git ls-remote`` succeeds.
        """
        try:
            subprocess.run(
                ["git", "ls-remote", "--heads", repo_url],
                capture_output=True,
                text=True,
                check=True,
            )
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False
        return True
