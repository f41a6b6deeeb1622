"""Removal of dependency directories from stale projects."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .project import Project


@dataclass
class CleanupResult:
    """Result of a cleanup operation."""

    path: Path
    success: bool
    action: str  # "deleted", "dry-run", "skipped", "error"
    error: str | None = None


def collect_cleanable_dirs(projects: Iterable[Project]) -> list[Path]:
    """Flatten the dependency directories of the given projects.

    Returns:
        Directories sorted by path string.

    """
    dirs: set[Path] = set()
    for project in projects:
        dirs.update(project.dependency_dirs)

    return sorted(dirs, key=str)


class Cleaner:
    """Permanently removes directories. There is no recovery."""

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize the cleaner.

        Args:
            logger: Logger instance.

        """
        self.logger = logger

    def remove_directory(self, path: Path, *, dry_run: bool = False) -> CleanupResult:
        """Recursively delete a directory.

        Args:
            path: Directory to delete.
            dry_run: If True, only report what would be deleted.

        Returns:
            CleanupResult with operation details.

        """
        if not path.is_dir():
            return CleanupResult(
                path=path,
                success=False,
                action="skipped",
                error="Directory no longer exists",
            )

        if dry_run:
            self.logger.info("Would delete: %s", path)
            return CleanupResult(path=path, success=True, action="dry-run")

        try:
            shutil.rmtree(path)
        except PermissionError as e:
            self.logger.error("Permission denied deleting %s: %s", path, e)
            return CleanupResult(
                path=path,
                success=False,
                action="error",
                error=f"Permission denied: {e}",
            )
        except OSError as e:
            self.logger.error("Error deleting %s: %s", path, e)
            return CleanupResult(
                path=path,
                success=False,
                action="error",
                error=str(e),
            )

        self.logger.info("Deleted: %s", path)
        return CleanupResult(path=path, success=True, action="deleted")

    def remove_all(self, paths: Iterable[Path], *, dry_run: bool = False) -> list[CleanupResult]:
        """Delete each directory in turn, continuing past failures."""
        return [self.remove_directory(path, dry_run=dry_run) for path in paths]
