"""Discover cleanable projects below a set of root paths."""

from __future__ import annotations

import os
import re
import threading
from pathlib import Path
from typing import Iterable

from .classifier import classify
from .errors import RootPathError
from .ignore import is_ignored
from .project import Project
from .reporter import Reporter
from .work_queue import RETRY_SLEEP_MS, WorkQueue, default_worker_count


class ProjectDiscoverer:
    """Walks directory trees in parallel and collects project roots.

    A directory classified as a project is never descended into, so projects
    nested inside dependency directories are not reported.

    Symlinked directories are skipped unless ``follow_symlinks`` is set. When
    following them, every directory is resolved to its canonical path and
    traversed at most once, which breaks symlink cycles.
    """

    def __init__(
        self,
        reporter: Reporter,
        *,
        ignore: re.Pattern[str] | None = None,
        follow_symlinks: bool = False,
        workers: int | None = None,
        retry_sleep: float = RETRY_SLEEP_MS / 1000,
    ) -> None:
        """Initialize the discoverer.

        Args:
            reporter: Receives progress events.
            ignore: Paths matching this pattern are skipped entirely.
            follow_symlinks: Whether to traverse symlinked directories.
            workers: Worker thread count. Defaults to a multiple of the CPU count.
            retry_sleep: Seconds idle workers wait between queue checks.

        """
        self.reporter = reporter
        self.ignore = ignore
        self.follow_symlinks = follow_symlinks
        self.workers = workers or default_worker_count()
        self.retry_sleep = retry_sleep
        self.directories_searched = 0

        self._lock = threading.Lock()
        self._discovered: set[Project] = set()
        self._visited: set[Path] = set()

    @staticmethod
    def canonicalize(path: Path) -> Path:
        """Resolve a root path to its absolute canonical form.

        Raises:
            RootPathError: If the path does not exist or cannot be resolved.

        """
        try:
            return Path(path).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise RootPathError(f"Cannot use path {path}: {e}") from e

    def _mark_visited(self, path: Path) -> bool:
        """Record a directory as visited.

        Returns:
            False if the directory (by canonical path) was already visited.

        """
        if not self.follow_symlinks:
            return True

        try:
            canonical = path.resolve(strict=True)
        except (OSError, RuntimeError):
            return False

        with self._lock:
            if canonical in self._visited:
                return False
            self._visited.add(canonical)
            return True

    def _add_project(self, project: Project) -> None:
        with self._lock:
            self._discovered.add(project)

    def _subdirectories(self, path: Path) -> list[Path]:
        """List non-ignored subdirectories of a directory.

        Raises:
            OSError: If the directory cannot be read.

        """
        subdirs: list[Path] = []

        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    if not entry.is_dir(follow_symlinks=self.follow_symlinks):
                        continue
                except OSError:
                    continue

                child = Path(entry.path)
                if not is_ignored(self.ignore, child):
                    subdirs.append(child)

        return subdirs

    def _discover_in_directory(self, path: Path, queue: WorkQueue[Path]) -> None:
        """Classify each subdirectory of ``path``, queueing the non-projects."""
        if not path.is_dir():
            return

        try:
            subdirs = self._subdirectories(path)
        except OSError as e:
            self.reporter.discover_searching_error(path, e)
            return

        for subdir in subdirs:
            if not self._mark_visited(subdir):
                continue

            if project := classify(subdir):
                self._add_project(project)
            else:
                queue.push(subdir)

    def _handle_path(self, path: Path, queue: WorkQueue[Path]) -> None:
        self.reporter.discover_searching_path(path)
        with self._lock:
            self.directories_searched += 1

        self._discover_in_directory(path, queue)

    def discover(self, roots: Iterable[Path]) -> set[Project]:
        """Find all projects below the given roots.

        Args:
            roots: Directories to search. A root that is itself a project is
                returned without being searched.

        Returns:
            Set of discovered projects (empty if none were found).

        Raises:
            RootPathError: If a root does not exist.
            OverrideFileError: If a project's override file is invalid.

        """
        canonical_roots = [self.canonicalize(root) for root in roots]

        self._discovered = set()
        self._visited = set()
        self.directories_searched = len(canonical_roots)

        queue: WorkQueue[Path] = WorkQueue(retry_sleep=self.retry_sleep)

        # Classify the roots and their first level of subdirectories up front.
        # If everything is found at this level the worker pool is skipped.
        for root in canonical_roots:
            if not self._mark_visited(root):
                continue

            if project := classify(root):
                self._add_project(project)
            else:
                self._discover_in_directory(root, queue)

        if len(queue):
            queue.drain(
                self.workers,
                lambda path: self._handle_path(path, queue),
                self.reporter.discover_searching_retry,
            )

        self.reporter.discover_searching_done(self.directories_searched, len(self._discovered))
        return set(self._discovered)
