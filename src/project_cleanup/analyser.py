"""Determine how recently projects were modified.

A project's age is the time since its most recently modified file, ignoring
its dependency directories and editor/VCS metadata. Projects older than the
staleness threshold are candidates for cleanup.
"""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .project import Project
from .reporter import Reporter
from .work_queue import RETRY_SLEEP_MS, WorkQueue, default_worker_count

# 30 days
STALE_AFTER_SECONDS = 2_592_000

ALWAYS_IGNORE_DIRS: frozenset[str] = frozenset({".idea", ".vscode", ".git"})


def _first_visit(path: Path, visited: set[Path], lock: threading.Lock) -> bool:
    """Record a directory by canonical path; False if it was seen before."""
    try:
        canonical = path.resolve(strict=True)
    except (OSError, RuntimeError):
        return False

    with lock:
        if canonical in visited:
            return False
        visited.add(canonical)
        return True


@dataclass
class AnalysisResult:
    """Projects split by staleness, with each project's age in seconds."""

    stale: set[Project] = field(default_factory=set)
    recent: set[Project] = field(default_factory=set)
    ages: dict[Path, int] = field(default_factory=dict)


class ModifiedTimeAnalyser:
    """Computes project ages with a worker pool per project."""

    def __init__(
        self,
        reporter: Reporter,
        *,
        stale_after: int = STALE_AFTER_SECONDS,
        follow_symlinks: bool = False,
        workers: int | None = None,
        project_workers: int | None = None,
        retry_sleep: float = RETRY_SLEEP_MS / 1000,
    ) -> None:
        """Initialize the analyser.

        Args:
            reporter: Receives progress events.
            stale_after: Age in seconds above which a project is stale.
            follow_symlinks: Whether to descend into symlinked directories.
            workers: Worker threads walking a single project's tree.
            project_workers: Number of projects analysed concurrently.
            retry_sleep: Seconds idle workers wait between queue checks.

        """
        self.reporter = reporter
        self.stale_after = stale_after
        self.follow_symlinks = follow_symlinks
        self.workers = workers or default_worker_count()
        self.project_workers = project_workers or default_worker_count(multiplier=1, minimum=2)
        self.retry_sleep = retry_sleep

    def _scan_directory(self, project: Project, path: Path, queue: WorkQueue[Path]) -> int | None:
        """Find the newest file directly inside ``path`` and queue its subdirectories.

        Returns:
            Seconds since the newest file was modified, or None if the
            directory holds no readable files.

        """
        newest: int | None = None
        now = time.time()

        try:
            with os.scandir(path) as entries:
                for entry in entries:
                    try:
                        is_dir = entry.is_dir(follow_symlinks=self.follow_symlinks)
                    except OSError:
                        continue

                    if is_dir:
                        if entry.name in ALWAYS_IGNORE_DIRS:
                            continue
                        if project.is_dependency_dir(Path(entry.path)):
                            continue
                        queue.push(Path(entry.path))
                        continue

                    try:
                        modified = entry.stat(follow_symlinks=False).st_mtime
                    except OSError:
                        continue

                    elapsed = max(0, int(now - modified))
                    if newest is None or elapsed < newest:
                        newest = elapsed
        except OSError as e:
            self.reporter.analyse_error(path, e)
            return None

        return newest

    def seconds_since_modified(self, project: Project) -> int:
        """Get the time since any file in the project was last modified.

        Returns 0 when no file could be read, so projects whose contents are
        unknown are never considered stale.
        """
        queue: WorkQueue[Path] = WorkQueue([project.root], retry_sleep=self.retry_sleep)
        results: list[int | None] = []
        visited: set[Path] = set()
        lock = threading.Lock()

        def on_item(path: Path) -> None:
            if self.follow_symlinks and not _first_visit(path, visited, lock):
                return

            self.reporter.analyse_path(path)
            newest = self._scan_directory(project, path, queue)
            with lock:
                results.append(newest)

        queue.drain(self.workers, on_item)

        ages = [age for age in results if age is not None]
        return min(ages, default=0)

    def analyse(self, projects: Iterable[Project]) -> AnalysisResult:
        """Split projects into stale and recently modified ones."""
        result = AnalysisResult()
        lock = threading.Lock()

        def on_project(project: Project) -> None:
            age = self.seconds_since_modified(project)
            with lock:
                result.ages[project.root] = age
                if age > self.stale_after:
                    result.stale.add(project)
                else:
                    result.recent.add(project)

        queue: WorkQueue[Project] = WorkQueue(projects, retry_sleep=self.retry_sleep)
        queue.drain(self.project_workers, on_project, self.reporter.analyse_retry)

        self.reporter.analyse_done(len(result.stale), len(result.recent))
        return result

    def partition(self, projects: Iterable[Project]) -> tuple[set[Project], set[Project]]:
        """Split projects into (stale, recent) sets."""
        result = self.analyse(projects)
        return result.stale, result.recent
