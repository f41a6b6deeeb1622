"""Cleanup run: discover projects, filter stale ones, remove their dependencies."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from .analyser import ModifiedTimeAnalyser
from .cleaner import Cleaner, CleanupResult, collect_cleanable_dirs
from .discoverer import ProjectDiscoverer
from .ignore import compile_ignore
from .reporter import Reporter
from .work_queue import default_worker_count

if TYPE_CHECKING:
    from .config import CleanupConfig
    from .project import Project

_VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass
class CleanupStats:
    """Statistics for a cleanup run."""

    directories_searched: int = 0
    projects_found: int = 0
    stale_projects: int = 0
    recent_projects: int = 0
    directories_removed: int = 0
    errors: int = 0
    ages: dict[Path, int] = field(default_factory=dict)


class ProjectCleanup:
    """Runs project discovery, staleness analysis and removal."""

    def __init__(self, config: CleanupConfig, reporter: Reporter | None = None) -> None:
        """Initialize the cleanup run.

        Args:
            config: Cleanup configuration.
            reporter: Progress reporter. Defaults to one logging to this run's logger.

        Raises:
            ValueError: If the configured log level is invalid.
            ConfigurationError: If the ignore pattern is invalid.

        """
        if config.log_level.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {config.log_level!r}")

        self.config = config
        self.logger = self._setup_logging()
        self.reporter = reporter or Reporter(self.logger)

        retry_sleep = config.retry_sleep_ms / 1000
        workers = default_worker_count(multiplier=config.worker_multiplier)

        self.discoverer = ProjectDiscoverer(
            self.reporter,
            ignore=compile_ignore(config.ignore),
            follow_symlinks=config.follow_symlinks,
            workers=workers,
            retry_sleep=retry_sleep,
        )
        self.analyser = ModifiedTimeAnalyser(
            self.reporter,
            stale_after=config.stale_after_seconds,
            follow_symlinks=config.follow_symlinks,
            workers=workers,
            retry_sleep=retry_sleep,
        )
        self.cleaner = Cleaner(self.logger)
        self.stats = CleanupStats()

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the run.

        Returns:
            Configured logger instance.

        """
        logger = logging.getLogger("project-cleanup")
        level = getattr(logging, self.config.log_level.upper())
        logger.setLevel(level)

        # Clear existing handlers to avoid duplicates if the run is recreated
        if logger.handlers:
            logger.handlers.clear()

        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

        if self.config.log_file is not None:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
            )
            logger.addHandler(file_handler)

        return logger

    def find_projects(self) -> set[Project]:
        """Discover projects below the configured paths.

        Raises:
            RootPathError: If a configured path does not exist.
            OverrideFileError: If a project's override file is invalid.

        """
        projects = self.discoverer.discover(self.config.paths)
        self.stats.directories_searched = self.discoverer.directories_searched
        self.stats.projects_found = len(projects)
        return projects

    def select_stale(self, projects: set[Project]) -> set[Project]:
        """Keep the projects whose dependencies may be removed."""
        if self.config.all:
            self.reporter.analyse_skipped()
            self.stats.stale_projects = len(projects)
            return projects

        result = self.analyser.analyse(projects)
        self.stats.stale_projects = len(result.stale)
        self.stats.recent_projects = len(result.recent)
        self.stats.ages = result.ages
        return result.stale

    def find_cleanable_dirs(self) -> list[Path]:
        """Get the dependency directories recommended for deletion.

        Returns:
            Directories sorted by path string.

        """
        projects = self.find_projects()
        if not projects:
            return []

        return collect_cleanable_dirs(self.select_stale(projects))

    def remove(self, paths: list[Path]) -> list[CleanupResult]:
        """Delete the given directories (or report them, in dry-run mode)."""
        results = self.cleaner.remove_all(paths, dry_run=self.config.dry_run)

        for result in results:
            if result.action == "deleted":
                self.stats.directories_removed += 1
            elif not result.success:
                self.stats.errors += 1

        self.logger.debug(
            "Cleanup finished. Stats: searched=%d, projects=%d, stale=%d, removed=%d, errors=%d",
            self.stats.directories_searched,
            self.stats.projects_found,
            self.stats.stale_projects,
            self.stats.directories_removed,
            self.stats.errors,
        )
        return results
