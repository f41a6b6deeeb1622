"""Progress and result reporting for discovery and analysis."""

from __future__ import annotations

import logging
from pathlib import Path


class Reporter:
    """Receives progress events from the discoverer and the analyser.

    Events are informational only and never influence the traversal.
    Methods may be called concurrently from worker threads.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Use the given logger, or the ``project-cleanup`` logger."""
        self.logger = logger or logging.getLogger("project-cleanup")

    def discover_searching_path(self, path: Path) -> None:
        """A directory is about to be searched for projects."""
        self.logger.debug("Searching %s", path)

    def discover_searching_retry(self, tries: int) -> None:
        """A search worker found the queue empty ``tries`` times in a row."""
        self.logger.debug("Searching, waiting for work (%d)", tries)

    def discover_searching_error(self, path: Path, error: OSError) -> None:
        """A directory could not be read and was skipped."""
        self.logger.warning("Could not read %s: %s", path, error)

    def discover_searching_done(self, total_paths: int, discovered: int) -> None:
        """Discovery finished."""
        self.logger.info("Searched %d directories, %d cleanable projects found", total_paths, discovered)

    def analyse_path(self, path: Path) -> None:
        """A project directory is about to be scanned for modification times."""
        self.logger.debug("Analysing %s", path)

    def analyse_retry(self, tries: int) -> None:
        """An analysis worker found the queue empty ``tries`` times in a row."""
        self.logger.debug("Analysing, waiting for work (%d)", tries)

    def analyse_error(self, path: Path, error: OSError) -> None:
        """A directory could not be read and does not count towards the age."""
        self.logger.warning("Could not read %s: %s", path, error)

    def analyse_done(self, stale: int, recent: int) -> None:
        """Analysis finished."""
        self.logger.info("%d stale projects, %d recently modified", stale, recent)

    def analyse_skipped(self) -> None:
        """The modified date check was skipped because every project is cleanable."""
        self.logger.info("Skipping modified date check, all projects are cleanable")
