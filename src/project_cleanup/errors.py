"""Exception types for project cleanup."""

from __future__ import annotations


class ProjectCleanupError(Exception):
    """Base class for errors that stop a cleanup run."""


class ConfigurationError(ProjectCleanupError):
    """Invalid user input: config values, ignore patterns or override files."""


class OverrideFileError(ConfigurationError):
    """A project's override file could not be read or contains an invalid entry."""


class RootPathError(ProjectCleanupError):
    """A root path does not exist or cannot be canonicalized."""
