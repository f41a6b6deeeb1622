"""Configuration management for project cleanup."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


def parse_bool(value: Any, default: bool) -> bool:
    """Parse a boolean from YAML or CLI input.

    Args:
        value: Raw value. Strings are matched case-insensitively.
        default: Returned when ``value`` is None.

    Returns:
        Parsed boolean.

    """
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


@dataclass
class CleanupConfig:
    """Configuration for a project cleanup run."""

    # Root directories to search for projects
    paths: list[Path] = field(default_factory=lambda: [Path.cwd()])

    # Skip the modified date check and clean every project
    all: bool = False

    # Skip the confirmation prompt
    force: bool = False

    # Report what would be deleted without deleting
    dry_run: bool = False

    # Paths matching this regex are not searched (regex, searched anywhere in the path)
    ignore: str | None = None

    # Traverse symlinked directories (cycles are detected)
    follow_symlinks: bool = False

    # Projects without changes for longer than this are stale
    stale_after_days: int = 30

    # Worker tuning
    retry_sleep_ms: int = 50
    worker_multiplier: int = 2

    # Logging
    log_file: Path | None = None
    log_level: str = "INFO"

    @property
    def stale_after_seconds(self) -> int:
        """Staleness threshold in seconds."""
        return self.stale_after_days * 86_400

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.home() / ".config/project-cleanup/config.yaml"

    @classmethod
    def load(cls, config_path: Path | None = None) -> CleanupConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Uses default if None.

        Returns:
            Loaded configuration, or defaults if the file does not exist.

        Raises:
            ConfigurationError: If the file cannot be parsed.

        """
        if config_path is None:
            config_path = cls.get_config_path()

        if not config_path.exists():
            return cls()

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not load config {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config {config_path} must be a mapping")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> CleanupConfig:
        """Create config from dictionary."""
        config = cls()

        try:
            if "paths" in data:
                config.paths = [Path(os.path.expanduser(p)) for p in data["paths"]]

            # Simple fields
            config.all = parse_bool(data.get("all"), config.all)
            config.force = parse_bool(data.get("force"), config.force)
            config.dry_run = parse_bool(data.get("dry_run"), config.dry_run)
            config.follow_symlinks = parse_bool(data.get("follow_symlinks"), config.follow_symlinks)
            if "ignore" in data:
                config.ignore = str(data["ignore"]) if data["ignore"] else None
            if "stale_after_days" in data:
                config.stale_after_days = int(data["stale_after_days"])

            # Worker settings
            if "workers" in data:
                workers = data["workers"] or {}
                if "retry_sleep_ms" in workers:
                    config.retry_sleep_ms = int(workers["retry_sleep_ms"])
                if "multiplier" in workers:
                    config.worker_multiplier = int(workers["multiplier"])

            # Logging
            if "logging" in data:
                logging_cfg = data["logging"] or {}
                if logging_cfg.get("file"):
                    config.log_file = Path(os.path.expanduser(logging_cfg["file"]))
                if "level" in logging_cfg:
                    config.log_level = str(logging_cfg["level"]).upper()
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

        config.validate()
        return config

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigurationError: If a value is out of range.

        """
        if self.stale_after_days < 0:
            raise ConfigurationError("stale_after_days must not be negative")
        if self.retry_sleep_ms <= 0:
            raise ConfigurationError("workers.retry_sleep_ms must be positive")
        if self.worker_multiplier <= 0:
            raise ConfigurationError("workers.multiplier must be positive")

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        """
        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "paths": [str(p) for p in self.paths],
            "all": self.all,
            "force": self.force,
            "dry_run": self.dry_run,
            "ignore": self.ignore,
            "follow_symlinks": self.follow_symlinks,
            "stale_after_days": self.stale_after_days,
            "workers": {
                "retry_sleep_ms": self.retry_sleep_ms,
                "multiplier": self.worker_multiplier,
            },
            "logging": {
                "file": str(self.log_file) if self.log_file else None,
                "level": self.log_level,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
