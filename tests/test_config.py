"""Tests for configuration loading and saving."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from project_cleanup.config import CleanupConfig, parse_bool
from project_cleanup.errors import ConfigurationError


class TestParseBool:
    """Tests for boolean parsing helper."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            (False, False),
            ("true", True),
            ("True", True),
            ("TRUE", True),
            ("yes", True),
            ("Yes", True),
            ("on", True),
            ("1", True),
            ("false", False),
            ("False", False),
            ("no", False),
            ("off", False),
            ("0", False),
            ("random", False),  # Non-standard strings are False
            ("", False),
        ],
    )
    def test_parse_bool_values(self, value: bool | str, expected: bool) -> None:
        """Test parsing various boolean representations."""
        assert parse_bool(value, False) == expected

    def test_parse_bool_none_uses_default(self) -> None:
        """Test that None returns the default value."""
        assert parse_bool(None, True) is True
        assert parse_bool(None, False) is False

    def test_parse_bool_integer(self) -> None:
        """Test parsing integer values."""
        assert parse_bool(1, False) is True
        assert parse_bool(0, True) is False


class TestCleanupConfigDefaults:
    """Tests for default configuration values."""

    def test_default_values(self) -> None:
        """Test that defaults are sensible."""
        config = CleanupConfig()

        assert config.all is False
        assert config.force is False
        assert config.dry_run is False
        assert config.follow_symlinks is False
        assert config.ignore is None
        assert config.stale_after_days == 30
        assert config.retry_sleep_ms == 50
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_default_paths_is_cwd(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test that the current working directory is searched by default."""
        monkeypatch.chdir(tmp_path)
        assert CleanupConfig().paths == [tmp_path]

    def test_stale_after_seconds(self) -> None:
        """Test the threshold conversion to seconds."""
        config = CleanupConfig()
        assert config.stale_after_seconds == 2_592_000

        config.stale_after_days = 7
        assert config.stale_after_seconds == 604_800


class TestConfigLoad:
    """Tests for loading configuration from file."""

    def test_load_nonexistent_file(self, tmp_path: Path) -> None:
        """Test loading returns defaults when file doesn't exist."""
        config = CleanupConfig.load(tmp_path / "nonexistent.yaml")

        assert config.stale_after_days == 30
        assert config.all is False

    def test_load_empty_file(self, tmp_path: Path) -> None:
        """Test loading empty file returns defaults."""
        config_path = tmp_path / "empty.yaml"
        config_path.touch()

        config = CleanupConfig.load(config_path)

        assert config.stale_after_days == 30

    def test_load_partial_config(self, tmp_path: Path) -> None:
        """Test loading partial config merges with defaults."""
        config = self._load_config_from_text(tmp_path, "partial.yaml", "stale_after_days: 90\n")
        assert config.stale_after_days == 90
        assert config.force is False  # Default

    def test_load_full_config(self, tmp_path: Path) -> None:
        """Test loading full configuration."""
        config_path = tmp_path / "full.yaml"
        data = {
            "paths": ["/tmp/code", "~/projects"],
            "all": True,
            "force": "yes",
            "dry_run": True,
            "ignore": "archive|vendor",
            "follow_symlinks": True,
            "stale_after_days": 14,
            "workers": {"retry_sleep_ms": 20, "multiplier": 4},
            "logging": {"file": "~/logs/cleanup.log", "level": "debug"},
        }
        with config_path.open("w") as f:
            yaml.dump(data, f)

        config = CleanupConfig.load(config_path)

        assert config.paths[0] == Path("/tmp/code")
        assert str(config.paths[1]).startswith(str(Path.home()))
        assert config.all is True
        assert config.force is True
        assert config.dry_run is True
        assert config.ignore == "archive|vendor"
        assert config.follow_symlinks is True
        assert config.stale_after_days == 14
        assert config.retry_sleep_ms == 20
        assert config.worker_multiplier == 4
        assert config.log_file == Path.home() / "logs/cleanup.log"
        assert config.log_level == "DEBUG"

    def test_load_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Test that malformed YAML is a configuration error."""
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("paths: [\n  unclosed")

        with pytest.raises(ConfigurationError, match="Could not load config"):
            CleanupConfig.load(config_path)

    def test_load_non_mapping_raises(self, tmp_path: Path) -> None:
        """Test that a top-level list is rejected."""
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- one\n- two\n")

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            CleanupConfig.load(config_path)

    def test_load_non_numeric_value_raises(self, tmp_path: Path) -> None:
        """Test that a non-numeric threshold is rejected."""
        config_path = tmp_path / "bad_days.yaml"
        config_path.write_text("stale_after_days: soon\n")

        with pytest.raises(ConfigurationError, match="Invalid configuration value"):
            CleanupConfig.load(config_path)

    @pytest.mark.parametrize(
        "content,message",
        [
            ("stale_after_days: -1\n", "stale_after_days must not be negative"),
            ("workers:\n  retry_sleep_ms: 0\n", "retry_sleep_ms must be positive"),
            ("workers:\n  multiplier: 0\n", "multiplier must be positive"),
        ],
    )
    def test_load_out_of_range_raises(self, tmp_path: Path, content: str, message: str) -> None:
        """Test that out-of-range values are rejected."""
        config_path = tmp_path / "range.yaml"
        config_path.write_text(content)

        with pytest.raises(ConfigurationError, match=message):
            CleanupConfig.load(config_path)

    @staticmethod
    def _load_config_from_text(tmp_path: Path, filename: str, content: str) -> CleanupConfig:
        """Create a config file with given content and load it."""
        config_path = tmp_path / filename
        config_path.write_text(content)
        return CleanupConfig.load(config_path)


class TestConfigSave:
    """Tests for saving configuration to file."""

    def test_save_creates_directory(self, tmp_path: Path) -> None:
        """Test that save creates parent directories."""
        config_path = tmp_path / "subdir" / "config.yaml"

        CleanupConfig().save(config_path)

        assert config_path.exists()

    def test_save_and_load_roundtrip(self, tmp_path: Path) -> None:
        """Test that saved config can be loaded identically."""
        config_path = tmp_path / "roundtrip.yaml"

        original = CleanupConfig()
        original.paths = [tmp_path / "dir1", tmp_path / "dir2"]
        original.ignore = "node_modules/.cache"
        original.stale_after_days = 60
        original.follow_symlinks = True
        original.log_level = "DEBUG"
        original.log_file = tmp_path / "cleanup.log"

        original.save(config_path)
        loaded = CleanupConfig.load(config_path)

        assert loaded == original

    def test_save_format(self, tmp_path: Path) -> None:
        """Test that saved YAML has expected structure."""
        config_path = tmp_path / "format.yaml"
        CleanupConfig().save(config_path)

        with config_path.open() as f:
            data = yaml.safe_load(f)

        assert "paths" in data
        assert "stale_after_days" in data
        assert "retry_sleep_ms" in data["workers"]
        assert "level" in data["logging"]


class TestConfigPath:
    """Tests for config path handling."""

    def test_get_config_path(self) -> None:
        """Test default config path location."""
        assert CleanupConfig.get_config_path() == Path.home() / ".config/project-cleanup/config.yaml"

    def test_load_uses_default_path(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test that load() uses the default path when no path is specified."""
        custom_default = tmp_path / "default_config.yaml"
        monkeypatch.setattr(CleanupConfig, "get_config_path", classmethod(lambda cls: custom_default))

        custom_default.write_text("stale_after_days: 42\n")

        assert CleanupConfig.load().stale_after_days == 42
