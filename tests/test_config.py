"""
Tests for configuration parsing (needs/config.py).
"""

import json
import os
from unittest.mock import patch

import pytest

from needs.config import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT_SECONDS,
    Config,
    _load_json,
    _load_yaml,
    apply_env_overrides,
    load_config,
    load_config_file,
)
from needs.errors import ConfigError


@pytest.fixture
def no_env(monkeypatch):
    monkeypatch.delenv("NEEDS_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("NEEDS_MAX_WORKERS", raising=False)


class TestConfig:
    """Tests for Config dataclass."""

    def test_config_defaults(self):
        """Test Config with default values."""
        config = Config()
        assert config.version == 1
        assert config.no_versions is False
        assert config.full_versions is False
        assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
        assert config.max_workers == DEFAULT_MAX_WORKERS
        assert config.no_version_binaries == ()

    def test_config_from_dict(self):
        """Test creating Config from dictionary."""
        data = {
            "version": 1,
            "no_versions": True,
            "timeout_seconds": 10,
            "max_workers": 4,
            "no_version_binaries": ["make", "xargs"],
        }
        config = Config.from_dict(data, source="/tmp/.needs.yml")
        assert config.no_versions is True
        assert config.timeout_seconds == 10
        assert config.max_workers == 4
        assert config.no_version_binaries == ("make", "xargs")
        assert config.source == "/tmp/.needs.yml"

    def test_config_from_dict_null_binaries(self):
        """Test an empty YAML key is treated as no extra binaries."""
        config = Config.from_dict({"no_version_binaries": None})
        assert config.no_version_binaries == ()

    def test_config_invalid_version(self):
        """Test Config rejects unsupported versions."""
        with pytest.raises(ValueError, match="Unsupported config version"):
            Config(version=2)

    @pytest.mark.parametrize("timeout", [0, 61, "3"])
    def test_config_invalid_timeout(self, timeout):
        """Test Config rejects timeouts outside 1..60."""
        with pytest.raises(ValueError, match="Invalid timeout_seconds"):
            Config(timeout_seconds=timeout)

    @pytest.mark.parametrize("workers", [0, 65])
    def test_config_invalid_workers(self, workers):
        """Test Config rejects worker counts outside 1..64."""
        with pytest.raises(ValueError, match="Invalid max_workers"):
            Config(max_workers=workers)

    def test_config_invalid_binary_entry(self):
        """Test empty names are rejected."""
        with pytest.raises(ValueError):
            Config(no_version_binaries=("make", ""))

    def test_config_immutable(self):
        """Test that Config is immutable."""
        config = Config()
        with pytest.raises(AttributeError):
            config.no_versions = True

    def test_config_merge(self):
        """Test merging prefers the higher priority config."""
        project = Config.from_dict({"timeout_seconds": 10, "no_version_binaries": ["make"]})
        user = Config.from_dict({
            "timeout_seconds": 20,
            "max_workers": 4,
            "full_versions": True,
            "no_version_binaries": ["make", "xargs"],
        })
        merged = project.merge_with(user)
        assert merged.timeout_seconds == 10
        assert merged.max_workers == 4
        assert merged.full_versions is True
        assert merged.no_version_binaries == ("make", "xargs")

    def test_config_merge_explicit_default_wins(self):
        """Test a value set to its default still beats a lower priority file."""
        project = Config.from_dict({"timeout_seconds": DEFAULT_TIMEOUT_SECONDS, "no_versions": False})
        user = Config.from_dict({"timeout_seconds": 10, "no_versions": True})
        merged = project.merge_with(user)
        assert merged.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
        assert merged.no_versions is False

    def test_config_from_dict_records_explicit_keys(self):
        """Test from_dict remembers which keys were set."""
        config = Config.from_dict({"max_workers": 4, "unknown": 1})
        assert config.explicit == frozenset({"max_workers"})
        assert config == Config(max_workers=4)

    @pytest.mark.parametrize("value", ["false", "yes", 1, None])
    def test_config_from_dict_rejects_non_bool(self, value):
        """Test boolean options must be real booleans."""
        with pytest.raises(ValueError, match="Invalid no_versions"):
            Config.from_dict({"no_versions": value})

    def test_config_from_dict_rejects_scalar_binaries(self):
        """Test a single name is not split into characters."""
        with pytest.raises(ValueError, match="Invalid no_version_binaries"):
            Config.from_dict({"no_version_binaries": "make"})

    def test_config_to_dict(self):
        """Test dictionary conversion."""
        d = Config(no_version_binaries=("make",)).to_dict()
        assert d["timeout_seconds"] == DEFAULT_TIMEOUT_SECONDS
        assert d["no_version_binaries"] == ["make"]


class TestLoaders:
    """Tests for file loaders."""

    def test_load_yaml(self, tmp_path):
        """Test loading a YAML file."""
        path = tmp_path / ".needs.yml"
        path.write_text("version: 1\ntimeout_seconds: 5\n")
        assert _load_yaml(str(path)) == {"version": 1, "timeout_seconds": 5}

    def test_load_yaml_invalid(self, tmp_path):
        """Test invalid YAML returns None."""
        path = tmp_path / ".needs.yml"
        path.write_text("timeout_seconds: [unclosed\n")
        assert _load_yaml(str(path)) is None

    def test_load_yaml_empty(self, tmp_path):
        """Test an empty file parses to an empty mapping."""
        path = tmp_path / ".needs.yml"
        path.write_text("")
        assert _load_yaml(str(path)) == {}

    def test_load_json(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "needs.json"
        path.write_text(json.dumps({"max_workers": 2}))
        assert _load_json(str(path)) == {"max_workers": 2}

    def test_load_json_invalid(self, tmp_path):
        """Test invalid JSON returns None."""
        path = tmp_path / "needs.json"
        path.write_text("{not json")
        assert _load_json(str(path)) is None


class TestLoadConfigFile:
    """Tests for load_config_file()."""

    def test_missing_file(self, tmp_path):
        """Test a missing file returns None."""
        assert load_config_file(str(tmp_path / "nope.yml")) is None

    def test_valid_file(self, tmp_path):
        """Test a valid file becomes a Config."""
        path = tmp_path / ".needs.yml"
        path.write_text("no_versions: true\nno_version_binaries:\n  - make\n")
        config = load_config_file(str(path))
        assert config.no_versions is True
        assert config.no_version_binaries == ("make",)
        assert config.source == str(path)

    def test_invalid_values(self, tmp_path):
        """Test a file with out-of-range values returns None."""
        path = tmp_path / ".needs.yml"
        path.write_text("timeout_seconds: 600\n")
        assert load_config_file(str(path)) is None


class TestEnvOverrides:
    """Tests for environment variable overrides."""

    def test_timeout_override(self, monkeypatch):
        """Test NEEDS_TIMEOUT_SECONDS overrides the timeout."""
        monkeypatch.setenv("NEEDS_TIMEOUT_SECONDS", "7")
        monkeypatch.delenv("NEEDS_MAX_WORKERS", raising=False)
        assert apply_env_overrides(Config()).timeout_seconds == 7

    def test_workers_override(self, monkeypatch):
        """Test NEEDS_MAX_WORKERS overrides the worker count."""
        monkeypatch.delenv("NEEDS_TIMEOUT_SECONDS", raising=False)
        monkeypatch.setenv("NEEDS_MAX_WORKERS", "2")
        assert apply_env_overrides(Config()).max_workers == 2

    def test_not_an_integer(self, monkeypatch):
        """Test a non-integer override is a config error."""
        monkeypatch.setenv("NEEDS_TIMEOUT_SECONDS", "soon")
        with pytest.raises(ConfigError) as exc_info:
            apply_env_overrides(Config())
        assert exc_info.value.code == "needs::config::invalid_config"

    def test_out_of_range(self, monkeypatch):
        """Test an out-of-range override is a config error."""
        monkeypatch.delenv("NEEDS_TIMEOUT_SECONDS", raising=False)
        monkeypatch.setenv("NEEDS_MAX_WORKERS", "1000")
        with pytest.raises(ConfigError):
            apply_env_overrides(Config())

    def test_no_overrides(self, no_env):
        """Test the config is returned unchanged without overrides."""
        config = Config(max_workers=3)
        assert apply_env_overrides(config) is config


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_without_files(self, no_env):
        """Test defaults are returned when no file exists."""
        with patch("needs.config.CONFIG_LOCATIONS", []):
            config = load_config()
        assert config == Config()

    def test_custom_path(self, tmp_path, no_env):
        """Test a custom path is loaded."""
        path = tmp_path / "custom.yml"
        path.write_text("max_workers: 8\n")
        with patch("needs.config.CONFIG_LOCATIONS", []):
            config = load_config(str(path))
        assert config.max_workers == 8

    def test_custom_path_missing(self, tmp_path, no_env):
        """Test a missing custom path is an error."""
        with patch("needs.config.CONFIG_LOCATIONS", []):
            with pytest.raises(ConfigError):
                load_config(str(tmp_path / "missing.yml"))

    def test_precedence(self, tmp_path, no_env):
        """Test the custom file wins over project files."""
        custom = tmp_path / "custom.yml"
        custom.write_text("timeout_seconds: 9\n")
        project = tmp_path / ".needs.yml"
        project.write_text("timeout_seconds: 4\nmax_workers: 2\n")
        with patch("needs.config.CONFIG_LOCATIONS", [str(project)]):
            config = load_config(str(custom))
        assert config.timeout_seconds == 9
        assert config.max_workers == 2

    def test_project_default_values_beat_user_file(self, tmp_path, no_env):
        """Test project settings equal to the defaults are not overridden."""
        project = tmp_path / ".needs.yml"
        project.write_text("timeout_seconds: 3\nno_versions: false\n")
        user = tmp_path / "config.yml"
        user.write_text("timeout_seconds: 10\nno_versions: true\nmax_workers: 2\n")
        with patch("needs.config.CONFIG_LOCATIONS", [str(project), str(user)]):
            config = load_config()
        assert config.timeout_seconds == 3
        assert config.no_versions is False
        assert config.max_workers == 2

    def test_string_boolean_file_rejected(self, tmp_path, no_env):
        """Test a quoted "false" makes the file invalid instead of true."""
        path = tmp_path / "custom.yml"
        path.write_text('no_versions: "false"\n')
        with patch("needs.config.CONFIG_LOCATIONS", []):
            with pytest.raises(ConfigError):
                load_config(str(path))

    def test_env_wins(self, tmp_path, monkeypatch):
        """Test environment overrides beat files."""
        project = tmp_path / ".needs.yml"
        project.write_text("timeout_seconds: 4\n")
        monkeypatch.setenv("NEEDS_TIMEOUT_SECONDS", "11")
        monkeypatch.delenv("NEEDS_MAX_WORKERS", raising=False)
        with patch("needs.config.CONFIG_LOCATIONS", [str(project)]):
            config = load_config()
        assert config.timeout_seconds == 11

    def test_project_file_in_cwd(self, tmp_path, monkeypatch, no_env):
        """Test the relative project location is read from the working directory."""
        (tmp_path / ".needs.yml").write_text("full_versions: true\n")
        monkeypatch.chdir(tmp_path)
        with patch("needs.config.CONFIG_LOCATIONS", [".needs.yml"]):
            config = load_config()
        assert config.full_versions is True
        assert os.path.basename(config.source) == ".needs.yml"
