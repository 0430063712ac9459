"""
Configuration file parsing and management.

Reads YAML (or JSON) configuration files and merges them
(custom path -> project -> user -> defaults), then applies environment
overrides.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from typing import Any

import yaml

from .common import vlog
from .errors import ConfigError


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".needs.yml",                                      # Project root (highest priority)
    ".needs.yaml",                                     # Alternative extension
    os.path.expanduser("~/.config/needs/config.yml"),  # User global
    os.path.expanduser("~/.config/needs/config.yaml"),
]

DEFAULT_TIMEOUT_SECONDS = 3
DEFAULT_MAX_WORKERS = 16

# Keys resolved by priority when configs are merged
MERGED_KEYS = ("no_versions", "full_versions", "timeout_seconds", "max_workers")


@dataclass(frozen=True)
class Config:
    """
    Run configuration.

    Attributes:
        version: Config schema version
        no_versions: Skip version retrieval entirely
        full_versions: Show prerelease and build metadata
        timeout_seconds: Per-flag timeout when probing a binary
        max_workers: Maximum number of parallel probes
        no_version_binaries: Extra binaries known to have no version flag
        source: Path to the configuration file that was loaded
        explicit: Keys the configuration file actually set
    """
    version: int = 1
    no_versions: bool = False
    full_versions: bool = False
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS
    no_version_binaries: tuple[str, ...] = ()
    source: str = ""
    explicit: frozenset[str] = field(default=frozenset(), compare=False)

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        for flag in ("no_versions", "full_versions"):
            if not isinstance(getattr(self, flag), bool):
                raise ValueError(f"Invalid {flag}: {getattr(self, flag)!r}. Must be true or false")

        if not isinstance(self.timeout_seconds, int) or not 1 <= self.timeout_seconds <= 60:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 60"
            )

        if not isinstance(self.max_workers, int) or not 1 <= self.max_workers <= 64:
            raise ValueError(
                f"Invalid max_workers: {self.max_workers}. "
                "Must be between 1 and 64"
            )

        for name in self.no_version_binaries:
            if not isinstance(name, str) or not name:
                raise ValueError(f"Invalid entry in no_version_binaries: {name!r}")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary.

        Raises:
            ValueError: If a value has the wrong type
        """
        binaries = data.get("no_version_binaries", None) or ()
        if not isinstance(binaries, (list, tuple)):
            raise ValueError(f"Invalid no_version_binaries: {binaries!r}. Must be a list of names")

        return Config(
            version=data.get("version", 1),
            no_versions=data.get("no_versions", False),
            full_versions=data.get("full_versions", False),
            timeout_seconds=data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
            max_workers=data.get("max_workers", DEFAULT_MAX_WORKERS),
            no_version_binaries=tuple(binaries),
            source=source,
            explicit=frozenset(key for key in MERGED_KEYS if key in data),
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        A value wins only if this config's file set it; no_version_binaries
        from both configs are combined.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        def pick(key: str):
            if key in self.explicit or key not in other.explicit:
                return getattr(self, key)
            return getattr(other, key)

        merged_binaries = tuple(dict.fromkeys(self.no_version_binaries + other.no_version_binaries))

        return Config(
            version=self.version,
            no_versions=pick("no_versions"),
            full_versions=pick("full_versions"),
            timeout_seconds=pick("timeout_seconds"),
            max_workers=pick("max_workers"),
            no_version_binaries=merged_binaries,
            source=self.source or other.source,
            explicit=self.explicit | other.explicit,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "no_versions": self.no_versions,
            "full_versions": self.full_versions,
            "timeout_seconds": self.timeout_seconds,
            "max_workers": self.max_workers,
            "no_version_binaries": list(self.no_version_binaries),
        }


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file (.json is read as JSON, anything else as YAML)
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def apply_env_overrides(config: Config) -> Config:
    """
    Apply NEEDS_TIMEOUT_SECONDS and NEEDS_MAX_WORKERS.

    Raises:
        ConfigError: If an override is not a valid value
    """
    overrides: dict[str, Any] = {}
    timeout = _env_int("NEEDS_TIMEOUT_SECONDS")
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    workers = _env_int("NEEDS_MAX_WORKERS")
    if workers is not None:
        overrides["max_workers"] = workers

    if not overrides:
        return config
    try:
        return replace(config, **overrides)
    except ValueError as e:
        raise ConfigError(str(e))


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Environment variables (NEEDS_TIMEOUT_SECONDS, NEEDS_MAX_WORKERS)
    2. Custom path (if provided)
    3. Project .needs.yml
    4. User ~/.config/needs/config.yml
    5. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ConfigError: If custom_path is provided but cannot be loaded, or an
            environment override is invalid
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ConfigError(
                f"Could not load config from specified path: {custom_path}",
                advice="Check that the file exists and contains valid YAML or JSON.",
            )
        configs.append(config)
        vlog(f"Using custom config: {custom_path}", verbose)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)
            vlog(f"Found config at: {location}", verbose)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return apply_env_overrides(Config())

    # First config has highest priority
    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return apply_env_overrides(merged)
