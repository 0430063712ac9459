"""
needs - Check if given binaries are available in the PATH and get their versions.

Core Modules:
- Lookup: PATH search and package manager classification (locator)
- Versions: probing, token extraction and normalization (prober, extractor, versions)
- Orchestration: parallel discovery over all requested names (discovery)
- Glue: needsfile reading, configuration, logging, rendering, CLI
"""

__version__ = "0.6.0"

from .errors import (
    NeedsError,
    NeedsfileMissingError,
    NeedsfileEmptyError,
    NoBinariesSpecifiedError,
    BinaryCheckError,
    VersionError,
    ExecutionError,
    VersionParseError,
    SemverParseError,
    ConfigError,
)
from .events import PipelineEvent, EventCollector, log_event, null_observer
from .locator import ResolvedLocation, find_executable, classify_package_manager, locate
from .prober import ProbeOutcome, VERSION_FLAGS, KNOWN_NO_VERSION_BINARIES, execute_binary
from .extractor import VersionToken, VERSION_TOKEN_RE, extract_version
from .versions import NormalizedVersion, clean_version_string, normalize_version, compare_versions
from .binary import BinaryQuery, BinaryRecord, sort_binaries
from .discovery import partition_binaries, get_version, get_versions_for_bins, discover
from .config import Config, load_config, load_config_file
from .needsfile import parse_needsfile, get_binary_names
from .logging_config import setup_logging, get_logger

__all__ = [
    "__version__",
    # Errors
    "NeedsError",
    "NeedsfileMissingError",
    "NeedsfileEmptyError",
    "NoBinariesSpecifiedError",
    "BinaryCheckError",
    "VersionError",
    "ExecutionError",
    "VersionParseError",
    "SemverParseError",
    "ConfigError",
    # Events
    "PipelineEvent",
    "EventCollector",
    "log_event",
    "null_observer",
    # Pipeline
    "ResolvedLocation",
    "find_executable",
    "classify_package_manager",
    "locate",
    "ProbeOutcome",
    "VERSION_FLAGS",
    "KNOWN_NO_VERSION_BINARIES",
    "execute_binary",
    "VersionToken",
    "VERSION_TOKEN_RE",
    "extract_version",
    "NormalizedVersion",
    "clean_version_string",
    "normalize_version",
    "compare_versions",
    "BinaryQuery",
    "BinaryRecord",
    "sort_binaries",
    "partition_binaries",
    "get_version",
    "get_versions_for_bins",
    "discover",
    # Glue
    "Config",
    "load_config",
    "load_config_file",
    "parse_needsfile",
    "get_binary_names",
    "setup_logging",
    "get_logger",
]
