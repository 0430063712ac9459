"""
Exception hierarchy for needs.

Run-scoped errors abort the whole run and are reported by the CLI.
Per-binary errors (VersionError subclasses) are caught by the orchestrator
and degrade a single record to "version unknown".
"""

from __future__ import annotations


class NeedsError(Exception):
    """
    Base exception for all needs errors.

    Attributes:
        message: Human-readable error message
        code: Stable diagnostic code (e.g. "needs::io::needsfile_missing")
        help: Suggested fix for the error
    """
    code = "needs::error"
    help: str | None = None

    def __init__(self, message: str, help: str | None = None):
        self.message = message
        if help is not None:
            self.help = help
        super().__init__(message)


# I/O errors

class NeedsfileMissingError(NeedsError):
    code = "needs::io::needsfile_missing"
    help = "Provide a list of binaries or create a needsfile."

    def __init__(self, message: str = "No valid needsfile found"):
        super().__init__(message)


class NeedsfileEmptyError(NeedsError):
    code = "needs::io::needsfile_empty"
    help = "Add binary names to your needsfile, one per line or space-separated."

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Needsfile is empty: {path}")


# Discovery errors

class NoBinariesSpecifiedError(NeedsError):
    code = "needs::discovery::no_binaries"
    help = "Please specify at least one binary to check."

    def __init__(self, message: str = "No binaries found"):
        super().__init__(message)


class BinaryCheckError(NeedsError):
    """Searching PATH failed for a reason other than "not found"."""
    code = "needs::discovery::binary_check_failed"

    def __init__(self, name: str, source: OSError):
        self.name = name
        self.source = source
        super().__init__(f"Failed to check if binary exists: {name} ({source})")


# Version errors (scoped to one binary)

class VersionError(NeedsError):
    """Base class for failures retrieving the version of one binary."""
    code = "needs::version"

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(message)


class ExecutionError(VersionError):
    code = "needs::version::execution_failed"

    def __init__(self, name: str, reason: str):
        self.reason = reason
        super().__init__(name, f"Failed to execute binary: {name} ({reason})")


class VersionParseError(VersionError):
    code = "needs::version::parse_failed"
    help = "The version output format may not be recognized."

    def __init__(self, name: str, output: str):
        self.output = output
        super().__init__(name, f"Failed to parse version from output: {name}")


class SemverParseError(VersionError):
    code = "needs::version::semver_parse_failed"
    help = "The version string is not a valid semantic version."

    def __init__(self, name: str, version_string: str, reason: str = ""):
        self.version_string = version_string
        self.reason = reason
        message = f"Failed to parse semver: {version_string}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(name, message)


# Configuration errors

class ConfigError(NeedsError):
    code = "needs::config::invalid_config"

    def __init__(self, reason: str, advice: str = "Check your needs configuration file."):
        self.reason = reason
        super().__init__(f"Invalid configuration: {reason}", help=advice)
