"""
Input queries and per-binary result records.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from .versions import NormalizedVersion


@dataclass(frozen=True)
class BinaryQuery:
    """A requested executable name."""
    name: str

    def __post_init__(self):
        if not self.name:
            raise ValueError("Binary name must not be empty")


@dataclass(frozen=True)
class BinaryRecord:
    """
    Final result for one requested binary.

    Attributes:
        name: Requested binary name
        found: Whether the binary is on PATH
        path: Resolved absolute path
        package_manager: Package manager tag, if classified
        version: Normalized version, if retrieved
        error: Why the version could not be retrieved (None if no failure)
    """
    name: str
    found: bool = False
    path: str | None = None
    package_manager: str | None = None
    version: NormalizedVersion | None = None
    error: str | None = None

    def with_version(self, version: NormalizedVersion | None) -> BinaryRecord:
        return replace(self, version=version, error=None)

    def with_error(self, error: str) -> BinaryRecord:
        return replace(self, version=None, error=error)

    def display(self, full_versions: bool = False) -> str:
        """Short "name version (manager)" form, with "?" for unknown versions."""
        version = self.version.format(full=full_versions) if self.version else "?"
        if self.package_manager:
            return f"{self.name} {version} ({self.package_manager})"
        return f"{self.name} {version}"

    def __str__(self) -> str:
        return self.display()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "found": self.found,
            "path": self.path,
            "package_manager": self.package_manager,
            "version": str(self.version) if self.version else None,
            "error": self.error,
        }


def sort_binaries(records: Iterable[BinaryRecord]) -> list[BinaryRecord]:
    """Sort records by name (stable for duplicate names)."""
    return sorted(records, key=lambda r: r.name)
