"""
Version normalization.

Turns raw version tokens ("25.01.1", "11.5", "0.0.1-beta.9") into strict
semantic versions (major.minor.patch[-prerelease][+build]).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import SemverParseError

# Characters allowed in prerelease and build identifiers (plus the separator)
INVALID_IDENTIFIER_CHARS_RE = re.compile(r"[^0-9A-Za-z.-]")

_NUMERIC = r"(?:0|[1-9][0-9]*)"
_PRERELEASE_ID = r"(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_ID = r"[0-9A-Za-z-]+"

STRICT_SEMVER_RE = re.compile(
    rf"(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*))?"
    rf"(?:\+(?P<build>{_BUILD_ID}(?:\.{_BUILD_ID})*))?",
    re.ASCII,
)


@dataclass(frozen=True)
class NormalizedVersion:
    """
    Strict semantic version.

    Attributes:
        major: Major version
        minor: Minor version
        patch: Patch version
        prerelease: Prerelease identifiers (e.g. ("beta", "9"))
        build: Build metadata identifiers
    """
    major: int
    minor: int
    patch: int = 0
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    def __post_init__(self):
        """Reject values that would not serialize to a strict version."""
        for part in ("major", "minor", "patch"):
            value = getattr(self, part)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"Invalid {part} component: {value!r}")
        # Round-trip through the strict grammar
        if not STRICT_SEMVER_RE.fullmatch(self.format(full=True)):
            raise ValueError(f"Invalid version identifiers: {self.format(full=True)}")

    @classmethod
    def parse(cls, text: str) -> NormalizedVersion:
        """Parse a strict semantic version string.

        Raises:
            ValueError: If text is not a strict major.minor.patch version
        """
        m = STRICT_SEMVER_RE.fullmatch(text.strip())
        if not m:
            raise ValueError(f"unexpected version format: {text!r}")

        prerelease = m.group("prerelease")
        build = m.group("build")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
            build=tuple(build.split(".")) if build else (),
        )

    def format(self, full: bool = True) -> str:
        """Format as text; full=False drops prerelease and build metadata."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if not full:
            return text
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def __str__(self) -> str:
        return self.format(full=True)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
            "prerelease": list(self.prerelease),
            "build": list(self.build),
            "version": str(self),
        }


def _clean_identifiers(value: str | None) -> str | None:
    if value is None:
        return None
    replaced = INVALID_IDENTIFIER_CHARS_RE.sub("", value)
    segments = [segment for segment in replaced.split(".") if segment]
    return ".".join(segments) or None


def _strip_leading_zeros(segment: str) -> str:
    if not segment:
        return segment
    return segment.lstrip("0") or "0"


def clean_version_string(version_str: str) -> str:
    """Reshape a raw version token into strict version text.

    Examples:
        "25.01.1" -> "25.1.1"
        "11.5" -> "11.5.0"
        "1.0.0-be_ta..1" -> "1.0.0-beta.1"

    Args:
        version_str: Raw token from the extractor

    Returns:
        Cleaned version string (not guaranteed to parse)
    """
    version_and_prerelease, sep, build = version_str.partition("+")
    build = build if sep else None

    version_numbers, sep, prerelease = version_and_prerelease.partition("-")
    prerelease = prerelease if sep else None

    segments = [_strip_leading_zeros(s) for s in version_numbers.split(".")]
    # Pad to major.minor.patch, never truncate
    while len(segments) < 3:
        segments.append("0")

    result = ".".join(segments)

    cleaned_prerelease = _clean_identifiers(prerelease)
    if cleaned_prerelease:
        result += f"-{cleaned_prerelease}"

    cleaned_build = _clean_identifiers(build)
    if cleaned_build:
        result += f"+{cleaned_build}"

    return result


def normalize_version(token: str, name: str = "") -> NormalizedVersion:
    """Clean and parse a raw version token.

    Args:
        token: Raw token (e.g. "25.01.1")
        name: Binary name for error reporting

    Returns:
        NormalizedVersion

    Raises:
        SemverParseError: If the cleaned token is still not a strict version
    """
    cleaned = clean_version_string(token)
    try:
        return NormalizedVersion.parse(cleaned)
    except ValueError as e:
        raise SemverParseError(name or token, cleaned, str(e)) from e


def _compare_identifier(a: str, b: str) -> int:
    a_num, b_num = a.isdigit(), b.isdigit()
    if a_num and b_num:
        x, y = int(a), int(b)
    elif a_num:
        return -1  # numeric identifiers sort before alphanumeric ones
    elif b_num:
        return 1
    else:
        x, y = a, b
    return (x > y) - (x < y)


def _compare(v1: NormalizedVersion, v2: NormalizedVersion) -> int:
    core1 = (v1.major, v1.minor, v1.patch)
    core2 = (v2.major, v2.minor, v2.patch)
    if core1 != core2:
        return -1 if core1 < core2 else 1

    # A release outranks any of its prereleases
    if not v1.prerelease or not v2.prerelease:
        return (not v1.prerelease) - (not v2.prerelease)

    for a, b in zip(v1.prerelease, v2.prerelease):
        result = _compare_identifier(a, b)
        if result:
            return result
    return (len(v1.prerelease) > len(v2.prerelease)) - (len(v1.prerelease) < len(v2.prerelease))


def _coerce(value: NormalizedVersion | str) -> NormalizedVersion:
    if isinstance(value, NormalizedVersion):
        return value
    return normalize_version(value.strip().lstrip("vV"), value)


def compare_versions(v1: NormalizedVersion | str, v2: NormalizedVersion | str) -> int:
    """
    Compare two versions by semantic version precedence.

    Text is normalized first (an optional leading "v" is ignored). Build
    metadata does not affect precedence.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2

    Raises:
        SemverParseError: If either version cannot be normalized
    """
    return _compare(_coerce(v1), _coerce(v2))
