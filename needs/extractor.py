"""
Version token extraction from free-form probe output.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .errors import VersionParseError
from .events import Observer, emit

# major.minor[.patch][-pre.release][+build.meta]; identifiers are [0-9A-Za-z-]
VERSION_TOKEN_RE = re.compile(
    r"(\d+\.\d+(?:\.\d+)?"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?)",
    re.ASCII,
)
DIGIT_RE = re.compile(r"[0-9]")


@dataclass(frozen=True)
class VersionToken:
    """
    Raw version-looking substring.

    Attributes:
        token: The matched text (e.g. "25.01.1")
        line: The output line it was found on
    """
    token: str
    line: str


def digit_lines(output: str) -> list[str]:
    """Lines of output containing at least one ASCII digit, in order."""
    return [line for line in output.splitlines() if DIGIT_RE.search(line)]


def extract_version(output: str, name: str, observer: Observer | None = None) -> VersionToken:
    """Extract the version token from probe output.

    Only the first digit-bearing line with a match is used; later lines are
    ignored even if they carry more version detail.

    Args:
        output: Captured probe output
        name: Binary name (for diagnostics)
        observer: Event observer

    Returns:
        VersionToken for the first match

    Raises:
        VersionParseError: If no line contains a version-like token
    """
    lines = digit_lines(output)
    emit(observer, name, "filtered lines:", logging.DEBUG, lines=lines)

    for line in lines:
        m = VERSION_TOKEN_RE.search(line)
        if m:
            emit(observer, name, "version found", logging.INFO, version=m.group(1), line=line)
            return VersionToken(token=m.group(1), line=line)

    emit(observer, name, "No valid version found in the output", logging.WARNING, output=output)
    raise VersionParseError(name, output)
