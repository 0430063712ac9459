"""
Console output for discovery results.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Sequence, TextIO

from .binary import BinaryRecord

# ANSI color codes
GREEN = "\033[32m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"


def use_color(stream: TextIO) -> bool:
    """Colors only on a TTY, and never when NO_COLOR is set."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def colorize(text: str, color: str, enabled: bool = True) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code
        enabled: Whether colors are enabled

    Returns:
        Colored text or plain text if colors disabled
    """
    if not enabled or not text:
        return text
    return f"{color}{text}{RESET}"


def version_column(record: BinaryRecord, show_versions: bool = True, full_versions: bool = False) -> str:
    if not show_versions:
        return "found"
    if record.version is None:
        return "?"
    return record.version.format(full=full_versions)


def render_lines(
    records: Sequence[BinaryRecord],
    show_versions: bool = True,
    full_versions: bool = False,
    color: bool = False,
) -> list[str]:
    """Build right-aligned output lines; found binaries first, then the missing ones.

    Args:
        records: Records sorted by name
        show_versions: False prints "found" instead of a version
        full_versions: Include prerelease and build metadata
        color: Use ANSI colors

    Returns:
        Output lines without trailing newlines
    """
    if not records:
        return []

    width = max(len(r.name) for r in records)
    found = [r for r in records if r.found]
    missing = [r for r in records if not r.found]

    lines = []
    for record in found:
        padding = " " * (width - len(record.name))
        line = f"{padding}{colorize(record.name, GREEN, color)} {version_column(record, show_versions, full_versions)}"
        if record.package_manager:
            line += " " + colorize(f"({record.package_manager})", DIM, color)
        lines.append(line)

    if found and missing:
        lines.append(" " * max(width - 1, 0) + "---")

    for record in missing:
        padding = " " * (width - len(record.name))
        lines.append(f"{padding}{colorize(record.name, RED, color)} not found")

    return lines


def render_results(
    records: Sequence[BinaryRecord],
    show_versions: bool = True,
    full_versions: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Print results as an aligned table."""
    stream = stream or sys.stdout
    for line in render_lines(records, show_versions, full_versions, color=use_color(stream)):
        print(line, file=stream)


def render_json(records: Sequence[BinaryRecord], stream: TextIO | None = None) -> None:
    """Print results as a JSON array."""
    stream = stream or sys.stdout
    print(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False), file=stream)
