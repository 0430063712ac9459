"""
Reading the list of binaries from arguments or a needsfile.

A needsfile is a whitespace-separated list of names. As an extension to that
plain format, "#" starts a comment running to the end of the line, so a
needsfile can annotate why a tool is needed. Files without comments parse
exactly as a plain list.
"""

from __future__ import annotations

import os
from typing import Sequence

from .errors import NeedsfileEmptyError, NeedsfileMissingError
from .logging_config import get_logger

NEEDSFILE_NAMES = ("needsfile", ".needsfile", "needs", ".needs")


def parse_needsfile(content: str) -> list[str]:
    """Parse needsfile content into binary names.

    Names are separated by any whitespace; "#" starts a comment that runs to
    the end of the line.

    Examples:
        "git\\ncargo # rust\\nnode" -> ["git", "cargo", "node"]
    """
    names: list[str] = []
    for line in content.splitlines():
        line = line.split("#", 1)[0]
        names.extend(line.split())
    return names


def read_needsfile(directory: str = ".") -> tuple[str, list[str]]:
    """
    Read the first needsfile in directory that lists any binaries.

    Returns:
        Tuple of (path, names)

    Raises:
        NeedsfileMissingError: If no candidate file exists or all are empty
    """
    logger = get_logger()

    for filename in NEEDSFILE_NAMES:
        path = os.path.join(directory, filename)
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            logger.debug(f"Failed to read or find {path}, trying next ({e})")
            continue

        names = parse_needsfile(content)
        if not names:
            logger.warning(f"needsfile found but it is empty, trying next: {path}")
            continue

        logger.debug(f"found needsfile {path}: {names}")
        return path, names

    logger.warning("No valid needsfile found")
    raise NeedsfileMissingError()


def get_binary_names(bins: Sequence[str] | None = None, directory: str = ".") -> list[str]:
    """
    Collect the names to check, from arguments or else a needsfile.

    Args:
        bins: Names given on the command line (None or empty to use a needsfile)
        directory: Directory searched for a needsfile

    Returns:
        Non-empty list of names, in the order given

    Raises:
        NeedsfileMissingError: If no names were given and no needsfile was found
        NeedsfileEmptyError: If the given names are all blank
    """
    if bins:
        get_logger().debug(f"got bins from args: {list(bins)}")
        names = [name.strip() for name in bins if name and name.strip()]
        if not names:
            raise NeedsfileEmptyError("command line arguments")
        return names

    get_logger().debug("no bins from args, trying to read from needsfiles")
    _, names = read_needsfile(directory)
    return names
