"""
Running binaries with candidate version flags.

This is the only stage that touches the operating system beyond PATH lookup.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass

from .errors import ExecutionError
from .events import Observer, emit

# Constants
TIMEOUT_SECONDS = 3

VERSION_FLAGS = ("--version", "-v", "-version", "-V")

# Common shell and file utilities that have no usable version flag
KNOWN_NO_VERSION_BINARIES = frozenset({
    "ls",
    "cd",
    "pwd",
    "echo",
    "cat",
    "find",
    "awk",  # date, not semver
    "sed",
    "cut",
    "uniq",
    "wc",
    "head",
    "tail",
    "chmod",
    "chown",
    "ln",
    "mkdir",
    "rmdir",
    "rm",
    "cp",
    "mv",
    "touch",
    "ssh",
    "nice",
})


@dataclass(frozen=True)
class ProbeOutcome:
    """
    Output of the first version flag that printed something.

    Attributes:
        output: Captured standard output
        flag: The flag that produced it
    """
    output: str
    flag: str


def is_known_no_version(name: str, extra: frozenset[str] | set[str] = frozenset()) -> bool:
    """Check whether name is a binary expected to lack a version flag."""
    return name in KNOWN_NO_VERSION_BINARIES or name in extra


def _run_flag(path: str, flag: str, timeout: float) -> str | None:
    """Run path with one flag and return stripped stdout (None on timeout).

    Raises:
        OSError: If the process cannot be spawned
    """
    try:
        proc = subprocess.run(
            [path, flag],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,  # Isolate stdin
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
            env={**os.environ, "TERM": "dumb"},  # Disable ANSI/color output from subprocesses
        )
    except subprocess.TimeoutExpired:
        return None
    return (proc.stdout or "").strip()


def execute_binary(
    path: str,
    name: str | None = None,
    timeout: float | None = None,
    observer: Observer | None = None,
    extra_no_version: frozenset[str] | set[str] = frozenset(),
) -> ProbeOutcome | None:
    """Probe a binary for version output.

    Tries each of VERSION_FLAGS in order and returns the first non-empty
    output. The exit status is ignored: plenty of tools print their banner
    and exit non-zero.

    Args:
        path: Path to the executable
        name: Name the user asked for (defaults to basename of path)
        timeout: Per-flag timeout in seconds (default: TIMEOUT_SECONDS)
        observer: Event observer
        extra_no_version: Additional names treated as having no version flag

    Returns:
        ProbeOutcome, or None if no flag worked and the binary is known to
        have no version flag

    Raises:
        ExecutionError: If the binary cannot be spawned, or no flag worked
    """
    name = name or os.path.basename(path)
    timeout = timeout or TIMEOUT_SECONDS

    for flag in VERSION_FLAGS:
        emit(observer, name, "running command", logging.DEBUG, command=f"{path} {flag}")
        started = time.monotonic()
        try:
            output = _run_flag(path, flag, timeout)
        except OSError as e:
            emit(observer, name, "could not execute binary", logging.WARNING, error=str(e))
            raise ExecutionError(name, str(e)) from e

        emit(
            observer, name, "calling binary took", logging.DEBUG,
            flag=flag, ms=int((time.monotonic() - started) * 1000),
        )
        if output is None:
            emit(observer, name, "flag timed out, trying next...", logging.WARNING, flag=flag, timeout=timeout)
            continue
        if output:
            emit(observer, name, "command output", logging.DEBUG, flag=flag, output=output)
            return ProbeOutcome(output=output, flag=flag)

        emit(observer, name, "flag didn't work, trying next...", logging.DEBUG, flag=flag)

    emit(observer, name, "no version flag found, see --help or check builtins", logging.INFO)
    if is_known_no_version(name, extra_no_version):
        return None
    raise ExecutionError(name, "No valid version flag found")
