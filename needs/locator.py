"""
Executable lookup on PATH and package manager classification.
"""

from __future__ import annotations

import logging
import os
import stat
import sys
from dataclasses import dataclass

from .errors import BinaryCheckError
from .events import Observer, emit


PACKAGE_MANAGER_TAGS = (
    "rustup",
    "homebrew",
    "npm",
    "go",
    "pip",
    "snap",
    "flatpak",
    "appimage",
    "system",
)

# Ordered: first match wins. Matched against the lower-cased parent directory
# of the resolved path, with a trailing slash.
_DIRECTORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("rustup", ("/.cargo/bin/", "/.cargo/", "/.rustup/")),
    ("homebrew", ("/opt/homebrew/", "/homebrew/", "/cellar/", "/linuxbrew/")),
    ("npm", ("/node_modules/.bin/", "/node_modules/", "/npm/", "/npm-global/", "/.npm-global/", "/.npm/")),
    ("go", ("/go/bin/", "/gopath/bin/")),
    ("pip", ("/.local/bin/", "/python", "/pip/", "/pipx/")),
    ("snap", ("/snap/",)),
    ("flatpak", ("/flatpak/",)),
    ("appimage", ("/appimage",)),
)

# Must stay last: /usr/local/bin also hosts Homebrew installs on Intel macs.
SYSTEM_BIN_DIRS = ("/usr/bin/", "/bin/", "/usr/local/bin/", "/sbin/", "/usr/sbin/")


@dataclass(frozen=True)
class ResolvedLocation:
    """
    Where a binary was found.

    Attributes:
        path: Absolute path to the executable, or None if not on PATH
        package_manager: Package manager tag (see PACKAGE_MANAGER_TAGS) or None
    """
    path: str | None = None
    package_manager: str | None = None

    @property
    def found(self) -> bool:
        return self.path is not None


def classify_package_manager(path: str) -> str | None:
    """Guess which package manager installed the executable at path.

    Args:
        path: Absolute path to an executable

    Returns:
        Package manager tag, or None if no rule matches
    """
    if not path:
        return None

    lowered = path.replace("\\", "/").lower()
    directory = os.path.dirname(lowered).rstrip("/") + "/"

    for tag, markers in _DIRECTORY_RULES:
        if any(marker in directory for marker in markers):
            return tag
        if tag == "appimage" and lowered.endswith(".appimage"):
            return tag

    if directory.startswith(SYSTEM_BIN_DIRS):
        return "system"

    return None


def _candidate_names(name: str) -> list[str]:
    """Names to try in each directory, honouring PATHEXT on Windows."""
    if sys.platform != "win32":
        return [name]

    pathext = os.environ.get("PATHEXT", ".COM;.EXE;.BAT;.CMD")
    exts = [ext for ext in pathext.split(os.pathsep) if ext]
    if os.path.splitext(name)[1].lower() in {ext.lower() for ext in exts}:
        return [name]
    return [name] + [name + ext for ext in exts]


def _is_executable(candidate: str, name: str) -> bool:
    try:
        st = os.stat(candidate)
    except (FileNotFoundError, NotADirectoryError):
        return False
    except PermissionError as e:
        raise BinaryCheckError(name, e) from e
    except OSError:
        # Dangling symlink loops and over-long names are simply not matches
        return False

    if not stat.S_ISREG(st.st_mode):
        return False
    if sys.platform == "win32":
        return True
    return os.access(candidate, os.X_OK)


def _check_directory(directory: str, name: str) -> bool:
    """Return False if the PATH entry should be skipped, raise if unreadable."""
    try:
        st = os.stat(directory)
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise BinaryCheckError(name, e) from e
    return stat.S_ISDIR(st.st_mode)


def find_executable(name: str, path_env: str | None = None) -> str | None:
    """Find the first executable called name on PATH.

    Args:
        name: Binary name (or a path containing a separator)
        path_env: Search path, defaults to the PATH environment variable

    Returns:
        Absolute path to the executable, or None if not found

    Raises:
        BinaryCheckError: If a PATH directory cannot be inspected
    """
    if os.sep in name or (os.altsep and os.altsep in name):
        for candidate in _candidate_names(name):
            if _is_executable(candidate, name):
                return os.path.abspath(candidate)
        return None

    if path_env is None:
        path_env = os.environ.get("PATH", "")

    for directory in path_env.split(os.pathsep):
        if not directory:
            continue
        if not _check_directory(directory, name):
            continue
        for candidate_name in _candidate_names(name):
            candidate = os.path.join(directory, candidate_name)
            if _is_executable(candidate, name):
                return os.path.abspath(candidate)

    return None


def locate(name: str, observer: Observer | None = None, path_env: str | None = None) -> ResolvedLocation:
    """Resolve a binary name and classify its package manager.

    Raises:
        BinaryCheckError: If PATH cannot be searched reliably
    """
    try:
        path = find_executable(name, path_env=path_env)
    except BinaryCheckError as e:
        emit(observer, "which", "error during binary check", logging.WARNING, bin=name, error=str(e.source))
        raise

    if path is None:
        emit(observer, "which", "not found", logging.INFO, bin=name)
        return ResolvedLocation()

    package_manager = classify_package_manager(path)
    emit(observer, "which", "found", logging.INFO, bin=name, path=path, package_manager=package_manager)
    return ResolvedLocation(path=path, package_manager=package_manager)
