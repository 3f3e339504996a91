"""
File system helpers for PlatformKit.

All helpers are read-only: discovery and assembly never write to the
installation they inspect.
"""

import os
from pathlib import Path
from typing import Iterator, Optional, Union

IS_WINDOWS = os.name == "nt"

EXECUTABLE_EXTENSIONS = ["", ".exe", ".bat", ".cmd"] if IS_WINDOWS else [""]


def is_executable_file(path: Path) -> bool:
    """
    Check whether path is a regular file the current user may execute.

    Args:
        path: Candidate file path

    Returns:
        True if path exists, is a file (symlinks are followed) and is executable
    """
    try:
        return path.is_file() and os.access(path, os.X_OK)
    except OSError:
        return False


def find_executable_in(directory: Path, name: str) -> Optional[Path]:
    """
    Look for an executable directly inside a single directory.

    The lookup is not recursive.

    Args:
        directory: Directory to inspect
        name: Executable name without extension

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable_in(Path('/usr/bin'), 'clang')
        PosixPath('/usr/bin/clang')
    """
    for ext in EXECUTABLE_EXTENSIONS:
        candidate = directory / f"{name}{ext}"
        if is_executable_file(candidate):
            return candidate
    return None


def iter_bundles(directory: Union[str, Path], suffix: str) -> Iterator[Path]:
    """
    Yield bundle directories with the given suffix, sorted by name.

    Missing or unreadable directories yield nothing.

    Args:
        directory: Directory holding bundles
        suffix: Bundle suffix including the dot (e.g., '.platform')
    """
    directory = Path(directory)
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return

    for entry in entries:
        if entry.name.endswith(suffix) and entry.is_dir():
            yield entry


def real_path(path: Path) -> Path:
    """
    Resolve symlinks in path, requiring that it exists.

    Raises:
        OSError: If the path does not exist
    """
    return path.resolve(strict=True)
