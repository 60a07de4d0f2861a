"""
Filesystem probes for installed package directories.

Stateless helpers that read modification times and locate the active install
directory of a package, falling back to the newest version directory when the
`current` link is missing.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from packaging.version import InvalidVersion, Version

from .errors import NoInstallRootFound

logger = logging.getLogger(__name__)

CURRENT_DIR = "current"
INSTALL_DESCRIPTOR = "install.json"
MANIFEST_DESCRIPTOR = "manifest.json"

_VERSION_PUNCTUATION = frozenset(".-_")


def modification_time_ms(path: Path) -> int:
    """
    Get modification time of a file or directory.

    Args:
        path: Path to stat

    Returns:
        Milliseconds since the epoch, or 0 if the path cannot be read
    """
    try:
        return int(os.stat(path).st_mtime_ns // 1_000_000)
    except OSError:
        return 0


def install_modification_time_ms(install_dir: Path) -> int:
    """
    Get modification time of an installation directory.

    Checks install.json, then manifest.json, then the directory itself.

    Args:
        install_dir: Version directory or `current`

    Returns:
        Milliseconds since the epoch, or 0 if nothing is readable
    """
    for candidate in (install_dir / INSTALL_DESCRIPTOR, install_dir / MANIFEST_DESCRIPTOR, install_dir):
        try:
            return int(os.stat(candidate).st_mtime_ns // 1_000_000)
        except OSError:
            continue
    return 0


def install_time_iso(install_root: Path) -> str:
    """
    Get the install/update time of an install root as ISO-8601 (UTC).

    Returns:
        Timestamp string, or "" if the directory cannot be read
    """
    try:
        mtime = os.stat(install_root).st_mtime
    except OSError:
        return ""
    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()


def is_valid_version_string(name: str) -> bool:
    """
    Check whether a directory name looks like a version.

    A version has at least one ASCII digit, only ASCII alphanumerics plus
    '.', '-' and '_', and does not start or end with '.' or '-'.

    Args:
        name: Directory name

    Returns:
        True if the name is recognised as a version string
    """
    if not name:
        return False
    if not any(c.isascii() and c.isdigit() for c in name):
        return False
    if any(not (c.isascii() and c.isalnum()) and c not in _VERSION_PUNCTUATION for c in name):
        return False
    return not (name[0] in ".-" or name[-1] in ".-")


def is_current_name(name: str) -> bool:
    """Check whether a directory name is the active-version indirection."""
    return name.lower() == CURRENT_DIR


def is_valid_version_dir(path: Path) -> bool:
    """
    Check whether a subdirectory can serve as an install root.

    Args:
        path: Candidate version directory

    Returns:
        True for a directory other than `current` holding install.json or manifest.json
    """
    if is_current_name(path.name) or not path.is_dir():
        return False
    return (path / INSTALL_DESCRIPTOR).exists() or (path / MANIFEST_DESCRIPTOR).exists()


def _subdirectories(package_dir: Path) -> list[Path]:
    try:
        with os.scandir(package_dir) as entries:
            return [Path(entry.path) for entry in entries if entry.is_dir()]
    except OSError as e:
        logger.warning(f"Cannot list {package_dir}: {e}")
        return []


def list_version_dirs(package_dir: Path) -> list[str]:
    """
    List version subdirectory names of a package, in directory order.

    Args:
        package_dir: apps/<package>

    Returns:
        Names other than `current` that are recognised as version strings
    """
    return [
        sub.name for sub in _subdirectories(package_dir)
        if not is_current_name(sub.name) and is_valid_version_string(sub.name)
    ]


def has_multiple_versions(package_dir: Path) -> bool:
    """Check whether a package directory holds version subdirectories."""
    return bool(list_version_dirs(package_dir))


def version_sort_key(name: str) -> tuple[int, Version | str]:
    """
    Sort key placing every version string on one total order.

    PEP 440 versions compare by Version and rank above names that do not
    parse, which compare as plain strings.

    Args:
        name: Version string

    Returns:
        (1, Version) for PEP 440 versions, (0, name) otherwise
    """
    try:
        return (1, Version(name))
    except InvalidVersion:
        return (0, name)


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two version strings.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2
    """
    key1, key2 = version_sort_key(v1), version_sort_key(v2)
    if key1 < key2:
        return -1
    elif key1 > key2:
        return 1
    return 0


def _candidate_key(candidate: tuple[int, Path]) -> tuple[int, tuple[int, Version | str], str]:
    mtime, path = candidate
    return (mtime, version_sort_key(path.name), path.name)


def find_latest_version_dir(package_dir: Path) -> Path | None:
    """
    Find the most recently updated version directory of a package.

    Equal modification times are broken by the higher version, then by the
    lexicographically greater directory name.

    Args:
        package_dir: apps/<package>

    Returns:
        Path to the chosen version directory, or None if there is none
    """
    candidates = [
        (install_modification_time_ms(sub), sub)
        for sub in _subdirectories(package_dir)
        if is_valid_version_dir(sub)
    ]
    if not candidates:
        return None

    latest = max(candidates, key=_candidate_key)[1]
    logger.debug(f"Latest version directory for {package_dir.name}: {latest.name}")
    return latest


def resolve_install_root(package_dir: Path) -> Path:
    """
    Locate the active install directory of a package.

    Args:
        package_dir: apps/<package>

    Returns:
        `current` when it is a directory, otherwise the newest version directory

    Raises:
        NoInstallRootFound: If neither exists
    """
    current = package_dir / CURRENT_DIR
    if current.is_dir():
        return current

    fallback = find_latest_version_dir(package_dir)
    if fallback is None:
        raise NoInstallRootFound(
            f"'current' directory not found for {package_dir.name} "
            "and no version directories available"
        )

    logger.debug(f"'current' missing for {package_dir.name}; using version directory '{fallback.name}'")
    return fallback
