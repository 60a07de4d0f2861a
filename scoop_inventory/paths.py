"""
Scoop root directory detection.

Resolves the directory holding apps/, buckets/ and cache/ from the
configuration, Scoop's own environment variables, and well-known locations.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from .common import is_windows
from .config import InventoryConfig
from .errors import RootNotFound

logger = logging.getLogger(__name__)

REQUIRED_SUBDIRS = ("apps", "buckets", "cache")


def default_scoop_root() -> Path:
    """Platform default used when nothing else can be detected."""
    if is_windows():
        return Path("C:\\scoop")
    return Path("/usr/local/scoop")


def validate_scoop_directory(path: str | os.PathLike) -> bool:
    """
    Check if a path is a complete Scoop installation directory.

    Args:
        path: Candidate root directory

    Returns:
        True if apps/, buckets/ and cache/ all exist as directories
    """
    root = Path(path)
    if not root.is_dir():
        return False
    return all((root / name).is_dir() for name in REQUIRED_SUBDIRS)


def is_valid_scoop_candidate(path: Path) -> bool:
    """A candidate root only needs an apps/ directory to be scanned."""
    return (path / "apps").is_dir()


def build_candidate_list(configured: Sequence[str | os.PathLike] = ()) -> list[Path]:
    """
    Build the ordered, de-duplicated list of candidate Scoop roots.

    Args:
        configured: Explicitly configured paths (highest priority)

    Returns:
        Candidate root directories
    """
    candidates: list[Path] = [Path(p) for p in configured if p]

    for var in ("SCOOP", "SCOOP_GLOBAL"):
        value = os.environ.get(var)
        if value:
            candidates.append(Path(value))

    candidates.append(Path.home() / "scoop")

    program_data = os.environ.get("ProgramData")
    if program_data:
        candidates.append(Path(program_data) / "scoop")

    seen: set[str] = set()
    unique: list[Path] = []
    for candidate in candidates:
        key = os.path.normcase(str(candidate))
        if key not in seen:
            seen.add(key)
            unique.append(candidate)
    return unique


def detect_scoop_path(configured: Sequence[str | os.PathLike] = ()) -> Path:
    """
    Detect the Scoop root directory.

    Raises:
        RootNotFound: If no candidate holds an apps/ directory
    """
    for candidate in build_candidate_list(configured):
        if is_valid_scoop_candidate(candidate):
            logger.info(f"Detected Scoop path: {candidate}")
            return candidate

    raise RootNotFound(
        "Could not detect Scoop installation directory. Please set scoop_path in the configuration."
    )


def resolve_scoop_root(config: InventoryConfig | None = None) -> Path:
    """
    Resolve the Scoop root for the current configuration.

    Falls back to the platform default when detection fails, so callers
    always get a path; scanning it reports a missing apps directory.

    Args:
        config: Loaded configuration (scoop_path is tried first)

    Returns:
        Scoop root directory
    """
    configured = [config.scoop_path] if config and config.scoop_path else []
    try:
        return detect_scoop_path(configured)
    except RootNotFound as e:
        fallback = Path(configured[0]) if configured else default_scoop_root()
        logger.warning(f"Could not resolve scoop root path: {e} Using {fallback}")
        return fallback
