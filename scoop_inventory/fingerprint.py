"""Apps directory fingerprinting for cache invalidation."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Sequence

from .errors import NoInstallRootFound
from .probe import install_modification_time_ms, modification_time_ms, resolve_install_root

logger = logging.getLogger(__name__)


def package_stamp(package_dir: Path) -> str:
    """Return "<lowercased name>:<mtime ms>" for one package directory."""
    try:
        stamp = install_modification_time_ms(resolve_install_root(package_dir))
    except NoInstallRootFound:
        stamp = modification_time_ms(package_dir)
    return f"{package_dir.name.lower()}:{stamp}"


def compute_fingerprint(app_dirs: Sequence[Path]) -> str:
    """
    Compute an order-independent fingerprint of the installed package set.

    Args:
        app_dirs: Package directories under apps/

    Returns:
        "<count>|<sorted stamps joined by ';'>"
    """
    stamps = sorted(package_stamp(path) for path in app_dirs)
    fingerprint = f"{len(app_dirs)}|{';'.join(stamps)}"
    logger.debug(f"Computed apps fingerprint over {len(app_dirs)} directories: {short_fingerprint(fingerprint)}")
    return fingerprint


def short_fingerprint(fingerprint: str | None) -> str:
    """Return a short digest of a fingerprint for log lines."""
    if not fingerprint:
        return "<none>"
    return hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()[:12]
