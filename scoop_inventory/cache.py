"""
In-process caches for installed packages.

Two caches share one fingerprint: the full package list and, for versioned
custom installs, the list of version directories per package. They are
invalidated together and rebuilt together.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from .fingerprint import short_fingerprint
from .models import PackageRecord
from .probe import list_version_dirs

logger = logging.getLogger(__name__)

# Minimum spacing between two user-triggered refreshes
DEFAULT_DEBOUNCE_SECONDS = 1.0


@dataclass(frozen=True)
class InstalledPackagesCache:
    """Package list captured for one apps fingerprint."""
    fingerprint: str
    packages: tuple[PackageRecord, ...]


@dataclass(frozen=True)
class PackageVersionsCache:
    """Version directories of versioned installs, captured for one apps fingerprint."""
    fingerprint: str
    versions_map: dict[str, tuple[str, ...]] = field(default_factory=dict)


class InstalledCache:
    """
    Thread-safe store for the package-list and version-list caches.

    The package list is always written before the version list of the same
    scan, and both are cleared by invalidate_all().
    """

    def __init__(
        self,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.debounce_seconds = debounce_seconds
        self._clock = clock
        self._packages_lock = threading.Lock()
        self._versions_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._packages: InstalledPackagesCache | None = None
        self._versions: PackageVersionsCache | None = None
        self._last_refresh: float | None = None

    def get_if_fresh(self, fingerprint: str) -> list[PackageRecord] | None:
        """
        Return cached packages if they were captured for this fingerprint.

        Args:
            fingerprint: Fingerprint of the current apps directory

        Returns:
            Cached package list, or None on mismatch or empty cache
        """
        with self._packages_lock:
            cache = self._packages
            if cache is None:
                logger.info("Cache MISS - no cached data found")
                return None
            if cache.fingerprint != fingerprint:
                logger.info(
                    f"Cache fingerprint mismatch. Old: {short_fingerprint(cache.fingerprint)}, "
                    f"New: {short_fingerprint(fingerprint)}"
                )
                return None
            logger.info(f"Cache HIT - returning {len(cache.packages)} cached packages")
            return list(cache.packages)

    def cached_packages(self) -> list[PackageRecord] | None:
        """Return whatever package list is cached, regardless of fingerprint."""
        with self._packages_lock:
            if self._packages is None:
                return None
            return list(self._packages.packages)

    def replace(self, packages: Sequence[PackageRecord], fingerprint: str) -> None:
        """Replace the package-list cache as a whole."""
        entry = InstalledPackagesCache(fingerprint=fingerprint, packages=tuple(packages))
        with self._packages_lock:
            self._packages = entry
        logger.info(f"Cache updated with {len(entry.packages)} packages")

    def rebuild_version_map(
        self,
        packages: Sequence[PackageRecord],
        fingerprint: str,
        apps_path: Path,
    ) -> bool:
        """
        Rebuild the version-list cache from a freshly scanned package list.

        The entry is stored only while the package-list cache still holds the
        same fingerprint, so the version list never runs ahead of it.

        Args:
            packages: Packages stored under the same fingerprint
            fingerprint: Fingerprint of the package-list cache
            apps_path: Scoop apps directory

        Returns:
            True if the version-list cache was updated
        """
        versions_map: dict[str, tuple[str, ...]] = {}
        for package in packages:
            if not package.is_versioned_install:
                continue
            version_dirs = list_version_dirs(apps_path / package.name)
            if version_dirs:
                versions_map[package.name] = tuple(version_dirs)

        entry = PackageVersionsCache(fingerprint=fingerprint, versions_map=versions_map)
        with self._packages_lock:
            current = self._packages.fingerprint if self._packages else None
            if current != fingerprint:
                logger.info(
                    f"Skipping versions cache update: package cache holds {short_fingerprint(current)}, "
                    f"scan produced {short_fingerprint(fingerprint)}"
                )
                return False
            # Lock order: packages before versions
            with self._versions_lock:
                self._versions = entry
        logger.info(f"Package versions cache updated with {len(versions_map)} versioned packages")
        return True

    def get_versions(self, package_name: str) -> list[str] | None:
        """
        Look up cached version directories of a package (case-insensitive).

        Returns:
            Version directory names, or None if the package is not a cached versioned install
        """
        key = package_name.casefold()
        with self._versions_lock:
            if self._versions is None:
                return None
            for name, versions in self._versions.versions_map.items():
                if name.casefold() == key:
                    return list(versions)
        return None

    def has_versions(self) -> bool:
        """Check whether the version-list cache is populated."""
        with self._versions_lock:
            return self._versions is not None

    def fingerprints(self) -> tuple[str | None, str | None]:
        """Return (package-list fingerprint, version-list fingerprint)."""
        with self._packages_lock:
            packages_fp = self._packages.fingerprint if self._packages else None
        with self._versions_lock:
            versions_fp = self._versions.fingerprint if self._versions else None
        return packages_fp, versions_fp

    def invalidate_all(self) -> None:
        """Clear both caches."""
        with self._versions_lock:
            self._versions = None
        with self._packages_lock:
            was_cached = self._packages is not None
            self._packages = None
        logger.info(f"Cache invalidated (was_cached: {was_cached}). Also invalidated versions cache.")

    def should_debounce_refresh(self) -> bool:
        """Check whether the last completed refresh happened within the debounce window."""
        with self._refresh_lock:
            if self._last_refresh is None:
                return False
            return self._clock() - self._last_refresh < self.debounce_seconds

    def mark_refresh(self) -> None:
        """Record that a refresh just completed."""
        with self._refresh_lock:
            self._last_refresh = self._clock()
