"""
Installed package scanning with fingerprint-validated caching.

Walks <root>/apps, resolves every package directory in parallel, and keeps
the result in an InstalledCache keyed by a fingerprint of the apps directory.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from .cache import InstalledCache
from .common import vlog
from .config import InventoryConfig
from .errors import AppsDirectoryNotFound, InventoryError, NotInstalled, ScanError
from .fingerprint import compute_fingerprint, short_fingerprint
from .manifests import load_package_details
from .models import PackageRecord, PackageVersion, VersionedPackageInfo
from .paths import resolve_scoop_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanOutcome:
    """
    Result of resolving one package directory.

    Attributes:
        name: Package directory name
        package: Resolved record (None if the directory was skipped)
        error: Reason the directory was skipped
    """
    name: str
    package: PackageRecord | None = None
    error: str | None = None


def list_app_dirs(apps_path: Path) -> list[Path]:
    """
    List package directories under the apps directory.

    Args:
        apps_path: <root>/apps

    Returns:
        Immediate subdirectories (files are ignored)

    Raises:
        ScanError: If the apps directory cannot be read
    """
    try:
        with os.scandir(apps_path) as entries:
            return [Path(entry.path) for entry in entries if entry.is_dir()]
    except OSError as e:
        raise ScanError(f"Failed to read apps directory: {e}") from e


def resolve_package(package_dir: Path, scoop_root: Path) -> ScanOutcome:
    """Resolve one package directory without letting its errors escape."""
    try:
        return ScanOutcome(name=package_dir.name, package=load_package_details(package_dir, scoop_root))
    except (InventoryError, OSError) as e:
        return ScanOutcome(name=package_dir.name, error=str(e))
    except Exception as e:
        logger.warning(f"Unexpected error resolving {package_dir.name}: {type(e).__name__}: {e}")
        return ScanOutcome(name=package_dir.name, error=f"{type(e).__name__}: {e}")


class InstalledScanner:
    """
    Scans installed packages and serves them from cache while the apps
    directory fingerprint is unchanged.

    Whole scans are serialized, so a refresh that arrives during a scan
    waits for it and is then answered from the fresh cache.
    """

    def __init__(
        self,
        scoop_root: str | os.PathLike | None = None,
        cache: InstalledCache | None = None,
        root_resolver: Callable[[], Path] | None = None,
        max_workers: int = 8,
        verbose: bool = False,
    ):
        self._root_resolver = root_resolver or resolve_scoop_root
        self._root = Path(scoop_root) if scoop_root else Path(self._root_resolver())
        self._root_lock = threading.Lock()
        self._scan_lock = threading.RLock()
        self.cache = cache or InstalledCache()
        self.max_workers = max_workers
        self.verbose = verbose

    @classmethod
    def from_config(
        cls,
        config: InventoryConfig,
        scoop_root: str | os.PathLike | None = None,
        verbose: bool = False,
    ) -> InstalledScanner:
        """Build a scanner from a loaded configuration."""
        return cls(
            scoop_root=scoop_root,
            cache=InstalledCache(debounce_seconds=config.debounce_seconds),
            root_resolver=lambda: resolve_scoop_root(config),
            max_workers=config.max_workers,
            verbose=verbose,
        )

    @property
    def scoop_root(self) -> Path:
        with self._root_lock:
            return self._root

    @property
    def apps_path(self) -> Path:
        return self.scoop_root / "apps"

    def set_root_path(self, path: str | os.PathLike) -> bool:
        """
        Point the scanner at a different Scoop root.

        Returns:
            True if the root changed (both caches are invalidated)
        """
        new_root = Path(path)
        with self._root_lock:
            if new_root == self._root:
                return False
            old_root, self._root = self._root, new_root

        logger.info(f"Scoop path updated from '{old_root}' to '{new_root}'")
        self.invalidate_cache()
        return True

    def refresh_root_path(self, reason: str) -> Path | None:
        """
        Re-derive the Scoop root through the resolver.

        Args:
            reason: Why the root is being re-derived (logged)

        Returns:
            The current root, or None if the resolver failed
        """
        logger.info(f"Refreshing scoop path if needed. Current path: {self.scoop_root}, reason: {reason}")
        try:
            new_root = Path(self._root_resolver())
        except (InventoryError, OSError) as e:
            logger.warning(f"Failed to refresh Scoop path ({reason}): {e}")
            return None
        self.set_root_path(new_root)
        return new_root

    def ensure_apps_path(self, log_prefix: str = "[scan]") -> Path:
        """
        Return the apps directory, re-deriving the root once if it is missing.

        Raises:
            AppsDirectoryNotFound: If no apps directory can be found
        """
        apps_path = self.apps_path
        if not apps_path.is_dir():
            logger.warning(f"{log_prefix} Scoop apps directory does not exist at: {apps_path}")
            if self.refresh_root_path("apps path missing") is not None:
                apps_path = self.apps_path
                logger.info(f"{log_prefix} Path refreshed to: {apps_path}")

        if not apps_path.is_dir():
            raise AppsDirectoryNotFound(f"Scoop apps directory not found at: {apps_path}")
        return apps_path

    def scan(self, apps_path: Path, log_prefix: str = "[scan]") -> list[PackageRecord]:
        """
        Scan an apps directory, answering from cache when the fingerprint matches.

        Args:
            apps_path: <root>/apps
            log_prefix: Tag for log lines (warmup/scan/refresh)

        Returns:
            Installed packages sorted by case-folded name

        Raises:
            ScanError: If the apps directory cannot be read
        """
        with self._scan_lock:
            app_dirs = list_app_dirs(apps_path)
            logger.debug(f"{log_prefix} Found {len(app_dirs)} app directories in {apps_path}")

            fingerprint = compute_fingerprint(app_dirs)
            cached = self.cache.get_if_fresh(fingerprint)
            if cached is not None:
                return cached

            logger.info(f"{log_prefix} Scanning {len(app_dirs)} installed package directories from filesystem")
            packages = self._resolve_all(app_dirs, apps_path.parent, log_prefix)
            logger.info(
                f"{log_prefix} Scanned {len(app_dirs)} packages, found {len(packages)} valid packages "
                f"(fingerprint {short_fingerprint(fingerprint)})"
            )

            self.cache.replace(packages, fingerprint)
            self.cache.rebuild_version_map(packages, fingerprint, apps_path)
            return packages

    def _resolve_all(
        self,
        app_dirs: Sequence[Path],
        scoop_root: Path,
        log_prefix: str,
    ) -> list[PackageRecord]:
        if not app_dirs:
            return []

        packages: list[PackageRecord] = []
        workers = max(1, min(self.max_workers, len(app_dirs)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(resolve_package, path, scoop_root) for path in app_dirs]
            for future in as_completed(futures):
                outcome = future.result()
                if outcome.package is None:
                    logger.warning(f"{log_prefix} Skipping package '{outcome.name}': {outcome.error}")
                    continue
                vlog(f"Loaded package: {outcome.name} {outcome.package.version}", self.verbose)
                packages.append(outcome.package)

        packages.sort(key=lambda p: (p.key, p.name))
        return packages

    def scan_installed(self, log_prefix: str = "[scan]") -> list[PackageRecord]:
        """
        Full scan of installed packages honoring the cache.

        Raises:
            ScanError: If the apps directory is missing or unreadable
        """
        with self._scan_lock:
            return self.scan(self.ensure_apps_path(log_prefix), log_prefix)

    def warm_up(self) -> list[PackageRecord]:
        """Startup scan; a missing or unreadable apps directory means no packages yet."""
        try:
            return self.scan_installed("[warmup]")
        except ScanError as e:
            logger.warning(f"[warmup] Failed to find or scan Scoop apps directory: {e}")
            return []

    def refresh_installed(self) -> list[PackageRecord]:
        """
        Forced refresh: invalidate both caches and rescan.

        A refresh arriving within the debounce window of the previous one
        returns the cached list instead, when there is one.

        Raises:
            ScanError: If the apps directory is missing or unreadable
        """
        with self._scan_lock:
            if self.cache.should_debounce_refresh():
                cached = self.cache.cached_packages()
                if cached is not None:
                    logger.info("[refresh] Returning cached packages due to debounce")
                    return cached

            try:
                self.invalidate_cache()
                return self.scan_installed("[refresh]")
            finally:
                self.cache.mark_refresh()

    def invalidate_cache(self) -> None:
        """
        Clear cached packages; call after install, uninstall or update.

        Waits for an in-flight scan so it cannot land between the package-list
        and version-list writes of that scan.
        """
        with self._scan_lock:
            self.cache.invalidate_all()

    def package_install_path(self, package_name: str) -> Path:
        """
        Get the installation directory of a package.

        Raises:
            NotInstalled: If apps/<package> does not exist
        """
        package_path = self.apps_path / package_name
        if not package_path.exists():
            raise NotInstalled(f"Package '{package_name}' is not installed")
        return package_path

    def package_versions(self, package_name: str) -> list[str] | None:
        """
        Version directories of a versioned custom install.

        Returns:
            Directory names in directory order, or None if the package is not a versioned install
        """
        if not self.cache.has_versions():
            try:
                self.scan_installed()
            except ScanError as e:
                logger.warning(f"Cannot load versions for {package_name}: {e}")
                return None
        return self.cache.get_versions(package_name)

    def versioned_package_info(self, package_name: str) -> VersionedPackageInfo | None:
        """Describe every version directory of a versioned custom install."""
        versions = self.package_versions(package_name)
        if not versions:
            return None

        key = package_name.casefold()
        record = next((p for p in self.cache.cached_packages() or [] if p.key == key), None)
        name = record.name if record else package_name
        current_version = record.version if record else ""
        package_path = self.apps_path / name

        return VersionedPackageInfo(
            name=name,
            current_version=current_version,
            available_versions=tuple(
                PackageVersion(
                    version=version,
                    is_current=version == current_version,
                    install_path=str(package_path / version),
                )
                for version in versions
            ),
        )
