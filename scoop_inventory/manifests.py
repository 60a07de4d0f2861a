"""
Manifest resolution for installed packages.

Loads version, description and source bucket of a package from the JSON
descriptors in its install root. Resolution runs an ordered chain of
strategies so that a missing or corrupt descriptor degrades the record
instead of dropping the package.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable, Sequence

from .errors import ManifestError
from .models import (
    CUSTOM_SOURCE,
    UNKNOWN_VERSION,
    InstallManifest,
    PackageManifest,
    PackageRecord,
    PartialManifest,
)
from .probe import (
    INSTALL_DESCRIPTOR,
    MANIFEST_DESCRIPTOR,
    has_multiple_versions,
    install_time_iso,
    is_valid_version_string,
    resolve_install_root,
)

logger = logging.getLogger(__name__)

Strategy = Callable[[Path, str], "PartialManifest | None"]


def _read_json(path: Path) -> object:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to read {path.name}: {e}") from e
    except (ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the interpreter limit
        raise ManifestError(f"Failed to parse {path.name}: {e}") from e


def load_manifests(install_root: Path, package_name: str) -> tuple[PackageManifest, InstallManifest]:
    """
    Load manifest.json and install.json from an install root.

    A missing file is replaced by a minimal descriptor; a file that exists but
    cannot be read or parsed is an error.

    Args:
        install_root: `current` or a version directory
        package_name: Package name, used for the synthesized description

    Returns:
        Tuple of (PackageManifest, InstallManifest)

    Raises:
        ManifestError: If either descriptor is unreadable or malformed
    """
    manifest_path = install_root / MANIFEST_DESCRIPTOR
    if manifest_path.exists():
        try:
            manifest = PackageManifest.from_dict(_read_json(manifest_path))
        except ManifestError as e:
            raise ManifestError(f"{package_name}: {e}") from e
    else:
        logger.warning(f"manifest.json not found for {package_name}, creating minimal manifest")
        manifest = PackageManifest(
            version=UNKNOWN_VERSION,
            description=f"Package: {package_name}",
        )

    install_path = install_root / INSTALL_DESCRIPTOR
    if install_path.exists():
        try:
            install_manifest = InstallManifest.from_dict(_read_json(install_path))
        except ManifestError as e:
            raise ManifestError(f"{package_name}: {e}") from e
    else:
        logger.warning(f"install.json not found for {package_name}, creating minimal manifest")
        install_manifest = InstallManifest(bucket=None)

    return manifest, install_manifest


def _custom_description(package_name: str) -> str:
    return f"Package: {package_name} (Custom installation)"


def descriptor_strategy(install_root: Path, package_name: str) -> PartialManifest | None:
    """Resolve from manifest.json and install.json."""
    try:
        manifest, install_manifest = load_manifests(install_root, package_name)
    except ManifestError as e:
        logger.warning(f"Failed to load manifests for {package_name}: {e}, creating fallback manifests")
        return None
    return PartialManifest(
        version=manifest.version,
        description=manifest.description,
        bucket=install_manifest.bucket,
    )


def directory_name_strategy(install_root: Path, package_name: str) -> PartialManifest | None:
    """Use the install root's own name when it looks like a version."""
    if is_valid_version_string(install_root.name):
        return PartialManifest(
            version=install_root.name,
            description=_custom_description(package_name),
        )
    return None


def json_scan_strategy(install_root: Path, package_name: str) -> PartialManifest | None:
    """Take the version from the first JSON file that declares one."""
    try:
        with os.scandir(install_root) as entries:
            json_files = sorted(
                Path(entry.path) for entry in entries
                if entry.is_file() and entry.name.lower().endswith(".json")
            )
    except OSError as e:
        logger.warning(f"Cannot list {install_root} for {package_name}: {e}")
        return None

    for path in json_files:
        try:
            data = _read_json(path)
        except ManifestError as e:
            logger.warning(f"Skipping JSON file in package {package_name}: {e}")
            continue
        version = data.get("version") if isinstance(data, dict) else None
        if isinstance(version, str) and version:
            logger.debug(f"Recovered version {version} for {package_name} from {path.name}")
            return PartialManifest(
                version=version,
                description=_custom_description(package_name),
            )
    return None


RESOLUTION_STRATEGIES: tuple[Strategy, ...] = (
    descriptor_strategy,
    directory_name_strategy,
    json_scan_strategy,
)


def resolve_partial_manifest(
    install_root: Path,
    package_name: str,
    strategies: Sequence[Strategy] = RESOLUTION_STRATEGIES,
) -> PartialManifest:
    """
    Run resolution strategies in order until one produces a result.

    Args:
        install_root: `current` or a version directory
        package_name: Package name
        strategies: Ordered strategies to try

    Returns:
        PartialManifest (never fails; degrades to version "unknown")
    """
    for strategy in strategies:
        result = strategy(install_root, package_name)
        if result is not None:
            return result

    return PartialManifest(
        version=UNKNOWN_VERSION,
        description=_custom_description(package_name),
    )


def find_package_bucket(scoop_root: Path, package_name: str) -> str | None:
    """
    Search all bucket directories for a package manifest.

    Args:
        scoop_root: Scoop root directory
        package_name: Package name

    Returns:
        Name of the first bucket holding bucket/<package>.json, or None
    """
    buckets_path = scoop_root / "buckets"
    try:
        with os.scandir(buckets_path) as entries:
            bucket_dirs = [Path(entry.path) for entry in entries if entry.is_dir()]
    except OSError:
        logger.debug(f"No readable buckets directory at {buckets_path}")
        return None

    for bucket_dir in bucket_dirs:
        if (bucket_dir / "bucket" / f"{package_name}.json").exists():
            logger.debug(f"Found package {package_name} in bucket {bucket_dir.name}")
            return bucket_dir.name

    logger.debug(f"Package {package_name} not found in any bucket")
    return None


def determine_bucket(declared_bucket: str | None, scoop_root: Path, package_name: str) -> str:
    """
    Determine the source bucket of a package.

    Args:
        declared_bucket: Bucket named by install.json, if any
        scoop_root: Scoop root directory
        package_name: Package name

    Returns:
        The declared bucket, the bucket found by search, or "Custom"
    """
    if declared_bucket:
        return declared_bucket
    return find_package_bucket(scoop_root, package_name) or CUSTOM_SOURCE


def build_package_record(
    package_name: str,
    partial: PartialManifest,
    bucket: str,
    updated: str,
    has_version_dirs: bool,
) -> PackageRecord:
    """Assemble a PackageRecord; only custom installs can be versioned installs."""
    return PackageRecord(
        name=package_name,
        version=partial.version,
        source=bucket,
        updated=updated,
        is_versioned_install=has_version_dirs if bucket == CUSTOM_SOURCE else False,
        info=partial.description or "",
    )


def load_package_details(package_dir: Path, scoop_root: Path) -> PackageRecord:
    """
    Load the details of a single installed package from its directory.

    Args:
        package_dir: apps/<package>
        scoop_root: Scoop root directory

    Returns:
        PackageRecord

    Raises:
        NoInstallRootFound: If the package has no usable install directory
    """
    package_name = package_dir.name
    logger.debug(f"Loading package details for: {package_name}")

    has_version_dirs = has_multiple_versions(package_dir)
    install_root = resolve_install_root(package_dir)
    partial = resolve_partial_manifest(install_root, package_name)
    bucket = determine_bucket(partial.bucket, scoop_root, package_name)

    logger.debug(f"Determined bucket for package {package_name}: {bucket}")
    return build_package_record(
        package_name,
        partial,
        bucket,
        install_time_iso(install_root),
        has_version_dirs,
    )
