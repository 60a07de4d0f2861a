"""
Scoop installed-package inventory.

Core Modules:
- Discovery: filesystem probes, manifest resolution, apps fingerprinting
- Scanning: parallel scan with a fingerprint-validated two-tier cache
- Foundation: configuration, Scoop root detection, logging, rendering
"""

__version__ = "1.0.0"

VERSION = __version__

# Errors
from .errors import (
    InventoryError,
    NoInstallRootFound,
    ManifestError,
    ScanError,
    AppsDirectoryNotFound,
    NotInstalled,
    RootNotFound,
)

# Data model
from .models import (
    CUSTOM_SOURCE,
    UNKNOWN_VERSION,
    PackageRecord,
    PackageManifest,
    InstallManifest,
    PartialManifest,
    PackageVersion,
    VersionedPackageInfo,
)

# Discovery
from .probe import (
    modification_time_ms,
    install_modification_time_ms,
    is_valid_version_string,
    list_version_dirs,
    has_multiple_versions,
    find_latest_version_dir,
    resolve_install_root,
)
from .manifests import (
    load_manifests,
    resolve_partial_manifest,
    find_package_bucket,
    determine_bucket,
    load_package_details,
    RESOLUTION_STRATEGIES,
)
from .fingerprint import compute_fingerprint

# Scanning
from .cache import InstalledCache
from .scanner import InstalledScanner, ScanOutcome, list_app_dirs

# Foundation
from .config import InventoryConfig, load_config, load_config_file, validate_config
from .paths import detect_scoop_path, resolve_scoop_root, validate_scoop_directory
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Errors
    "InventoryError",
    "NoInstallRootFound",
    "ManifestError",
    "ScanError",
    "AppsDirectoryNotFound",
    "NotInstalled",
    "RootNotFound",
    # Data model
    "CUSTOM_SOURCE",
    "UNKNOWN_VERSION",
    "PackageRecord",
    "PackageManifest",
    "InstallManifest",
    "PartialManifest",
    "PackageVersion",
    "VersionedPackageInfo",
    # Discovery
    "modification_time_ms",
    "install_modification_time_ms",
    "is_valid_version_string",
    "list_version_dirs",
    "has_multiple_versions",
    "find_latest_version_dir",
    "resolve_install_root",
    "load_manifests",
    "resolve_partial_manifest",
    "find_package_bucket",
    "determine_bucket",
    "load_package_details",
    "RESOLUTION_STRATEGIES",
    "compute_fingerprint",
    # Scanning
    "InstalledCache",
    "InstalledScanner",
    "ScanOutcome",
    "list_app_dirs",
    # Foundation
    "InventoryConfig",
    "load_config",
    "load_config_file",
    "validate_config",
    "detect_scoop_path",
    "resolve_scoop_root",
    "validate_scoop_directory",
    "setup_logging",
    "get_logger",
]
