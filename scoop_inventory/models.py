"""
Data model for installed packages and their on-disk descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ManifestError


CUSTOM_SOURCE = "Custom"
UNKNOWN_VERSION = "unknown"


@dataclass(frozen=True)
class PackageRecord:
    """
    One installed package as currently understood by the cache.

    Attributes:
        name: Package directory name (case preserved)
        version: Installed version, "unknown" when unresolvable
        source: Bucket name, or "Custom" when no bucket can be determined
        updated: ISO-8601 timestamp of the install root's last modification
        is_versioned_install: Custom install with several version directories
        info: Description, empty when absent
        is_installed: Always True for scanned packages
    """
    name: str
    version: str = UNKNOWN_VERSION
    source: str = CUSTOM_SOURCE
    updated: str = ""
    is_versioned_install: bool = False
    info: str = ""
    is_installed: bool = True

    @property
    def key(self) -> str:
        """Case-folded name used for comparisons."""
        return self.name.casefold()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "version": self.version,
            "source": self.source,
            "updated": self.updated,
            "is_installed": self.is_installed,
            "info": self.info,
            "is_versioned_install": self.is_versioned_install,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageRecord":
        """Create from dictionary."""
        return cls(
            name=data.get("name", ""),
            version=data.get("version", UNKNOWN_VERSION),
            source=data.get("source", CUSTOM_SOURCE),
            updated=data.get("updated", ""),
            is_versioned_install=data.get("is_versioned_install", False),
            info=data.get("info", ""),
            is_installed=data.get("is_installed", True),
        )


def _optional_str(data: dict[str, Any], key: str, filename: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ManifestError(f"{filename}: '{key}' must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class PackageManifest:
    """Contents of an installed package's manifest.json."""
    version: str = UNKNOWN_VERSION
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "PackageManifest":
        """
        Create from parsed JSON.

        Raises:
            ManifestError: If the document is not an object or lacks a string version
        """
        if not isinstance(data, dict):
            raise ManifestError("manifest.json: expected a JSON object")
        version = _optional_str(data, "version", "manifest.json")
        if version is None:
            raise ManifestError("manifest.json: missing 'version'")
        return cls(
            version=version,
            description=_optional_str(data, "description", "manifest.json"),
        )


@dataclass(frozen=True)
class InstallManifest:
    """Contents of an installed package's install.json. No bucket means custom/unknown."""
    bucket: str | None = None
    architecture: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "InstallManifest":
        """
        Create from parsed JSON.

        Raises:
            ManifestError: If the document is not an object or has non-string fields
        """
        if not isinstance(data, dict):
            raise ManifestError("install.json: expected a JSON object")
        bucket = _optional_str(data, "bucket", "install.json")
        return cls(
            bucket=bucket or None,
            architecture=_optional_str(data, "architecture", "install.json"),
        )


@dataclass(frozen=True)
class PartialManifest:
    """What one resolution strategy managed to recover for a package."""
    version: str
    description: str | None = None
    bucket: str | None = None


@dataclass(frozen=True)
class PackageVersion:
    """One version directory of a versioned install."""
    version: str
    is_current: bool
    install_path: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "is_current": self.is_current,
            "install_path": self.install_path,
        }


@dataclass(frozen=True)
class VersionedPackageInfo:
    """All version directories known for a versioned install."""
    name: str
    current_version: str
    available_versions: tuple[PackageVersion, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "current_version": self.current_version,
            "available_versions": [v.to_dict() for v in self.available_versions],
        }
