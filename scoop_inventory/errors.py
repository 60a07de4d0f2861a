"""
Exception types raised by the installed-package inventory.
"""


class InventoryError(Exception):
    """Base class for inventory errors."""
    pass


class NoInstallRootFound(InventoryError):
    """Raised when a package directory has neither `current` nor a usable version directory."""
    pass


class ManifestError(InventoryError):
    """Raised when manifest.json or install.json exists but cannot be read or parsed."""
    pass


class ScanError(InventoryError):
    """Raised when the apps directory itself cannot be scanned."""
    pass


class AppsDirectoryNotFound(ScanError):
    """Raised when no apps directory exists under the resolved root."""
    pass


class NotInstalled(InventoryError):
    """Raised when a package directory does not exist."""
    pass


class RootNotFound(InventoryError):
    """Raised when no Scoop root directory can be detected."""
    pass
