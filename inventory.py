#!/usr/bin/env python3
"""
Scoop inventory - list installed packages from the apps directory.

Scans <scoop root>/apps, resolves each package's version and source bucket,
and caches the result behind an apps-directory fingerprint.

Usage:
    inventory.py                   # List installed packages
    inventory.py --refresh         # Force a rescan
    inventory.py --json            # JSON output
    inventory.py --path 7zip       # Print a package's install directory
    inventory.py --versions mytool # Version directories of a versioned install
"""

import argparse
import json
import sys

from scoop_inventory.config import load_config, validate_config
from scoop_inventory.errors import InventoryError
from scoop_inventory.logging_config import get_logger, setup_logging
from scoop_inventory.render import print_summary, render_table
from scoop_inventory.scanner import InstalledScanner


def cmd_list(scanner: InstalledScanner, args: argparse.Namespace) -> int:
    """List installed packages."""
    packages = scanner.refresh_installed() if args.refresh else scanner.scan_installed()

    if args.json:
        print(json.dumps([p.to_dict() for p in packages], indent=2, ensure_ascii=False))
        return 0

    print(f"# {len(packages)} packages installed under {scanner.scoop_root}", file=sys.stderr)
    print("", file=sys.stderr)
    render_table(packages)
    print_summary(packages)
    return 0


def cmd_path(scanner: InstalledScanner, args: argparse.Namespace) -> int:
    """Print the install directory of a package."""
    print(scanner.package_install_path(args.path))
    return 0


def cmd_versions(scanner: InstalledScanner, args: argparse.Namespace) -> int:
    """Show version directories of a versioned custom install."""
    info = scanner.versioned_package_info(args.versions)
    if info is None:
        print(f"'{args.versions}' is not a versioned install", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(info.to_dict(), indent=2, ensure_ascii=False))
        return 0

    for version in info.available_versions:
        marker = "*" if version.is_current else " "
        print(f"{marker} {version.version}\t{version.install_path}")
    return 0


def main() -> int:
    """Main entry point for the inventory CLI."""
    parser = argparse.ArgumentParser(
        description="Scoop inventory - installed package listing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Invalidate the cache and rescan the apps directory",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table",
    )
    parser.add_argument(
        "--path",
        metavar="PACKAGE",
        help="Print the install directory of PACKAGE",
    )
    parser.add_argument(
        "--versions",
        metavar="PACKAGE",
        help="List version directories of a versioned custom install",
    )
    parser.add_argument(
        "--root",
        help="Scoop root directory (overrides config and detection)",
    )
    parser.add_argument(
        "--config",
        help="Path to a configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config, verbose=args.verbose)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(level=config.log_level, log_file=config.log_file, verbose=args.verbose)
    for warning in validate_config(config):
        get_logger().warning(f"Config: {warning}")

    scanner = InstalledScanner.from_config(config, scoop_root=args.root, verbose=args.verbose)

    try:
        if args.path:
            return cmd_path(scanner, args)
        if args.versions:
            return cmd_versions(scanner, args)
        return cmd_list(scanner, args)
    except InventoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
