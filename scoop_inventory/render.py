"""
Output rendering and formatting for installed packages.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Sequence, TextIO

from wcwidth import wcswidth

from .models import CUSTOM_SOURCE, UNKNOWN_VERSION, PackageRecord


USE_COLOR = os.environ.get("SCOOP_INVENTORY_COLOR", "1") == "1"

# ANSI color codes
YELLOW = "\033[33m"
BLUE = "\033[34m"
DIM = "\033[2m"
RESET = "\033[0m"

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

HEADERS = ("name", "version", "source", "updated")
VERSIONED_MARKER = "⧉"


def colorize(text: str, color: str) -> str:
    """Apply color to text, or return it unchanged if colors are disabled."""
    if not USE_COLOR or not text:
        return text
    return f"{color}{text}{RESET}"


def display_width(text: str) -> int:
    """Terminal column width of text, ignoring ANSI escapes."""
    plain = ANSI_ESCAPE_RE.sub("", text)
    width = wcswidth(plain)
    # Non-printable characters make wcswidth return -1
    return width if width >= 0 else len(plain)


def pad(text: str, width: int) -> str:
    """Left-align text to a display width."""
    return text + " " * max(0, width - display_width(text))


def _row(package: PackageRecord) -> tuple[str, ...]:
    name = package.name
    if package.is_versioned_install:
        name = f"{name} {VERSIONED_MARKER}"

    source = package.source
    if source == CUSTOM_SOURCE:
        source = colorize(source, YELLOW)

    updated = package.updated[:19].replace("T", " ") if package.updated else ""
    return (name, colorize(package.version, BLUE), source, colorize(updated, DIM))


def render_table(packages: Sequence[PackageRecord], out: TextIO | None = None) -> None:
    """
    Render packages as an aligned table.

    Args:
        packages: Packages to render, in display order
        out: Output stream (stdout by default)
    """
    out = out or sys.stdout
    rows = [HEADERS] + [_row(p) for p in packages]
    widths = [max(display_width(row[i]) for row in rows) for i in range(len(HEADERS))]

    for row in rows:
        cells = [pad(cell, widths[i]) for i, cell in enumerate(row)]
        print("  ".join(cells).rstrip(), file=out)


def print_summary(packages: Sequence[PackageRecord], out: TextIO | None = None) -> None:
    """
    Print summary line.

    Args:
        packages: Scanned packages
        out: Output stream (stderr by default)
    """
    out = out or sys.stderr
    custom = sum(1 for p in packages if p.source == CUSTOM_SOURCE)
    versioned = sum(1 for p in packages if p.is_versioned_install)
    unknown = sum(1 for p in packages if p.version == UNKNOWN_VERSION)

    parts = [f"{len(packages)} packages", f"{custom} custom"]
    if versioned:
        parts.append(f"{versioned} versioned ({VERSIONED_MARKER})")
    parts.append(f"{unknown} unknown version")

    print(f"\nInstalled: {', '.join(parts)}", file=out)
