"""
Tests for table and summary rendering (scoop_inventory/render.py).
"""

import io

import pytest

from scoop_inventory import render
from scoop_inventory.models import PackageRecord
from scoop_inventory.render import display_width, pad, print_summary, render_table


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    monkeypatch.setattr(render, "USE_COLOR", False)


def _packages():
    return [
        PackageRecord(name="7zip", version="24.08", source="main", updated="2024-09-01T10:00:00+00:00"),
        PackageRecord(name="mytool", version="1.1.0", source="Custom", is_versioned_install=True),
        PackageRecord(name="broken", version="unknown", source="Custom"),
    ]


class TestDisplayWidth:
    """Tests for terminal width helpers."""

    def test_ascii(self):
        assert display_width("git") == 3

    def test_ansi_ignored(self):
        assert display_width("\033[34m1.0\033[0m") == 3

    def test_wide_characters(self):
        assert display_width("日本") == 4

    def test_control_characters_fall_back_to_len(self):
        assert display_width("a\x07b") == 3

    def test_pad(self):
        assert pad("ab", 4) == "ab  "
        assert pad("abcdef", 4) == "abcdef"


class TestRenderTable:
    """Tests for render_table."""

    def test_header_and_rows(self):
        out = io.StringIO()
        render_table(_packages(), out=out)
        lines = out.getvalue().splitlines()

        assert lines[0].split() == ["name", "version", "source", "updated"]
        assert len(lines) == 4
        assert lines[1].split() == ["7zip", "24.08", "main", "2024-09-01", "10:00:00"]
        assert "mytool ⧉" in lines[2]

    def test_columns_aligned(self):
        out = io.StringIO()
        render_table(_packages(), out=out)
        lines = out.getvalue().splitlines()
        version_column = lines[0].index("version")
        assert lines[1][version_column:].startswith("24.08")
        assert lines[3][version_column:].startswith("unknown")

    def test_empty(self):
        out = io.StringIO()
        render_table([], out=out)
        assert out.getvalue().split() == ["name", "version", "source", "updated"]

    def test_custom_source_colored(self, monkeypatch):
        monkeypatch.setattr(render, "USE_COLOR", True)
        out = io.StringIO()
        render_table(_packages()[1:2], out=out)
        assert f"{render.YELLOW}Custom{render.RESET}" in out.getvalue()


class TestPrintSummary:
    """Tests for print_summary."""

    def test_summary_counts(self):
        out = io.StringIO()
        print_summary(_packages(), out=out)
        assert out.getvalue() == "\nInstalled: 3 packages, 2 custom, 1 versioned (⧉), 1 unknown version\n"

    def test_summary_without_versioned(self):
        out = io.StringIO()
        print_summary(_packages()[:1], out=out)
        assert out.getvalue() == "\nInstalled: 1 packages, 0 custom, 0 unknown version\n"
