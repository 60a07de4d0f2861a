"""
Tests for the inventory command line (inventory.py).
"""

import json
import sys
from pathlib import Path

import pytest

import inventory


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """No config files and no Scoop installation outside the test tree."""
    monkeypatch.setattr("scoop_inventory.config.CONFIG_LOCATIONS", [])
    for var in ("SCOOP", "SCOOP_GLOBAL", "ProgramData", "SCOOP_INVENTORY_DEBUG"):
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)


@pytest.fixture
def populated(scoop_tree):
    scoop_tree.add_package("git", "2.44.0", bucket="main", description="Distributed VCS")
    scoop_tree.add_package("7zip", "24.08", bucket="main")
    scoop_tree.add_version_dir("mytool", "1.0.0", {"version": "1.0.0"}, None, mtime=1_000)
    scoop_tree.add_version_dir("mytool", "1.1.0", {"version": "1.1.0"}, None, mtime=2_000)
    return scoop_tree


def run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["inventory.py", *args])
    return inventory.main()


class TestList:
    """Tests for the default listing."""

    def test_json(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root), "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert [p["name"] for p in data] == ["7zip", "git", "mytool"]
        git = data[1]
        assert git["version"] == "2.44.0"
        assert git["source"] == "main"
        assert git["info"] == "Distributed VCS"
        assert git["is_installed"] is True
        assert data[2]["is_versioned_install"] is True

    def test_table(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root)) == 0
        captured = capsys.readouterr()
        assert captured.out.splitlines()[0].split() == ["name", "version", "source", "updated"]
        assert "git" in captured.out
        assert "Installed: 3 packages, 1 custom" in captured.err

    def test_refresh(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root), "--refresh", "--json") == 0
        assert len(json.loads(capsys.readouterr().out)) == 3

    def test_missing_apps_directory(self, monkeypatch, capsys, tmp_path):
        assert run(monkeypatch, "--root", str(tmp_path / "nowhere")) == 1
        assert "Scoop apps directory not found" in capsys.readouterr().err

    def test_bad_config_path(self, monkeypatch, capsys, tmp_path):
        assert run(monkeypatch, "--config", str(tmp_path / "missing.yml")) == 1
        assert "Could not load config" in capsys.readouterr().err

    def test_root_from_config(self, monkeypatch, capsys, populated, tmp_path):
        config = tmp_path / "inventory.yml"
        config.write_text(f"version: 1\nscoop_path: '{populated.root}'\n")
        assert run(monkeypatch, "--config", str(config), "--json") == 0
        assert len(json.loads(capsys.readouterr().out)) == 3


class TestPath:
    """Tests for --path."""

    def test_installed(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root), "--path", "git") == 0
        assert capsys.readouterr().out.strip() == str(populated.apps / "git")

    def test_not_installed(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root), "--path", "nope") == 1
        assert "not installed" in capsys.readouterr().err


class TestVersions:
    """Tests for --versions."""

    def test_versioned_install(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root), "--versions", "mytool") == 0
        lines = sorted(capsys.readouterr().out.splitlines())
        assert lines[0].startswith("  1.0.0\t")
        assert lines[1].startswith("* 1.1.0\t")

    def test_versioned_install_json(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root), "--versions", "MyTool", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert data["name"] == "mytool"
        assert data["current_version"] == "1.1.0"
        assert sorted(v["version"] for v in data["available_versions"]) == ["1.0.0", "1.1.0"]

    def test_not_versioned(self, monkeypatch, capsys, populated):
        assert run(monkeypatch, "--root", str(populated.root), "--versions", "git") == 1
        assert "not a versioned install" in capsys.readouterr().err
