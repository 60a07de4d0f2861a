"""
Shared fixtures: builders for on-disk Scoop layouts.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def set_mtime(path: Path, seconds: float) -> None:
    os.utime(path, (seconds, seconds))


class ScoopTree:
    """Builds a fake Scoop root with apps/, buckets/ and cache/."""

    def __init__(self, root: Path):
        self.root = root
        self.apps = root / "apps"
        self.buckets = root / "buckets"
        for path in (self.apps, self.buckets, root / "cache"):
            path.mkdir(parents=True, exist_ok=True)

    def add_version_dir(
        self,
        name: str,
        dirname: str,
        manifest: dict | None = None,
        install: dict | None = None,
        mtime: float | None = None,
    ) -> Path:
        version_dir = self.apps / name / dirname
        version_dir.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            write_json(version_dir / "manifest.json", manifest)
        if install is not None:
            write_json(version_dir / "install.json", install)
        if mtime is not None:
            for child in version_dir.iterdir():
                set_mtime(child, mtime)
            set_mtime(version_dir, mtime)
        return version_dir

    def add_package(
        self,
        name: str,
        version: str = "1.0.0",
        bucket: str | None = "main",
        description: str | None = None,
        mtime: float | None = None,
    ) -> Path:
        """Regular install: apps/<name>/<version> plus a `current` directory."""
        manifest = {"version": version}
        if description is not None:
            manifest["description"] = description
        install = {"bucket": bucket} if bucket else {}
        self.add_version_dir(name, version, manifest, install, mtime)
        self.add_version_dir(name, "current", manifest, install, mtime)
        return self.apps / name

    def add_bucket_manifest(self, bucket: str, package_name: str) -> Path:
        return write_json(
            self.buckets / bucket / "bucket" / f"{package_name}.json",
            {"version": "0.0.0"},
        )


@pytest.fixture
def scoop_tree(tmp_path) -> ScoopTree:
    """Empty Scoop root under tmp_path."""
    return ScoopTree(tmp_path / "scoop")


@pytest.fixture(autouse=True)
def inventory_logs_propagate():
    """Let caplog see scoop_inventory records even after setup_logging() ran."""
    logger = logging.getLogger("scoop_inventory")
    propagate, handlers, level = logger.propagate, list(logger.handlers), logger.level
    logger.propagate = True
    yield
    logger.propagate = propagate
    logger.handlers[:] = handlers
    logger.setLevel(level)
