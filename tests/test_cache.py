"""
Tests for the installed package caches (scoop_inventory/cache.py).
"""

import logging

import pytest

from scoop_inventory.cache import DEFAULT_DEBOUNCE_SECONDS, InstalledCache
from scoop_inventory.models import CUSTOM_SOURCE, PackageRecord


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _record(name, version="1.0", source="main", versioned=False):
    return PackageRecord(
        name=name,
        version=version,
        source=source,
        updated="",
        is_versioned_install=versioned,
        info="",
    )


class TestPackageListCache:
    """Tests for the package-list cache."""

    def test_empty_cache_misses(self, caplog):
        cache = InstalledCache()
        with caplog.at_level(logging.INFO, logger="scoop_inventory"):
            assert cache.get_if_fresh("1|a:1") is None
        assert "Cache MISS" in caplog.text

    def test_hit_on_matching_fingerprint(self):
        cache = InstalledCache()
        packages = [_record("a"), _record("b")]
        cache.replace(packages, "2|a:1;b:1")
        assert cache.get_if_fresh("2|a:1;b:1") == packages

    def test_miss_on_changed_fingerprint(self, caplog):
        cache = InstalledCache()
        cache.replace([_record("a")], "1|a:1")
        with caplog.at_level(logging.INFO, logger="scoop_inventory"):
            assert cache.get_if_fresh("1|a:2") is None
        assert "fingerprint mismatch" in caplog.text

    def test_returned_list_is_a_copy(self):
        cache = InstalledCache()
        cache.replace([_record("a")], "fp")
        cache.get_if_fresh("fp").append(_record("b"))
        assert len(cache.cached_packages()) == 1

    def test_replace_swaps_whole_entry(self):
        cache = InstalledCache()
        cache.replace([_record("a")], "fp1")
        cache.replace([_record("b")], "fp2")
        assert cache.get_if_fresh("fp1") is None
        assert [p.name for p in cache.get_if_fresh("fp2")] == ["b"]


class TestVersionCache:
    """Tests for the version-list cache."""

    def _apps_with_versions(self, tmp_path):
        apps = tmp_path / "apps"
        for version in ("1.0.0", "1.1.0", "current"):
            (apps / "mytool" / version).mkdir(parents=True)
        (apps / "git" / "2.44.0").mkdir(parents=True)
        (apps / "git" / "2.43.0").mkdir(parents=True)
        return apps

    def test_rebuild_only_tracks_versioned_installs(self, tmp_path):
        apps = self._apps_with_versions(tmp_path)
        cache = InstalledCache()
        packages = [_record("git"), _record("mytool", "1.1.0", CUSTOM_SOURCE, versioned=True)]
        cache.replace(packages, "fp")
        assert cache.rebuild_version_map(packages, "fp", apps) is True

        assert sorted(cache.get_versions("mytool")) == ["1.0.0", "1.1.0"]
        assert cache.get_versions("git") is None

    def test_lookup_is_case_insensitive(self, tmp_path):
        apps = self._apps_with_versions(tmp_path)
        cache = InstalledCache()
        packages = [_record("mytool", source=CUSTOM_SOURCE, versioned=True)]
        cache.replace(packages, "fp")
        cache.rebuild_version_map(packages, "fp", apps)
        assert sorted(cache.get_versions("MyTool")) == ["1.0.0", "1.1.0"]

    def test_versioned_package_without_directories_is_omitted(self, tmp_path):
        cache = InstalledCache()
        packages = [_record("gone", source=CUSTOM_SOURCE, versioned=True)]
        cache.replace(packages, "fp")
        cache.rebuild_version_map(packages, "fp", tmp_path)
        assert cache.has_versions()
        assert cache.get_versions("gone") is None

    def test_unpopulated(self):
        cache = InstalledCache()
        assert not cache.has_versions()
        assert cache.get_versions("anything") is None

    def test_rebuild_after_invalidation_is_dropped(self, tmp_path):
        apps = self._apps_with_versions(tmp_path)
        cache = InstalledCache()
        packages = [_record("mytool", source=CUSTOM_SOURCE, versioned=True)]
        cache.replace(packages, "fp")
        cache.invalidate_all()

        assert cache.rebuild_version_map(packages, "fp", apps) is False
        assert not cache.has_versions()
        assert cache.fingerprints() == (None, None)

    def test_rebuild_for_superseded_fingerprint_is_dropped(self, tmp_path):
        apps = self._apps_with_versions(tmp_path)
        cache = InstalledCache()
        packages = [_record("mytool", source=CUSTOM_SOURCE, versioned=True)]
        cache.replace(packages, "fp2")

        assert cache.rebuild_version_map(packages, "fp1", apps) is False
        assert cache.fingerprints() == ("fp2", None)


class TestInvalidation:
    """Tests for coordinated invalidation."""

    def test_fingerprints_match_after_rebuild(self, tmp_path):
        cache = InstalledCache()
        packages = [_record("a")]
        cache.replace(packages, "fp")
        cache.rebuild_version_map(packages, "fp", tmp_path)
        assert cache.fingerprints() == ("fp", "fp")

    def test_invalidate_all_clears_both(self, tmp_path):
        cache = InstalledCache()
        cache.replace([_record("a")], "fp")
        cache.rebuild_version_map([], "fp", tmp_path)
        cache.invalidate_all()
        assert cache.fingerprints() == (None, None)
        assert cache.cached_packages() is None
        assert not cache.has_versions()

    def test_invalidate_empty_cache(self, caplog):
        cache = InstalledCache()
        with caplog.at_level(logging.INFO, logger="scoop_inventory"):
            cache.invalidate_all()
        assert "was_cached: False" in caplog.text


class TestDebounce:
    """Tests for refresh debouncing."""

    def test_default_window(self):
        assert InstalledCache().debounce_seconds == DEFAULT_DEBOUNCE_SECONDS == 1.0

    def test_no_refresh_yet(self):
        assert not InstalledCache(clock=FakeClock()).should_debounce_refresh()

    @pytest.mark.parametrize("elapsed,expected", [(0.0, True), (0.5, True), (0.999, True), (1.0, False), (5.0, False)])
    def test_window(self, elapsed, expected):
        clock = FakeClock()
        cache = InstalledCache(clock=clock)
        cache.mark_refresh()
        clock.now += elapsed
        assert cache.should_debounce_refresh() is expected

    def test_custom_window(self):
        clock = FakeClock()
        cache = InstalledCache(debounce_seconds=3.0, clock=clock)
        cache.mark_refresh()
        clock.now += 2.0
        assert cache.should_debounce_refresh()

    def test_zero_window_never_debounces(self):
        clock = FakeClock()
        cache = InstalledCache(debounce_seconds=0.0, clock=clock)
        cache.mark_refresh()
        assert not cache.should_debounce_refresh()
