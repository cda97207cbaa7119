# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the durable caches."""

from pathlib import Path

import pytest

from src.infrastructure.cache import CacheError, DurableCache, FileCache, MemoryCache


class TestFileCache:
    """Tests for FileCache."""

    def test_get_missing_key_returns_none(self, tmp_path: Path) -> None:
        """Test that unknown keys read as None."""
        cache = FileCache(tmp_path)

        assert cache.get("eduverse_data") is None

    def test_set_then_get(self, tmp_path: Path) -> None:
        """Test that written values can be read back."""
        cache = FileCache(tmp_path)

        cache.set("eduverse_data", '{"batches": []}')

        assert cache.get("eduverse_data") == '{"batches": []}'

    def test_overwrite_replaces_value(self, tmp_path: Path) -> None:
        """Test that a second write replaces the first."""
        cache = FileCache(tmp_path)
        cache.set("key", "first")

        cache.set("key", "second")

        assert cache.get("key") == "second"

    def test_creates_directory_lazily(self, tmp_path: Path) -> None:
        """Test that the cache directory is created on first write."""
        directory = tmp_path / "nested" / "cache"
        cache = FileCache(directory)
        assert not directory.exists()

        cache.set("key", "value")

        assert directory.is_dir()

    def test_survives_new_instance(self, tmp_path: Path) -> None:
        """Test that values persist across cache instances."""
        FileCache(tmp_path).set("eduverse_last_sync", "2025-01-01T00:00:00+00:00")

        assert FileCache(tmp_path).get("eduverse_last_sync") == "2025-01-01T00:00:00+00:00"

    def test_no_temporary_files_left_behind(self, tmp_path: Path) -> None:
        """Test that atomic writes clean up after themselves."""
        cache = FileCache(tmp_path)

        cache.set("a", "1")
        cache.set("b", "2")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.cache", "b.cache"]

    def test_keys_are_escaped(self, tmp_path: Path) -> None:
        """Test that keys cannot escape the cache directory."""
        cache = FileCache(tmp_path)

        cache.set("../outside", "value")

        assert cache.get("../outside") == "value"
        assert not (tmp_path.parent / "outside.cache").exists()

    def test_unicode_round_trip(self, tmp_path: Path) -> None:
        """Test that non-ASCII content is preserved."""
        cache = FileCache(tmp_path)

        cache.set("key", "भौतिकी ✓")

        assert cache.get("key") == "भौतिकी ✓"

    def test_empty_key_rejected(self, tmp_path: Path) -> None:
        """Test that an empty key raises CacheError."""
        cache = FileCache(tmp_path)

        with pytest.raises(CacheError):
            cache.set("", "value")

    def test_unreadable_file_raises_cache_error(self, tmp_path: Path) -> None:
        """Test that invalid bytes surface as CacheError."""
        cache = FileCache(tmp_path)
        (tmp_path / "key.cache").write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(CacheError) as exc_info:
            cache.get("key")

        assert exc_info.value.original_error is not None

    def test_write_into_file_path_raises_cache_error(self, tmp_path: Path) -> None:
        """Test that a directory that cannot be created surfaces as CacheError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        cache = FileCache(blocker / "cache")

        with pytest.raises(CacheError):
            cache.set("key", "value")

    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        """Test that FileCache is a DurableCache."""
        assert isinstance(FileCache(tmp_path), DurableCache)


class TestMemoryCache:
    """Tests for MemoryCache."""

    def test_initial_values(self) -> None:
        """Test that initial values are readable and copied."""
        initial = {"key": "value"}
        cache = MemoryCache(initial)
        initial["key"] = "changed"

        assert cache.get("key") == "value"
        assert "key" in cache
        assert len(cache) == 1

    def test_clear(self) -> None:
        """Test that clear removes everything."""
        cache = MemoryCache({"a": "1", "b": "2"})

        cache.clear()

        assert len(cache) == 0
        assert cache.get("a") is None

    def test_satisfies_protocol(self) -> None:
        """Test that MemoryCache is a DurableCache."""
        assert isinstance(MemoryCache(), DurableCache)
