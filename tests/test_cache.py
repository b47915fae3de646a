"""Tests for the bounded LRU cache."""

import pytest

from codon_structure.exceptions import LoadError
from codon_structure.utils.cache import BoundedCache


class TestBoundedCache:
    def test_evicts_least_recently_used(self):
        cache = BoundedCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        assert cache.get("a") == 1
        cache.put("c", 3)
        assert "a" in cache
        assert "b" not in cache
        assert len(cache) == 2

    def test_get_or_load_calls_loader_once(self):
        cache = BoundedCache(4)
        calls = []

        def loader():
            calls.append(1)
            return "value"

        assert cache.get_or_load("k", loader) == "value"
        assert cache.get_or_load("k", loader) == "value"
        assert len(calls) == 1
        assert cache.hits == 1
        assert cache.misses == 1

    def test_failed_load_is_not_cached(self):
        cache = BoundedCache(4)

        def loader():
            raise LoadError("offline")

        with pytest.raises(LoadError):
            cache.get_or_load("k", loader)
        assert "k" not in cache

    def test_cached_none(self):
        cache = BoundedCache(4)
        cache.put("k", None)
        assert cache.get_or_load("k", lambda: "other") is None

    def test_zero_capacity_disables_caching(self):
        cache = BoundedCache(0)
        cache.put("a", 1)
        assert len(cache) == 0
        assert cache.get("a", "default") == "default"

    def test_negative_capacity(self):
        with pytest.raises(ValueError):
            BoundedCache(-1)

    def test_clear(self):
        cache = BoundedCache(2)
        cache.put("a", 1)
        cache.clear()
        assert len(cache) == 0
