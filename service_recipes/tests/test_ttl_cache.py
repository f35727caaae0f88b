"""
Unit tests for the recipe TTL cache.
"""

import pytest

from service_recipes.app.caching.ttl_cache import TTLCache
from shared.test_helpers import FakeClock


class TestGenerateKey:
    """Cache key derivation."""

    def test_params_are_sorted_by_name(self):
        key = TTLCache.generate_key("recipes", {"page": 1, "limit": 12, "category": "makanan"})

        assert key == "recipes::category:makanan|limit:12|page:1"

    def test_insertion_order_does_not_matter(self):
        first = TTLCache.generate_key("recipes", {"page": 2, "order": "asc", "sort_by": "name"})
        second = TTLCache.generate_key("recipes", {"sort_by": "name", "page": 2, "order": "asc"})

        assert first == second

    def test_different_values_give_different_keys(self):
        assert TTLCache.generate_key("recipes", {"page": 1}) != TTLCache.generate_key("recipes", {"page": 2})

    def test_extra_parameter_gives_different_key(self):
        base = TTLCache.generate_key("recipes", {"page": 1})
        extended = TTLCache.generate_key("recipes", {"page": 1, "difficulty": "mudah"})

        assert base != extended

    def test_separators_inside_values_do_not_collide(self):
        typed = TTLCache.generate_key("recipes", {"search": "teh|sort_by:name"})
        split = TTLCache.generate_key("recipes", {"search": "teh", "sort_by": "name"})

        assert typed != split
        assert split == "recipes::search:teh|sort_by:name"

    def test_backslash_in_value_does_not_collide_with_escape(self):
        first = TTLCache.generate_key("recipes", {"search": "a\\", "page": "1"})
        second = TTLCache.generate_key("recipes", {"search": "a\\|page:1"})

        assert first != second

    @pytest.mark.parametrize("params", [None, {}])
    def test_empty_params_return_prefix_unchanged(self, params):
        assert TTLCache.generate_key("recipes", params) == "recipes"


class TestTTLCache:
    """Test cases for TTLCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return TTLCache(default_ttl=300, clock=clock)

    def test_get_returns_value_before_expiry(self, cache, clock):
        cache.set("recipe:1", {"id": "1"}, ttl=10)
        clock.advance(9.999)

        assert cache.get("recipe:1") == {"id": "1"}

    def test_get_reports_absent_once_ttl_elapsed(self, cache, clock):
        cache.set("recipe:1", {"id": "1"}, ttl=10)
        clock.advance(10)

        assert cache.get("recipe:1") is None
        assert len(cache) == 0

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_non_positive_ttl_is_immediately_stale(self, cache, ttl):
        cache.set("recipe:1", "value", ttl=ttl)

        assert cache.get("recipe:1") is None

    def test_default_ttl_applies_when_omitted(self, cache, clock):
        cache.set("recipes", ["a"])
        clock.advance(299)
        assert cache.get("recipes") == ["a"]

        clock.advance(1)
        assert cache.get("recipes") is None

    def test_set_overwrites_value_and_expiry(self, cache, clock):
        cache.set("recipe:1", "old", ttl=5)
        clock.advance(4)
        cache.set("recipe:1", "new", ttl=5)
        clock.advance(4)

        assert cache.get("recipe:1") == "new"

    def test_falsy_values_are_hits(self, cache):
        cache.set("recipes::page:9", [], ttl=60)

        assert cache.get("recipes::page:9", "absent") == []
        assert cache.has("recipes::page:9")

    def test_get_default_for_unknown_key(self, cache):
        assert cache.get("missing") is None
        assert cache.get("missing", "fallback") == "fallback"

    def test_has_evicts_stale_entry(self, cache, clock):
        cache.set("recipe:1", "value", ttl=1)
        clock.advance(2)

        assert not cache.has("recipe:1")
        assert cache.get_stats()["total"] == 0

    def test_contains_mirrors_has(self, cache):
        cache.set("recipe:1", "value", ttl=1)

        assert "recipe:1" in cache
        assert "recipe:2" not in cache
        assert 42 not in cache

    def test_invalidate_removes_single_key(self, cache):
        cache.set("recipe:1", "one", ttl=60)
        cache.set("recipe:2", "two", ttl=60)

        cache.invalidate("recipe:1")
        cache.invalidate("recipe:404")

        assert cache.get("recipe:1") is None
        assert cache.get("recipe:2") == "two"

    def test_invalidate_prefix_removes_exactly_matching_keys(self, cache):
        keys = [
            "recipes",
            "recipes::page:1",
            "recipes::category:minuman|page:2",
            "recipe:1",
            "recipe:12",
            "profile",
        ]
        for key in keys:
            cache.set(key, key, ttl=60)

        removed = cache.invalidate_prefix("recipes")

        assert removed == 3
        assert [key for key in keys if cache.has(key)] == ["recipe:1", "recipe:12", "profile"]

    def test_invalidate_prefix_includes_expired_entries(self, cache, clock):
        cache.set("recipes::page:1", "stale", ttl=1)
        clock.advance(5)

        assert cache.invalidate_prefix("recipes") == 1
        assert len(cache) == 0

    def test_clear(self, cache):
        cache.set("recipes", "a", ttl=60)
        cache.set("recipe:1", "b", ttl=60)

        cache.clear()

        assert cache.get_stats() == {"total": 0, "valid": 0, "expired": 0}

    def test_stats_evaluate_expiry_without_evicting(self, cache, clock):
        for index in range(3):
            cache.set(f"recipe:{index}", index, ttl=1.0)
        clock.advance(1.5)

        assert cache.get_stats() == {"total": 3, "valid": 0, "expired": 3}
        # Nothing was evicted by computing stats
        assert cache.get_stats()["total"] == 3

    def test_stats_mix_valid_and_expired(self, cache, clock):
        cache.set("recipe:1", 1, ttl=1)
        cache.set("recipe:2", 2, ttl=100)
        clock.advance(2)

        assert cache.get_stats() == {"total": 2, "valid": 1, "expired": 1}

    def test_accepts_arbitrary_values(self, cache):
        malformed = object()
        cache.set("", malformed, ttl=60)

        assert cache.get("") is malformed

    @pytest.mark.parametrize("prefix", [None, 42, b"recipes"])
    def test_invalidate_prefix_ignores_non_string_prefix(self, cache, prefix):
        cache.set("recipes::page:1", "listing", ttl=60)

        assert cache.invalidate_prefix(prefix) == 0
        assert cache.get("recipes::page:1") == "listing"

    @pytest.mark.parametrize("key", [["recipe", 1], {"id": "1"}])
    def test_unhashable_keys_are_accepted(self, cache, key):
        cache.set(key, "value", ttl=60)

        assert cache.get(key) == "value"
        assert cache.has(key)

        cache.invalidate(key)
        assert cache.get(key) is None


class TestTTLCacheCapacity:
    """Optional LRU bound."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    def test_unbounded_by_default(self, clock):
        cache = TTLCache(clock=clock)
        for index in range(500):
            cache.set(f"recipes::page:{index}", index, ttl=60)

        assert len(cache) == 500

    def test_evicts_least_recently_used(self, clock):
        cache = TTLCache(max_entries=2, clock=clock)
        cache.set("recipe:1", 1, ttl=60)
        cache.set("recipe:2", 2, ttl=60)
        cache.get("recipe:1")

        cache.set("recipe:3", 3, ttl=60)

        assert cache.has("recipe:1")
        assert not cache.has("recipe:2")
        assert cache.has("recipe:3")

    def test_purges_expired_before_evicting_live_entries(self, clock):
        cache = TTLCache(max_entries=2, clock=clock)
        cache.set("recipe:1", 1, ttl=60)
        cache.set("recipe:2", 2, ttl=1)
        clock.advance(2)

        cache.set("recipe:3", 3, ttl=60)

        assert cache.get("recipe:1") == 1
        assert cache.get("recipe:3") == 3

    def test_overwrite_at_capacity_keeps_other_entries(self, clock):
        cache = TTLCache(max_entries=2, clock=clock)
        cache.set("recipe:1", 1, ttl=60)
        cache.set("recipe:2", 2, ttl=60)

        cache.set("recipe:1", "updated", ttl=60)

        assert cache.get("recipe:1") == "updated"
        assert cache.get("recipe:2") == 2
