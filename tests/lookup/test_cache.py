"""Tests for the in-memory cache."""

from datetime import timedelta

from lookup.cache import MemoryCache, pattern_to_regex


class TestMemoryCache:
    """Tests for MemoryCache."""

    def test_set_and_get(self, cache):
        """Test stored values are returned."""
        cache.set("token:igdb", "abc")

        assert cache.get("token:igdb") == "abc"
        assert len(cache) == 1

    def test_missing_key(self, cache):
        """Test a miss returns None."""
        assert cache.get("nope") is None

    def test_entry_expires(self, cache, clock):
        """Test entries expire after their TTL."""
        cache.set("barcode:1", {"title": "X"}, timedelta(seconds=30))

        clock.advance(29)
        assert cache.get("barcode:1") == {"title": "X"}
        clock.advance(1)
        assert cache.get("barcode:1") is None
        assert len(cache) == 0

    def test_set_sweeps_expired_entries(self, cache, clock):
        """Test expired entries that are never read again are dropped on set."""
        cache.set("barcode:1", {"title": "X"}, timedelta(days=7))
        cache.set("barcode:2", {"title": "Y"}, timedelta(days=7))
        cache.set("token:igdb", "abc", timedelta(days=30))

        clock.advance(7 * 24 * 3600)
        cache.set("barcode:3", {"title": "Z"}, timedelta(days=7))

        assert len(cache) == 2
        assert cache.get("token:igdb") == "abc"
        assert cache.get("barcode:3") == {"title": "Z"}

    def test_default_ttl(self, clock):
        """Test entries without a TTL use the default."""
        cache = MemoryCache(default_ttl=timedelta(minutes=1), clock=clock)
        cache.set("key", 1)

        clock.advance(61)

        assert cache.get("key") is None

    def test_disabled_cache_stores_nothing(self, clock):
        """Test a disabled cache always misses."""
        cache = MemoryCache(enabled=False, clock=clock)
        cache.set("key", 1)

        assert cache.get("key") is None
        assert len(cache) == 0

    def test_remove(self, cache):
        """Test a single key can be removed."""
        cache.set("key", 1)
        cache.remove("key")
        cache.remove("absent")

        assert cache.get("key") is None

    def test_remove_by_pattern(self, cache):
        """Test wildcard removal only drops matching keys, ignoring case."""
        cache.set("metadata:Books:genres", ["Fantasy"])
        cache.set("metadata:Books:format", ["Paperback"])
        cache.set("metadata:Movies:genres", ["Drama"])

        cache.remove_by_pattern("METADATA:books:*")

        assert cache.get("metadata:Books:genres") is None
        assert cache.get("metadata:Books:format") is None
        assert cache.get("metadata:Movies:genres") == ["Drama"]


class TestPatternToRegex:
    """Tests for pattern_to_regex."""

    def test_wildcard_and_literals(self):
        """Test only '*' is special in patterns."""
        regex = pattern_to_regex("barcode:0123.*")

        assert regex.match("barcode:0123.4567")
        assert not regex.match("barcode:01234")

    def test_anchored(self):
        """Test patterns match whole keys."""
        assert not pattern_to_regex("token:*").match("x-token:igdb")
