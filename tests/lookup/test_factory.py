"""Tests for building the lookup service from configuration."""

from unittest.mock import Mock

import pytest

from lookup.cache import MemoryCache
from lookup.clients.upcitemdb import UpcItemDbClient
from lookup.factory import build_cache, build_dispatcher, build_lookup_service
from lookup.types import EntityType

CREDENTIALS = (
    "BARCODE_LOOKUP_API_KEY",
    "TMDB_API_KEY",
    "TMDB_BEARER_TOKEN",
    "IGDB_CLIENT_ID",
    "IGDB_CLIENT_SECRET",
    "GIANTBOMB_API_KEY",
)


@pytest.fixture
def no_credentials(monkeypatch):
    """Unset every provider credential."""
    for name in CREDENTIALS:
        monkeypatch.delenv(name, raising=False)


class TestBuildLookupService:
    """Tests for build_lookup_service."""

    def test_keyless_providers_always_configured(self, no_credentials):
        """Test books and music work without any credentials."""
        service = build_lookup_service(cache=MemoryCache(), session=Mock())

        assert set(service.dispatcher.capabilities()) == {"Books", "Musics"}
        assert [client.name for client in service.clients] == ["OpenLibrary", "UPCitemdb", "MusicBrainz"]

    def test_tmdb_enables_movies(self, no_credentials, monkeypatch):
        """Test a TMDB key enables movie lookups."""
        monkeypatch.setenv("TMDB_API_KEY", "key")

        service = build_lookup_service(cache=MemoryCache(), session=Mock())

        assert service.dispatcher.capabilities()["Movies"] == ["upc", "ean"]

    def test_igdb_enables_games(self, no_credentials, monkeypatch):
        """Test IGDB credentials enable game lookups."""
        monkeypatch.setenv("IGDB_CLIENT_ID", "client")
        monkeypatch.setenv("IGDB_CLIENT_SECRET", "secret")

        service = build_lookup_service(cache=MemoryCache(), session=Mock())

        assert "Games" in service.dispatcher.capabilities()
        assert "IGDB" in [client.name for client in service.clients]

    def test_giantbomb_alone_enables_games(self, no_credentials, monkeypatch):
        """Test GiantBomb alone is enough for game lookups."""
        monkeypatch.setenv("GIANTBOMB_API_KEY", "key")

        service = build_lookup_service(cache=MemoryCache(), session=Mock())

        assert "Games" in service.dispatcher.capabilities()

    def test_movies_and_games_share_upcitemdb(self, no_credentials, monkeypatch):
        """Test one UPCitemdb client, and so one quota, serves both strategies."""
        monkeypatch.setenv("TMDB_API_KEY", "key")
        monkeypatch.setenv("GIANTBOMB_API_KEY", "key")

        service = build_lookup_service(cache=MemoryCache(), session=Mock())

        strategies = service.dispatcher.strategies.values()
        barcode_clients = {id(s.barcode_client) for s in strategies if hasattr(s, "barcode_client")}
        assert len(barcode_clients) == 1
        assert sum(isinstance(c, UpcItemDbClient) for c in service.clients) == 1

    def test_barcode_lookup_fallback_wired(self, no_credentials, monkeypatch):
        """Test the Barcode Lookup key adds the fallback barcode client."""
        monkeypatch.setenv("TMDB_API_KEY", "key")
        monkeypatch.setenv("BARCODE_LOOKUP_API_KEY", "key")

        service = build_lookup_service(cache=MemoryCache(), session=Mock())

        movie_strategy = service.dispatcher.strategies[EntityType.MOVIES]
        assert movie_strategy.fallback_barcode_client is not None

    def test_close_keeps_injected_session(self, no_credentials):
        """Test closing the service leaves a shared session to its owner."""
        session = Mock()

        with build_lookup_service(cache=MemoryCache(), session=session):
            pass

        session.close.assert_not_called()

    def test_build_dispatcher(self, no_credentials):
        """Test the dispatcher shortcut."""
        dispatcher = build_dispatcher(cache=MemoryCache(), session=Mock())

        assert "Books" in dispatcher.capabilities()


class TestBuildCache:
    """Tests for build_cache."""

    def test_cache_from_env(self, monkeypatch):
        """Test cache settings come from the environment."""
        monkeypatch.setenv("CACHE_ENABLED", "false")
        monkeypatch.setenv("CACHE_DEFAULT_TTL_MINUTES", "3")

        cache = build_cache()

        assert cache.enabled is False
        assert cache.default_ttl.total_seconds() == 180
