"""Tests for the per-entity lookup strategies."""

from unittest.mock import Mock

import pytest

from lookup.models import FetchResult
from lookup.strategies.book import BookLookupStrategy
from lookup.strategies.game import GameLookupStrategy
from lookup.strategies.movie import MovieLookupStrategy
from lookup.strategies.music import MusicLookupStrategy
from lookup.types import IdentifierType, ProviderError, QuotaExhaustedError, TokenFetchError

UPC = IdentifierType.UPC


def upc_item(title, **extra):
    return FetchResult.success({"code": "OK", "items": [{"title": title, **extra}]})


class TestBookLookupStrategy:
    """Tests for BookLookupStrategy."""

    def test_supported_types(self):
        """Test books accept the Read API identifiers only."""
        strategy = BookLookupStrategy(Mock())

        assert strategy.supports_identifier_type(IdentifierType.ISBN)
        assert strategy.supports_identifier_type(IdentifierType.OLID)
        assert not strategy.supports_identifier_type(UPC)

    def test_lookup_normalizes_record(self):
        """Test a Read API record becomes a BookResponse."""
        client = Mock()
        client.get_readable_book.return_value = FetchResult.success(
            {"records": {"/books/OL1M": {"data": {"title": "Dune", "authors": [{"name": "Frank Herbert"}]}}}}
        )

        book = BookLookupStrategy(client).lookup(IdentifierType.ISBN, "9780441172719")

        assert book.title == "Dune"
        assert book.authors == ["Frank Herbert"]
        client.get_readable_book.assert_called_once_with(IdentifierType.ISBN, "9780441172719", None)

    def test_not_found(self):
        """Test an unknown identifier gives None."""
        client = Mock()
        client.get_readable_book.return_value = FetchResult.success({"records": {}, "items": []})

        assert BookLookupStrategy(client).lookup(IdentifierType.ISBN, "0000000000") is None


class TestMovieLookupStrategy:
    """Tests for MovieLookupStrategy."""

    @pytest.fixture
    def upcitemdb(self):
        """UPCitemdb client returning a Blu-ray listing."""
        client = Mock()
        client.get_item_by_code.return_value = upc_item(
            "The Matrix (Blu-ray) (1999)", category="Media > DVDs & Videos"
        )
        return client

    @pytest.fixture
    def tmdb(self):
        """TMDB client with a search hit and details."""
        client = Mock()
        client.search_movie.return_value = FetchResult.success(
            {"results": [{"id": 1, "title": "The Matrix Reloaded"}, {"id": 603, "title": "The Matrix"}]}
        )
        client.get_movie_details.return_value = FetchResult.success(
            {"id": 603, "title": "The Matrix", "genres": [{"name": "Action"}], "vote_average": 8.2}
        )
        return client

    def test_lookup_chain(self, upcitemdb, tmdb):
        """Test barcode title is cleaned, searched with its year and detailed."""
        movie = MovieLookupStrategy(upcitemdb, tmdb).lookup(UPC, "085391163545")

        tmdb.search_movie.assert_called_once_with("The Matrix", 1999, None)
        tmdb.get_movie_details.assert_called_once_with(603, None)
        assert movie.title == "The Matrix"
        assert movie.format == "Blu-ray"
        assert movie.genres == ["Action"]

    def test_first_result_used_without_exact_match(self, upcitemdb, tmdb):
        """Test TMDB's first result is used when no title matches exactly."""
        tmdb.search_movie.return_value = FetchResult.success({"results": [{"id": 42, "title": "Matrix"}]})

        MovieLookupStrategy(upcitemdb, tmdb).lookup(UPC, "085391163545")

        tmdb.get_movie_details.assert_called_once_with(42, None)

    def test_empty_barcode_skips_tmdb(self, tmdb):
        """Test an unknown barcode returns None without calling TMDB."""
        upcitemdb = Mock()
        upcitemdb.get_item_by_code.return_value = FetchResult.success({"code": "OK", "items": []})

        assert MovieLookupStrategy(upcitemdb, tmdb).lookup(UPC, "000000000000") is None
        tmdb.search_movie.assert_not_called()

    def test_barcode_fallback_used(self, tmdb):
        """Test Barcode Lookup is asked when UPCitemdb has no listing."""
        upcitemdb = Mock()
        upcitemdb.get_item_by_code.return_value = FetchResult.not_found()
        fallback = Mock()
        fallback.lookup_barcode.return_value = FetchResult.success({"title": "The Matrix DVD"})

        movie = MovieLookupStrategy(upcitemdb, tmdb, fallback_barcode_client=fallback).lookup(
            UPC, "085391163545"
        )

        tmdb.search_movie.assert_called_once_with("The Matrix", None, None)
        assert movie.format == "DVD"

    def test_empty_search_skips_details(self, upcitemdb, tmdb):
        """Test no search results means no details call."""
        tmdb.search_movie.return_value = FetchResult.success({"results": []})

        assert MovieLookupStrategy(upcitemdb, tmdb).lookup(UPC, "085391163545") is None
        tmdb.get_movie_details.assert_not_called()

    def test_barcode_quota_exhaustion_propagates(self, tmdb):
        """Test a spent UPCitemdb quota aborts the lookup."""
        upcitemdb = Mock()
        upcitemdb.get_item_by_code.side_effect = QuotaExhaustedError("spent", provider="UPCitemdb")

        with pytest.raises(QuotaExhaustedError):
            MovieLookupStrategy(upcitemdb, tmdb).lookup(UPC, "085391163545")

    @pytest.mark.parametrize(
        "error",
        [
            QuotaExhaustedError("spent", provider="UPCitemdb"),
            ProviderError("connection refused", provider="UPCitemdb"),
        ],
    )
    def test_barcode_failure_uses_fallback(self, tmdb, error):
        """Test Barcode Lookup is asked when UPCitemdb raises."""
        upcitemdb = Mock()
        upcitemdb.get_item_by_code.side_effect = error
        fallback = Mock()
        fallback.is_available = True
        fallback.lookup_barcode.return_value = FetchResult.success({"title": "The Matrix DVD"})

        movie = MovieLookupStrategy(upcitemdb, tmdb, fallback_barcode_client=fallback).lookup(
            UPC, "085391163545"
        )

        fallback.lookup_barcode.assert_called_once_with("085391163545", None)
        tmdb.search_movie.assert_called_once_with("The Matrix", None, None)
        assert movie is not None

    def test_barcode_failure_with_unavailable_fallback_propagates(self, tmdb):
        """Test the UPCitemdb error surfaces when Barcode Lookup has no key."""
        upcitemdb = Mock()
        upcitemdb.get_item_by_code.side_effect = QuotaExhaustedError("spent", provider="UPCitemdb")
        fallback = Mock()
        fallback.is_available = False

        with pytest.raises(QuotaExhaustedError):
            MovieLookupStrategy(upcitemdb, tmdb, fallback_barcode_client=fallback).lookup(
                UPC, "085391163545"
            )
        fallback.lookup_barcode.assert_not_called()


class TestGameLookupStrategy:
    """Tests for GameLookupStrategy."""

    @pytest.fixture
    def upcitemdb(self):
        """UPCitemdb client returning a game listing."""
        client = Mock()
        client.get_item_by_code.return_value = upc_item("Halo 3 - Xbox 360 (Disc)", category="Video Games")
        return client

    @pytest.fixture
    def igdb(self):
        """IGDB client with one search hit."""
        client = Mock()
        client.search_game.return_value = FetchResult.success(
            [{"id": 7, "name": "Halo Wars"}, {"id": 8, "name": "Halo 3"}]
        )
        client.get_game_details.return_value = FetchResult.success(
            {"id": 8, "name": "Halo 3", "platforms": [{"name": "Xbox 360"}]}
        )
        return client

    @pytest.fixture
    def giantbomb(self):
        """GiantBomb client with one search hit."""
        client = Mock()
        client.search_game.return_value = FetchResult.success(
            [{"name": "Halo 3", "api_detail_url": "https://www.giantbomb.com/api/game/3030-1/"}]
        )
        client.get_game_details.return_value = FetchResult.success({"name": "Halo 3"})
        return client

    def test_requires_a_game_client(self, upcitemdb):
        """Test at least one game catalog is needed."""
        with pytest.raises(ValueError):
            GameLookupStrategy(upcitemdb)

    def test_igdb_preferred(self, upcitemdb, igdb, giantbomb):
        """Test IGDB answers when configured and GiantBomb is untouched."""
        game = GameLookupStrategy(upcitemdb, igdb, giantbomb).lookup(UPC, "882224553324")

        igdb.search_game.assert_called_once_with("Halo 3", None)
        igdb.get_game_details.assert_called_once_with(8, None)
        giantbomb.search_game.assert_not_called()
        assert game.title == "Halo 3"
        assert game.platform == "Xbox 360"
        assert game.format == "Disc"

    def test_giantbomb_used_without_igdb(self, upcitemdb, giantbomb):
        """Test GiantBomb is the catalog when IGDB is not configured."""
        game = GameLookupStrategy(upcitemdb, None, giantbomb).lookup(UPC, "882224553324")

        giantbomb.get_game_details.assert_called_once_with(
            "https://www.giantbomb.com/api/game/3030-1/", None
        )
        assert game.title == "Halo 3"

    def test_fallback_on_igdb_error_result(self, upcitemdb, igdb, giantbomb):
        """Test a transient IGDB failure falls back to GiantBomb."""
        igdb.search_game.return_value = FetchResult.rate_limited()

        game = GameLookupStrategy(upcitemdb, igdb, giantbomb).lookup(UPC, "882224553324")

        giantbomb.search_game.assert_called_once()
        assert game.title == "Halo 3"

    def test_fallback_on_token_failure(self, upcitemdb, igdb, giantbomb):
        """Test an IGDB token failure falls back to GiantBomb."""
        igdb.search_game.side_effect = TokenFetchError("bad credentials", provider="IGDB")

        game = GameLookupStrategy(upcitemdb, igdb, giantbomb).lookup(UPC, "882224553324")

        assert game.title == "Halo 3"

    def test_provider_error_without_fallback_propagates(self, upcitemdb, igdb):
        """Test IGDB errors propagate when there is nothing to fall back to."""
        igdb.search_game.side_effect = ProviderError("connection refused", provider="IGDB")

        with pytest.raises(ProviderError):
            GameLookupStrategy(upcitemdb, igdb).lookup(UPC, "882224553324")

    def test_quota_exhaustion_never_falls_back(self, upcitemdb, igdb, giantbomb):
        """Test an IGDB quota exhaustion propagates."""
        igdb.search_game.side_effect = QuotaExhaustedError("spent", provider="IGDB")

        with pytest.raises(QuotaExhaustedError):
            GameLookupStrategy(upcitemdb, igdb, giantbomb).lookup(UPC, "882224553324")
        giantbomb.search_game.assert_not_called()

    def test_igdb_no_results_is_final(self, upcitemdb, igdb, giantbomb):
        """Test an empty IGDB search returns None without GiantBomb."""
        igdb.search_game.return_value = FetchResult.success([])

        assert GameLookupStrategy(upcitemdb, igdb, giantbomb).lookup(UPC, "882224553324") is None
        giantbomb.search_game.assert_not_called()
        igdb.get_game_details.assert_not_called()


class TestMusicLookupStrategy:
    """Tests for MusicLookupStrategy."""

    def test_lookup_chain(self):
        """Test barcode search is followed by release details."""
        client = Mock()
        client.get_release_by_barcode.return_value = FetchResult.success({"id": "r1", "title": "The Wall"})
        client.get_release_by_id.return_value = FetchResult.success(
            {"title": "The Wall", "artist-credit": [{"name": "Pink Floyd"}]}
        )

        music = MusicLookupStrategy(client).lookup(UPC, "077774644228")

        client.get_release_by_id.assert_called_once_with("r1", None)
        assert music.artist == "Pink Floyd"

    def test_no_release_skips_details(self):
        """Test an empty barcode search returns None without the details call."""
        client = Mock()
        client.get_release_by_barcode.return_value = FetchResult.not_found()

        assert MusicLookupStrategy(client).lookup(UPC, "077774644228") is None
        client.get_release_by_id.assert_not_called()
