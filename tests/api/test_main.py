"""Tests for the lookup HTTP routes."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from api.main import app, cancel_on_disconnect, get_dispatcher
from lookup.cancellation import CancellationToken
from lookup.models import BookResponse
from lookup.types import (
    ConfigurationError,
    LookupCancelledError,
    LookupRejectedError,
    ProviderError,
    QuotaExhaustedError,
    TokenFetchError,
)


@pytest.fixture
def dispatcher():
    """Dispatcher stub injected in place of the configured one."""
    dispatcher = Mock()
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield dispatcher
    app.dependency_overrides.clear()


@pytest.fixture
def client(dispatcher):
    """Test client that skips startup, so no providers are built."""
    return TestClient(app)


class TestLookupRoute:
    """Tests for GET /lookup/{entity_type}/{identifier_type}/{identifier_value}."""

    def test_found(self, client, dispatcher):
        """Test a found item is returned as JSON."""
        dispatcher.lookup.return_value = BookResponse(title="Dune", authors=["Frank Herbert"])

        response = client.get("/lookup/Books/isbn/9780441172719")

        assert response.status_code == 200
        assert response.json()["title"] == "Dune"
        assert response.json()["authors"] == ["Frank Herbert"]
        args, _ = dispatcher.lookup.call_args
        assert args[:3] == ("Books", "isbn", "9780441172719")
        assert isinstance(args[3], CancellationToken)
        assert not args[3].cancelled

    def test_not_found(self, client, dispatcher):
        """Test a miss is a 404."""
        dispatcher.lookup.return_value = None

        assert client.get("/lookup/Books/isbn/0000000000").status_code == 404

    def test_rejected(self, client, dispatcher):
        """Test a rejected request is a 400 carrying the valid identifier types."""
        dispatcher.lookup.side_effect = LookupRejectedError(
            "No strategy found for Books with identifier type: upc. "
            "Valid identifier types for Books are: isbn, lccn, oclc, olid",
            ["isbn", "lccn", "oclc", "olid"],
        )

        response = client.get("/lookup/Books/upc/012345678905")

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["valid_identifier_types"] == ["isbn", "lccn", "oclc", "olid"]
        assert "No strategy found" in detail["message"]

    @pytest.mark.parametrize(
        "error,status",
        [
            (QuotaExhaustedError("daily limit", provider="UPCitemdb"), 429),
            (TokenFetchError("bad credentials", provider="IGDB"), 502),
            (ProviderError("connection refused", provider="TMDB"), 502),
            (ConfigurationError("Movies lookups are not configured"), 503),
            (LookupCancelledError("Lookup was cancelled"), 503),
        ],
    )
    def test_failures(self, client, dispatcher, error, status):
        """Test provider and configuration failures map to status codes."""
        dispatcher.lookup.side_effect = error

        assert client.get("/lookup/Movies/upc/012345678905").status_code == status


class TestOtherRoutes:
    """Tests for the informational routes."""

    def test_capabilities(self, client, dispatcher):
        """Test capabilities are not mistaken for a lookup."""
        dispatcher.capabilities.return_value = {"Books": ["isbn", "lccn", "oclc", "olid"]}

        response = client.get("/lookup/capabilities")

        assert response.status_code == 200
        assert response.json() == {"Books": ["isbn", "lccn", "oclc", "olid"]}
        dispatcher.lookup.assert_not_called()

    def test_health(self, client):
        """Test the health check."""
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client):
        """Test the root endpoint describes the API."""
        assert client.get("/").json()["name"] == "Mediaset Lookup API"


class TestCancelOnDisconnect:
    """Tests for cancelling lookups whose client went away."""

    def test_disconnect_cancels_token(self, monkeypatch):
        """Test a disconnected client cancels the lookup's token."""
        monkeypatch.setattr("api.main.DISCONNECT_POLL_SECONDS", 0)
        request = Mock()
        request.url.path = "/lookup/Movies/upc/012345678905"
        request.is_disconnected = AsyncMock(side_effect=[False, True])
        token = CancellationToken()

        asyncio.run(cancel_on_disconnect(request, token))

        assert token.cancelled
        assert request.is_disconnected.await_count == 2

    def test_stops_once_token_cancelled(self):
        """Test the watcher exits without polling a cancelled token."""
        request = Mock()
        request.is_disconnected = AsyncMock(return_value=False)
        token = CancellationToken()
        token.cancel()

        asyncio.run(cancel_on_disconnect(request, token))

        request.is_disconnected.assert_not_awaited()
