"""Builds provider clients, strategies and the dispatcher from configuration."""

from dataclasses import dataclass, field
from datetime import timedelta

import requests

from common.env import env
from common.logger import get_logger

from .cache import CacheService, MemoryCache
from .cancellation import Clock
from .clients.barcode_lookup import BarcodeLookupClient
from .clients.base import RateLimitedClient
from .clients.giantbomb import GiantBombClient
from .clients.igdb import IgdbClient
from .clients.igdb_token import IgdbTokenService
from .clients.musicbrainz import MusicBrainzClient
from .clients.openlibrary import OpenLibraryClient
from .clients.tmdb import TmdbClient
from .clients.upcitemdb import UpcItemDbClient
from .dispatcher import LookupDispatcher
from .strategies.base import LookupStrategy
from .strategies.book import BookLookupStrategy
from .strategies.game import GameLookupStrategy
from .strategies.movie import MovieLookupStrategy
from .strategies.music import MusicLookupStrategy

logger = get_logger(__name__)


def build_cache(clock: Clock | None = None) -> MemoryCache:
    """Create the in-process cache from CACHE_ENABLED and CACHE_DEFAULT_TTL_MINUTES."""
    return MemoryCache(
        enabled=env.cache_enabled(),
        default_ttl=timedelta(minutes=env.cache_default_ttl_minutes()),
        clock=clock,
    )


@dataclass
class LookupService:
    """A configured dispatcher plus the clients it owns.

    Each provider has exactly one client here, so strategies that share a
    provider (movies and games both use UPCitemdb) share its quota.
    """

    dispatcher: LookupDispatcher
    cache: CacheService
    clients: list[RateLimitedClient] = field(default_factory=list)

    def close(self) -> None:
        for client in self.clients:
            client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def build_lookup_service(
    cache: CacheService | None = None,
    session: requests.Session | None = None,
    clock: Clock | None = None,
) -> LookupService:
    """Build every strategy whose providers are configured.

    Providers that need credentials are skipped when the credentials are
    unset; an entity type whose required providers are all missing gets no
    strategy and its lookups are reported as not configured.

    Args:
        cache: Cache for tokens and barcode results (default: from environment)
        session: Shared requests session (default: one session per client)
        clock: Time source for throttling and tokens (default: real UTC clock)

    Returns:
        LookupService holding the dispatcher and clients
    """
    if cache is None:
        cache = build_cache(clock)
    clients: list[RateLimitedClient] = []
    strategies: list[LookupStrategy] = []

    def register(client):
        clients.append(client)
        return client

    openlibrary = register(OpenLibraryClient(session=session, clock=clock))
    strategies.append(BookLookupStrategy(openlibrary))

    upcitemdb = register(UpcItemDbClient(session=session, clock=clock))

    barcode_lookup = None
    if env.barcode_lookup_api_key():
        barcode_lookup = register(
            BarcodeLookupClient(env.barcode_lookup_api_key(), cache, session=session, clock=clock)
        )
    else:
        logger.info("BARCODE_LOOKUP_API_KEY not set, Barcode Lookup fallback disabled")

    if env.tmdb_api_key() or env.tmdb_bearer_token():
        tmdb = register(
            TmdbClient(
                api_key=env.tmdb_api_key(),
                bearer_token=env.tmdb_bearer_token(),
                session=session,
                clock=clock,
            )
        )
        strategies.append(
            MovieLookupStrategy(
                upcitemdb,
                tmdb,
                fallback_barcode_client=barcode_lookup,
            )
        )
    else:
        logger.warning("TMDB_API_KEY / TMDB_BEARER_TOKEN not set, movie lookups disabled")

    igdb = None
    if env.igdb_client_id() and env.igdb_client_secret():
        token_service = IgdbTokenService(
            env.igdb_client_id(),
            env.igdb_client_secret(),
            cache,
            session=session,
            timeout=env.igdb_timeout(),
            clock=clock,
        )
        igdb = register(IgdbClient(env.igdb_client_id(), token_service, session=session, clock=clock))

    giantbomb = None
    if env.giantbomb_api_key():
        giantbomb = register(GiantBombClient(env.giantbomb_api_key(), session=session, clock=clock))

    if igdb is not None or giantbomb is not None:
        strategies.append(
            GameLookupStrategy(upcitemdb, igdb, giantbomb, fallback_barcode_client=barcode_lookup)
        )
    else:
        logger.warning("Neither IGDB nor GiantBomb credentials set, game lookups disabled")

    musicbrainz = register(MusicBrainzClient(session=session, clock=clock))
    strategies.append(MusicLookupStrategy(musicbrainz))

    logger.info(
        f"Lookup strategies configured: {', '.join(s.entity_type.value for s in strategies)}"
    )
    return LookupService(LookupDispatcher(strategies), cache, clients)


def build_dispatcher(
    cache: CacheService | None = None,
    session: requests.Session | None = None,
    clock: Clock | None = None,
) -> LookupDispatcher:
    """Shortcut for `build_lookup_service(...).dispatcher`."""
    return build_lookup_service(cache, session, clock).dispatcher
