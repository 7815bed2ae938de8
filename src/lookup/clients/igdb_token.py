"""Twitch client-credentials token cache for the IGDB API."""

from dataclasses import dataclass
from datetime import datetime, timedelta

import requests

from common.constants import TOKEN_CACHE_PREFIX
from common.env import env
from common.logger import get_logger

from ..cache import CacheService
from ..cancellation import CancellationToken, Clock
from ..types import TokenFetchError
from .rate_limiter import FifoLock

logger = get_logger(__name__)

SAFETY_MARGIN = timedelta(seconds=60)
MIN_CACHE_TTL = timedelta(seconds=60)


@dataclass(frozen=True)
class CachedToken:
    """A bearer token and the moment the issuer stops honouring it."""

    value: str
    expires_at: datetime

    def is_usable(self, now: datetime, margin: timedelta = SAFETY_MARGIN) -> bool:
        return now < self.expires_at - margin


class IgdbTokenService:
    """Issues and caches the app access token IGDB requests need.

    The fast path reads the cache without locking. On a miss, one caller
    performs the credential exchange while concurrent callers queue on the
    refresh lock and pick up the freshly cached token.

    Example:
        >>> service = IgdbTokenService("client-id", "secret", MemoryCache())
        >>> headers = {"Authorization": f"Bearer {service.get_access_token()}"}
    """

    CACHE_KEY = f"{TOKEN_CACHE_PREFIX}:igdb"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        cache: CacheService,
        token_url: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float = 10,
        clock: Clock | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.cache = cache
        self.token_url = token_url or env.igdb_token_url()
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.clock = clock or Clock()
        self._refresh_lock = FifoLock()
        self._generation = 0
        self._latest: CachedToken | None = None

    def _cached(self) -> CachedToken | None:
        token = self.cache.get(self.CACHE_KEY)
        if isinstance(token, CachedToken) and token.is_usable(self.clock.now()):
            return token
        return None

    def get_access_token(self, cancellation: CancellationToken | None = None) -> str:
        """Return a valid access token, fetching a new one if needed.

        Raises:
            TokenFetchError: If the credential exchange fails
            LookupCancelledError: If cancelled while waiting for another refresh
        """
        seen_generation = self._generation
        token = self._cached()
        if token is not None:
            return token.value

        cancellation = cancellation or CancellationToken()
        with self._refresh_lock.holding(cancellation):
            token = self._cached()
            if token is not None:
                return token.value

            # Waiters share the token a refresh produced while they queued
            if self._generation != seen_generation and self._latest is not None:
                return self._latest.value

            token = self._fetch_token()
            self._latest = token
            self._generation += 1
            expires_in = token.expires_at - self.clock.now()
            ttl = max(expires_in - SAFETY_MARGIN, MIN_CACHE_TTL)
            self.cache.set(self.CACHE_KEY, token, ttl)
            return token.value

    def _fetch_token(self) -> CachedToken:
        logger.info("Fetching new IGDB access token")
        try:
            response = self.session.post(
                self.token_url,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise TokenFetchError(f"IGDB token request failed: {e}", provider="IGDB") from e
        except ValueError as e:
            raise TokenFetchError("IGDB token response was not valid JSON", provider="IGDB") from e

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise TokenFetchError("IGDB token response had no access_token", provider="IGDB")

        try:
            expires_in = int(payload.get("expires_in", 0))
        except (TypeError, ValueError):
            expires_in = 0

        logger.info(f"IGDB access token obtained, expires in {expires_in}s")
        return CachedToken(access_token, self.clock.now() + timedelta(seconds=expires_in))
