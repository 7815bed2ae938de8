"""The Movie Database (TMDB) client for movie metadata."""

from common.env import env
from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from .base import RateLimitedClient
from .rate_limiter import RateLimitConfig

logger = get_logger(__name__)


class TmdbClient(RateLimitedClient):
    """Client for the TMDB v3 API.

    Authenticates with a v4 read access token (``Authorization: Bearer``)
    when one is configured, otherwise with the v3 ``api_key`` query
    parameter. TMDB allows roughly 50 requests per second per IP; the
    default quota is far below that.

    API Documentation: https://developer.themoviedb.org/reference
    """

    name = "TMDB"
    requires_api_key = True

    def __init__(
        self,
        api_key: str | None = None,
        bearer_token: str | None = None,
        base_url: str | None = None,
        rate_limit: RateLimitConfig | None = None,
        *,
        session=None,
        timeout: float | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(
            base_url or env.tmdb_base_url(),
            rate_limit or RateLimitConfig(40, 100000, 0, 30),
            session=session,
            timeout=timeout if timeout is not None else env.tmdb_timeout(),
            api_key=api_key,
            clock=clock,
        )
        self.bearer_token = bearer_token
        if bearer_token:
            self.headers["Authorization"] = f"Bearer {bearer_token}"

    @property
    def is_available(self) -> bool:
        return bool(self.api_key or self.bearer_token)

    def _auth_params(self) -> dict[str, str]:
        if self.bearer_token or not self.api_key:
            return {}
        return {"api_key": self.api_key}

    def search_movie(
        self,
        title: str,
        year: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> FetchResult:
        """Search movies by title, optionally narrowed to a release year.

        Returns:
            FetchResult whose data is {"results": [{"id", "title", ...}], ...}
        """
        logger.info(f"Searching TMDB for movie: {title}" + (f" ({year})" if year else ""))
        params = {"query": title, **self._auth_params()}
        if year:
            params["year"] = year

        result = self._request("GET", "search/movie", params=params, cancellation=cancellation)
        if result.ok:
            count = len((result.data or {}).get("results") or [])
            logger.info(f"TMDB search found {count} results for movie: {title}")
        return result

    def get_movie_details(
        self, movie_id: int, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Fetch full details for one movie."""
        logger.info(f"Getting TMDB movie details for ID: {movie_id}")
        return self._request(
            "GET", f"movie/{movie_id}", params=self._auth_params() or None, cancellation=cancellation
        )
