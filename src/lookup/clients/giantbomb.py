"""GiantBomb API client for game metadata."""

from urllib.parse import urlparse

from common.env import env
from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from .base import RateLimitedClient
from .rate_limiter import RateLimitConfig

logger = get_logger(__name__)


def details_path(detail_url_or_guid: str) -> str:
    """Build the API-relative details path from a detail URL, path or GUID.

    Example:
        >>> details_path("https://www.giantbomb.com/api/game/3030-1234/")
        'game/3030-1234/'
        >>> details_path("3030-1234")
        'game/3030-1234/'
    """
    value = detail_url_or_guid.strip()
    parsed = urlparse(value)
    if parsed.scheme and parsed.netloc:
        path = parsed.path.lstrip("/")
        if path.lower().startswith("api/"):
            path = path[4:]
    elif value.lower().startswith("game/"):
        path = value
    else:
        path = f"game/{value}"
    return path if path.endswith("/") else f"{path}/"


class GiantBombClient(RateLimitedClient):
    """Client for the GiantBomb API.

    GiantBomb wraps every payload in an envelope whose ``status_code`` is 1
    on success; any other value is reported as an ERROR result. GiantBomb
    allows 200 requests per resource per hour and discourages bursts, hence
    the one second spacing.

    API Documentation: https://www.giantbomb.com/api/documentation/
    """

    name = "GiantBomb"
    requires_api_key = True

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        rate_limit: RateLimitConfig | None = None,
        *,
        session=None,
        timeout: float | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(
            base_url or env.giantbomb_base_url(),
            rate_limit or RateLimitConfig(200, 100000, 1000, 65),
            session=session,
            timeout=timeout if timeout is not None else env.giantbomb_timeout(),
            api_key=api_key,
            clock=clock,
        )

    def _unwrap(self, result: FetchResult, what: str) -> FetchResult:
        if not result.ok:
            return result
        envelope = result.data if isinstance(result.data, dict) else {}
        if envelope.get("status_code") != 1:
            logger.warning(f"GiantBomb {what} error: {envelope.get('error') or 'unknown error'}")
            return FetchResult.error()
        return FetchResult.success(envelope.get("results"))

    def search_game(
        self, title: str, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Search games by title.

        Returns:
            FetchResult whose data is the list of search results
        """
        logger.info(f"Searching GiantBomb for game: {title}")
        params = {"api_key": self.api_key, "format": "json", "resources": "game", "query": title}
        result = self._unwrap(
            self._request("GET", "search/", params=params, cancellation=cancellation), "search"
        )
        if result.ok:
            logger.info(f"GiantBomb search found {len(result.data or [])} results for game: {title}")
        return result

    def get_game_details(
        self, detail_url_or_guid: str, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Fetch one game by its ``api_detail_url`` or GUID.

        Returns:
            FetchResult whose data is the game details dict
        """
        logger.info(f"Getting GiantBomb game details from: {detail_url_or_guid}")
        params = {"api_key": self.api_key, "format": "json"}
        return self._unwrap(
            self._request(
                "GET", details_path(detail_url_or_guid), params=params, cancellation=cancellation
            ),
            "details",
        )
