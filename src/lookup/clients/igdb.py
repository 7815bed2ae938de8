"""IGDB (Internet Game Database) client for game metadata."""

from common.env import env
from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from .base import RateLimitedClient
from .igdb_token import IgdbTokenService
from .rate_limiter import RateLimitConfig

logger = get_logger(__name__)

GAME_FIELDS = (
    "name,summary,first_release_date,genres.name,"
    "involved_companies.company.name,involved_companies.developer,"
    "involved_companies.publisher,platforms.name,platforms.abbreviation,"
    "age_ratings.category,age_ratings.rating,cover.url"
)


def fix_cover_url(url: str | None) -> str | None:
    """Turn an IGDB cover URL into an absolute URL for the large cover size.

    Example:
        >>> fix_cover_url("//images.igdb.com/igdb/image/upload/t_thumb/co1r7f.jpg")
        'https://images.igdb.com/igdb/image/upload/t_cover_big/co1r7f.jpg'
    """
    if not url:
        return url
    if url.startswith("//"):
        url = "https:" + url
    return url.replace("t_thumb", "t_cover_big")


class IgdbClient(RateLimitedClient):
    """Client for the IGDB v4 API.

    Queries are Apicalypse bodies POSTed to ``games``. Every request carries
    the Twitch ``Client-ID`` and a bearer token from `IgdbTokenService`.
    IGDB allows 4 requests per second, hence the 250ms minimum spacing.

    API Documentation: https://api-docs.igdb.com/
    """

    name = "IGDB"
    requires_api_key = True

    def __init__(
        self,
        client_id: str,
        token_service: IgdbTokenService,
        base_url: str | None = None,
        rate_limit: RateLimitConfig | None = None,
        *,
        session=None,
        timeout: float | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(
            base_url or env.igdb_base_url(),
            rate_limit or RateLimitConfig(240, 100000, 250, 5),
            session=session,
            timeout=timeout if timeout is not None else env.igdb_timeout(),
            api_key=client_id,
            clock=clock,
        )
        self.client_id = client_id
        self.token_service = token_service

    def _query(self, body: str, cancellation: CancellationToken | None) -> FetchResult:
        token = self.token_service.get_access_token(cancellation)
        headers = {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {token}",
            "Content-Type": "text/plain",
        }
        return self._request(
            "POST", "games", headers=headers, data=body.encode("utf-8"), cancellation=cancellation
        )

    def search_game(
        self, title: str, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Search games by title.

        Returns:
            FetchResult whose data is a list of up to 10 game dicts

        Raises:
            TokenFetchError: If no access token could be obtained
        """
        logger.info(f"Searching IGDB for game: {title}")
        escaped = title.replace('"', '\\"')
        body = f'fields id,{GAME_FIELDS}; search "{escaped}"; limit 10;'
        result = self._query(body, cancellation)
        if result.ok:
            logger.info(f"IGDB search found {len(result.data or [])} results for game: {title}")
        return result

    def get_game_details(
        self, igdb_id: int, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Fetch one game by IGDB id.

        Returns:
            FetchResult whose data is the game dict; NOT_FOUND when IGDB
            returns an empty list
        """
        logger.info(f"Getting IGDB game details for id: {igdb_id}")
        result = self._query(f"fields {GAME_FIELDS}; where id = {int(igdb_id)};", cancellation)
        if not result.ok:
            return result
        games = result.data or []
        if not games:
            return FetchResult.not_found()
        return FetchResult.success(games[0])
