"""MusicBrainz web service client for music releases."""

from common.env import env
from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from .base import RateLimitedClient
from .rate_limiter import RateLimitConfig

logger = get_logger(__name__)

RELEASE_INCLUDES = "artist-credits labels recordings tags"


class MusicBrainzClient(RateLimitedClient):
    """Client for the MusicBrainz ws/2 API.

    MusicBrainz asks for at most one request per second and a descriptive
    User-Agent. Over the limit it answers 503 (sometimes 429) with a
    ``Retry-After`` header.

    API Documentation: https://musicbrainz.org/doc/MusicBrainz_API
    """

    name = "MusicBrainz"
    RATE_LIMIT_STATUSES = (429, 503)

    def __init__(
        self,
        base_url: str | None = None,
        rate_limit: RateLimitConfig | None = None,
        *,
        user_agent: str | None = None,
        session=None,
        timeout: float | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(
            base_url or env.musicbrainz_base_url(),
            rate_limit or RateLimitConfig(60, 100000, 1000, 30),
            session=session,
            timeout=timeout if timeout is not None else env.musicbrainz_timeout(),
            clock=clock,
        )
        self.headers["User-Agent"] = user_agent or env.musicbrainz_user_agent()

    def _first_release(self, result: FetchResult, what: str) -> FetchResult:
        if not result.ok:
            return result
        releases = (result.data or {}).get("releases") or []
        if not releases:
            logger.info(f"No releases found for {what}")
            return FetchResult.not_found()
        release = releases[0]
        logger.info(f"Retrieved release for {what}, title: {release.get('title')}")
        return FetchResult.success(release)

    def get_release_by_barcode(
        self, barcode: str, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Find the best-matching release for a barcode.

        Returns:
            FetchResult whose data is the first release of the search
        """
        logger.info(f"Looking up music release by barcode: {barcode}")
        result = self._request(
            "GET",
            "ws/2/release/",
            params={"query": f"barcode:{barcode}", "fmt": "json"},
            cancellation=cancellation,
        )
        return self._first_release(result, f"barcode: {barcode}")

    def get_release_by_id(
        self, release_id: str, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Fetch a release with artist credits, labels, recordings and tags."""
        logger.info(f"Looking up music release by ID: {release_id}")
        return self._request(
            "GET",
            f"ws/2/release/{release_id}",
            params={"inc": RELEASE_INCLUDES, "fmt": "json"},
            cancellation=cancellation,
        )
