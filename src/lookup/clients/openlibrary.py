"""Open Library API client for book metadata lookups."""

from common.env import env
from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from ..types import IdentifierType
from .base import RateLimitedClient
from .rate_limiter import RateLimitConfig

logger = get_logger(__name__)

READ_API_IDENTIFIERS = (
    IdentifierType.ISBN,
    IdentifierType.LCCN,
    IdentifierType.OCLC,
    IdentifierType.OLID,
)


class OpenLibraryClient(RateLimitedClient):
    """Client for the Open Library API.

    Open Library provides free access to book metadata including:
    - Titles, subtitles and authors
    - Publication information (date, publisher, page count)
    - Subjects
    - Physical format and cover images

    Books are resolved through the Read API, which accepts ISBN, LCCN, OCLC
    and OLID identifiers. Rate limit: conservative 60 requests per minute
    (unofficial limit).

    API Documentation: https://openlibrary.org/dev/docs/api/read
    """

    name = "OpenLibrary"

    def __init__(
        self,
        base_url: str | None = None,
        rate_limit: RateLimitConfig | None = None,
        *,
        session=None,
        timeout: float | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(
            base_url or env.openlibrary_base_url(),
            rate_limit or RateLimitConfig(60, 100000, 0, 65),
            session=session,
            timeout=timeout if timeout is not None else env.openlibrary_timeout(),
            clock=clock,
        )

    def get_readable_book(
        self,
        identifier_type: IdentifierType,
        identifier_value: str,
        cancellation: CancellationToken | None = None,
    ) -> FetchResult:
        """Fetch a book record from the Read API.

        Args:
            identifier_type: One of isbn, lccn, oclc, olid
            identifier_value: Identifier value
            cancellation: Optional token to abort throttling waits

        Returns:
            FetchResult whose data is the raw Read API response
            ({"records": {...}, "items": [...]})

        Raises:
            ValueError: If the identifier type is not served by the Read API
        """
        if identifier_type not in READ_API_IDENTIFIERS:
            raise ValueError(f"Open Library cannot look up books by {identifier_type.value}")

        logger.debug(
            f"Looking up readable book by {identifier_type.value}:{identifier_value}"
        )
        path = f"api/volumes/brief/{identifier_type.value}/{identifier_value}.json"
        return self._request("GET", path, cancellation=cancellation)
