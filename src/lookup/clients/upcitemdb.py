"""UPCitemdb client for resolving UPC/EAN barcodes to product titles."""

from common.env import env
from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from .base import RateLimitedClient
from .rate_limiter import RateLimitConfig

logger = get_logger(__name__)


def default_rate_limit() -> RateLimitConfig:
    """Quota for the free trial endpoint, overridable from the environment."""
    return RateLimitConfig(
        max_requests_per_minute=env.upcitemdb_max_requests_per_minute(),
        max_requests_per_day=env.upcitemdb_max_requests_per_day(),
        min_delay_between_requests_ms=env.upcitemdb_min_delay_ms(),
        max_retry_pause_seconds=env.upcitemdb_max_retry_pause_seconds(),
    )


class UpcItemDbClient(RateLimitedClient):
    """Client for the UPCitemdb product lookup API.

    The free trial tier allows about 100 requests per day with a short burst
    limit, so the default quota stays below it. Rate-limit responses carry
    the reset time in `X-RateLimit-Reset` as epoch seconds.

    Response shape (OK):
        {"code": "OK", "total": 1, "items": [{"ean": ..., "title": ...,
        "category": ..., "brand": ...}]}

    API Documentation: https://www.upcitemdb.com/api/explorer
    """

    name = "UPCitemdb"
    RESET_HEADER = "X-RateLimit-Reset"
    RESET_IS_EPOCH = True

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
            base_url or env.upcitemdb_base_url(),
            rate_limit or default_rate_limit(),
            session=session,
            timeout=timeout if timeout is not None else env.upcitemdb_timeout(),
            clock=clock,
        )

    def get_item_by_code(
        self, code: str, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Look up a UPC or EAN code.

        Args:
            code: UPC-A or EAN-13 barcode digits
            cancellation: Optional token to abort throttling waits

        Returns:
            FetchResult whose data is the raw lookup response
        """
        logger.info(f"Looking up UPC/EAN code: {code}")
        result = self._request("GET", "lookup", params={"upc": code}, cancellation=cancellation)
        if result.ok:
            items = (result.data or {}).get("items") or []
            logger.info(f"Retrieved UPC/EAN data for code: {code}, found {len(items)} items")
        return result
