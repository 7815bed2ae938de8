"""Barcode Lookup client, a generic product database keyed by barcode."""

import re
from datetime import timedelta

from common.constants import BARCODE_CACHE_DAYS, BARCODE_CACHE_PREFIX
from common.env import env
from common.logger import get_logger

from ..cache import CacheService
from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from .base import RateLimitedClient
from .rate_limiter import RateLimitConfig

logger = get_logger(__name__)

BARCODE_PATTERN = re.compile(r"^\d{12,13}$")


class BarcodeLookupClient(RateLimitedClient):
    """Client for the barcodelookup.com products API.

    Successful lookups are cached for a week under ``barcode:<code>``; the
    cached value is the first matching product, so repeated scans of the same
    item never touch the network.

    API Documentation: https://www.barcodelookup.com/api
    """

    name = "BarcodeLookup"
    requires_api_key = True

    def __init__(
        self,
        api_key: str | None,
        cache: CacheService,
        base_url: str | None = None,
        rate_limit: RateLimitConfig | None = None,
        *,
        session=None,
        timeout: float = 10,
        clock: Clock | None = None,
    ):
        super().__init__(
            base_url or env.barcode_lookup_base_url(),
            rate_limit or RateLimitConfig(50, 5000, 0, 65),
            session=session,
            timeout=timeout,
            api_key=api_key,
            clock=clock,
        )
        self.cache = cache

    def lookup_barcode(
        self, barcode: str, cancellation: CancellationToken | None = None
    ) -> FetchResult:
        """Look up a product by its 12 or 13 digit barcode.

        Args:
            barcode: UPC-A or EAN-13 digits
            cancellation: Optional token to abort throttling waits

        Returns:
            FetchResult whose data is the first product
            ({"title", "brand", "category", "images", ...}); NOT_FOUND for a
            malformed barcode or an empty product list
        """
        if not barcode or not barcode.strip():
            logger.warning("Barcode lookup called with empty barcode")
            return FetchResult.not_found()

        if not BARCODE_PATTERN.match(barcode):
            logger.warning(f"Invalid barcode format: {barcode}")
            return FetchResult.not_found()

        cache_key = f"{BARCODE_CACHE_PREFIX}:{barcode}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for barcode {barcode}")
            return FetchResult.success(cached)

        result = self._request(
            "GET",
            "products",
            params={"barcode": barcode, "key": self.api_key},
            cancellation=cancellation,
        )
        if not result.ok:
            return result

        products = (result.data or {}).get("products") or []
        if not products:
            logger.info(f"No product found for barcode {barcode}")
            return FetchResult.not_found()

        product = products[0]
        self.cache.set(cache_key, product, timedelta(days=BARCODE_CACHE_DAYS))
        logger.info(f"Looked up barcode {barcode}: {product.get('title', '')}")
        return FetchResult.success(product)
