"""Abstract base class for per-entity lookup strategies."""

from abc import ABC, abstractmethod

from common.logger import get_logger

from ..cancellation import CancellationToken
from ..models import FetchResult, LookupResponse
from ..types import EntityType, IdentifierType, ProviderError

logger = get_logger(__name__)


class LookupStrategy(ABC):
    """Resolves an identifier to a canonical response for one entity type.

    Subclasses set `entity_type` and `supported_identifier_types` and chain
    provider calls in `lookup`. A provider result other than OK ends the
    chain with None; provider exceptions propagate unless the failing call
    is an optional fallback.
    """

    entity_type: EntityType
    supported_identifier_types: tuple[IdentifierType, ...] = ()

    def supports_identifier_type(self, identifier_type: IdentifierType) -> bool:
        return identifier_type in self.supported_identifier_types

    @abstractmethod
    def lookup(
        self,
        identifier_type: IdentifierType,
        identifier_value: str,
        cancellation: CancellationToken | None = None,
    ) -> LookupResponse | None:
        """Look up an identifier.

        Args:
            identifier_type: A type this strategy supports
            identifier_value: Identifier value as entered or scanned
            cancellation: Optional token to abort throttling waits

        Returns:
            Canonical response, or None if nothing was found
        """
        pass

    def _payload(self, result: FetchResult, step: str):
        """Return the result's data, or None (logged) when the call did not succeed."""
        if result.ok and result.data:
            return result.data
        logger.warning(f"{self.entity_type.value} lookup stopped at {step}: {result.status.value}")
        return None


class BarcodeStrategy(LookupStrategy):
    """Strategy whose first hop turns a UPC/EAN into a product listing.

    UPCitemdb is asked first. When it has no usable item, the optional
    Barcode Lookup client is tried, as it is when UPCitemdb raises a provider
    error. Exceptions propagate when there is no fallback left, since every
    later step needs the listing title.
    """

    supported_identifier_types = (IdentifierType.UPC, IdentifierType.EAN)

    def __init__(self, barcode_client, fallback_barcode_client=None):
        self.barcode_client = barcode_client
        self.fallback_barcode_client = fallback_barcode_client

    def _barcode_item(
        self, code: str, cancellation: CancellationToken | None
    ) -> dict | None:
        """Return the first listing ({"title", "category", "brand", "model"}) for a code."""
        has_fallback = (
            self.fallback_barcode_client is not None and self.fallback_barcode_client.is_available
        )
        try:
            product = self._payload(
                self.barcode_client.get_item_by_code(code, cancellation), "UPCitemdb"
            )
        except ProviderError as e:
            if not has_fallback:
                raise
            logger.warning(f"UPCitemdb failed for {code}, trying Barcode Lookup: {e}")
            product = None

        for item in (product or {}).get("items") or []:
            if (item.get("title") or "").strip():
                return item

        if has_fallback:
            logger.info(f"No UPCitemdb listing for {code}, trying Barcode Lookup")
            item = self._payload(
                self.fallback_barcode_client.lookup_barcode(code, cancellation), "Barcode Lookup"
            )
            if item and (item.get("title") or "").strip():
                return item

        logger.warning(f"No UPC/EAN data with a title found for code: {code}")
        return None
