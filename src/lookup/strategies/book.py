"""Book lookups through the Open Library Read API."""

from common.logger import get_logger

from ..cancellation import CancellationToken
from ..clients.openlibrary import READ_API_IDENTIFIERS, OpenLibraryClient
from ..models import BookResponse
from ..normalizers.book_normalizer import BookNormalizer
from ..types import EntityType, IdentifierType
from .base import LookupStrategy

logger = get_logger(__name__)


class BookLookupStrategy(LookupStrategy):
    """Resolve ISBN, LCCN, OCLC and OLID identifiers to a BookResponse."""

    entity_type = EntityType.BOOKS
    supported_identifier_types = READ_API_IDENTIFIERS

    def __init__(self, client: OpenLibraryClient, normalizer: BookNormalizer | None = None):
        self.client = client
        self.normalizer = normalizer or BookNormalizer()

    def lookup(
        self,
        identifier_type: IdentifierType,
        identifier_value: str,
        cancellation: CancellationToken | None = None,
    ) -> BookResponse | None:
        logger.info(f"Looking up book with {identifier_type.value}: {identifier_value}")
        result = self.client.get_readable_book(identifier_type, identifier_value, cancellation)
        payload = self._payload(result, "Open Library read API")
        if payload is None:
            return None

        book = self.normalizer.normalize(payload)
        if book is None:
            logger.info(f"No Open Library record for {identifier_type.value}: {identifier_value}")
        return book
