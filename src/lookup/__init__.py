"""External metadata lookups for the media catalog.

Resolves a book, movie, game or music identifier to a canonical response by
querying rate-limited third-party providers.

Example:
    >>> from lookup import build_lookup_service
    >>>
    >>> with build_lookup_service() as service:
    ...     book = service.dispatcher.lookup("Books", "isbn", "9780441172719")
    ...     print(book.title if book else "not found")
"""

from .cache import CacheService, MemoryCache
from .cancellation import CancellationToken, Clock
from .dispatcher import LookupDispatcher
from .factory import LookupService, build_dispatcher, build_lookup_service
from .metadata import EntityLister, MetadataService
from .models import (
    BookResponse,
    DiscResponse,
    FetchResult,
    GameResponse,
    LookupRequest,
    MovieResponse,
    MusicResponse,
)
from .types import (
    ConfigurationError,
    EntityType,
    FetchStatus,
    IdentifierType,
    LookupCancelledError,
    LookupRejectedError,
    MediaLookupError,
    ProviderError,
    QuotaExhaustedError,
    TokenFetchError,
)

__all__ = [
    # Entry points
    "LookupDispatcher",
    "LookupService",
    "build_dispatcher",
    "build_lookup_service",
    "MetadataService",
    "EntityLister",
    # Infrastructure
    "CacheService",
    "MemoryCache",
    "CancellationToken",
    "Clock",
    # Models
    "LookupRequest",
    "FetchResult",
    "BookResponse",
    "MovieResponse",
    "GameResponse",
    "MusicResponse",
    "DiscResponse",
    # Types and exceptions
    "EntityType",
    "IdentifierType",
    "FetchStatus",
    "MediaLookupError",
    "ConfigurationError",
    "LookupRejectedError",
    "ProviderError",
    "QuotaExhaustedError",
    "TokenFetchError",
    "LookupCancelledError",
]
