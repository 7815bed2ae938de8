"""Validates lookup requests and routes them to the entity's strategy."""

from common.logger import get_logger

from .cancellation import CancellationToken
from .models import LookupRequest, LookupResponse
from .strategies.base import LookupStrategy
from .types import ConfigurationError, EntityType, IdentifierType, LookupRejectedError

logger = get_logger(__name__)


class LookupDispatcher:
    """Entry point of the lookup subsystem.

    Holds one strategy per entity type. Requests are parsed
    case-insensitively and rejected with `LookupRejectedError` before any
    network call when the entity type, the identifier type or their
    combination is not supported.

    Example:
        >>> dispatcher = LookupDispatcher([BookLookupStrategy(OpenLibraryClient())])
        >>> book = dispatcher.lookup("books", "ISBN", "9780441172719")
    """

    def __init__(self, strategies: list[LookupStrategy]):
        self.strategies: dict[EntityType, LookupStrategy] = {}
        for strategy in strategies:
            if strategy.entity_type in self.strategies:
                raise ConfigurationError(
                    f"Duplicate lookup strategy for {strategy.entity_type.value}"
                )
            self.strategies[strategy.entity_type] = strategy

    def parse_request(
        self,
        entity_type: str | EntityType,
        identifier_type: str | IdentifierType,
        identifier_value: str,
    ) -> LookupRequest:
        """Validate raw request values.

        Raises:
            LookupRejectedError: If any part of the request is invalid
            ConfigurationError: If no strategy is configured for the entity type
        """
        all_types = [t.value for t in IdentifierType]

        parsed_identifier = IdentifierType.parse(getattr(identifier_type, "value", identifier_type))
        if parsed_identifier is None:
            raise LookupRejectedError(
                f"Invalid identifier type: {identifier_type}. "
                f"Valid types are: {IdentifierType.valid_types_string()}",
                all_types,
            )

        parsed_entity = EntityType.parse(getattr(entity_type, "value", entity_type))
        if parsed_entity is None:
            raise LookupRejectedError(
                f"Invalid entity type: {entity_type}. "
                f"Valid types are: {', '.join(e.value for e in EntityType)}",
                all_types,
            )

        value = (identifier_value or "").strip()
        if not value:
            raise LookupRejectedError("Identifier value must not be empty", all_types)

        strategy = self.strategies.get(parsed_entity)
        if strategy is None:
            raise ConfigurationError(f"{parsed_entity.value} lookups are not configured")

        if not strategy.supports_identifier_type(parsed_identifier):
            valid = [t.value for t in strategy.supported_identifier_types]
            raise LookupRejectedError(
                f"No strategy found for {parsed_entity.value} with identifier type: "
                f"{parsed_identifier.value}. Valid identifier types for "
                f"{parsed_entity.value} are: {', '.join(valid)}",
                valid,
            )

        return LookupRequest(parsed_entity, parsed_identifier, value)

    def lookup(
        self,
        entity_type: str | EntityType,
        identifier_type: str | IdentifierType,
        identifier_value: str,
        cancellation: CancellationToken | None = None,
    ) -> LookupResponse | None:
        """Look up an identifier for an entity type.

        Args:
            entity_type: Entity type name, e.g. "Books" or "movie"
            identifier_type: Identifier type name, e.g. "isbn" or "UPC"
            identifier_value: Identifier value
            cancellation: Optional token to abort throttling waits

        Returns:
            Canonical response, or None if no provider knows the identifier

        Raises:
            LookupRejectedError: If the request is invalid
            ConfigurationError: If the entity type has no configured strategy
            QuotaExhaustedError: If a required provider's quota is spent
            ProviderError: If a required provider is unreachable
            LookupCancelledError: If cancelled while waiting
        """
        request = self.parse_request(entity_type, identifier_type, identifier_value)
        logger.info(
            f"Lookup request: {request.entity_type.value} with "
            f"{request.identifier_type.value} = {request.identifier_value}"
        )

        strategy = self.strategies[request.entity_type]
        result = strategy.lookup(request.identifier_type, request.identifier_value, cancellation)
        if result is None:
            logger.info(
                f"No result for {request.entity_type.value} with "
                f"{request.identifier_type.value} = {request.identifier_value}"
            )
        return result

    def capabilities(self) -> dict[str, list[str]]:
        """Supported identifier types per configured entity type."""
        return {
            entity.value: [t.value for t in self.strategies[entity].supported_identifier_types]
            for entity in EntityType
            if entity in self.strategies
        }
