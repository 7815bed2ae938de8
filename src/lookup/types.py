"""Shared enums and exceptions for the lookup subsystem."""

from enum import Enum


class EntityType(str, Enum):
    """Catalog entity types a lookup can fill in."""

    BOOKS = "Books"
    MOVIES = "Movies"
    GAMES = "Games"
    MUSICS = "Musics"

    @classmethod
    def parse(cls, value: str) -> "EntityType | None":
        """Parse an entity type case-insensitively.

        Singular forms ("book", "music") are accepted as well as the
        canonical plural names.

        Returns:
            Matching EntityType, or None if the value is not recognised
        """
        if not value:
            return None
        candidate = value.strip().lower()
        for member in cls:
            name = member.value.lower()
            if candidate == name or candidate == name.rstrip("s"):
                return member
        return None


class IdentifierType(str, Enum):
    """Identifier kinds accepted by lookups."""

    ISBN = "isbn"
    LCCN = "lccn"
    OCLC = "oclc"
    OLID = "olid"
    UPC = "upc"
    EAN = "ean"

    @classmethod
    def parse(cls, value: str) -> "IdentifierType | None":
        """Parse an identifier type case-insensitively ("ISBN", "isbn", "IsBn")."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @classmethod
    def valid_types_string(cls) -> str:
        return ", ".join(member.value for member in cls)


class FetchStatus(str, Enum):
    """Outcome of a single provider call."""

    OK = "ok"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"


class MediaLookupError(Exception):
    """Base exception for lookup errors."""

    pass


class ConfigurationError(MediaLookupError):
    """Provider configuration is malformed."""

    pass


class LookupRejectedError(MediaLookupError):
    """The lookup request was rejected before any network call.

    Attributes:
        valid_identifier_types: Identifier types the caller could use instead
    """

    def __init__(self, message: str, valid_identifier_types: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.valid_identifier_types = valid_identifier_types or []


class ProviderError(MediaLookupError):
    """A provider could not be reached at all (network stack failure)."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class QuotaExhaustedError(ProviderError):
    """A long-horizon quota is used up; waiting it out is not worth it."""

    pass


class TokenFetchError(ProviderError):
    """The credential exchange for a bearer token failed."""

    pass


class LookupCancelledError(MediaLookupError):
    """The caller cancelled the lookup while it was waiting."""

    pass
