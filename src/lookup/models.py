"""Canonical lookup requests and responses.

Responses share one schema per entity type no matter which provider
produced them; provider-specific payloads never leave the clients and
normalizers.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from .types import EntityType, FetchStatus, IdentifierType


@dataclass(frozen=True)
class LookupRequest:
    """A validated lookup request."""

    entity_type: EntityType
    identifier_type: IdentifierType
    identifier_value: str


@dataclass
class FetchResult:
    """Discriminated result of one provider call.

    `data` holds the provider's parsed JSON when `status` is OK and is None
    otherwise.
    """

    status: FetchStatus
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.OK

    @classmethod
    def success(cls, data: Any) -> "FetchResult":
        return cls(FetchStatus.OK, data)

    @classmethod
    def not_found(cls) -> "FetchResult":
        return cls(FetchStatus.NOT_FOUND)

    @classmethod
    def rate_limited(cls) -> "FetchResult":
        return cls(FetchStatus.RATE_LIMITED)

    @classmethod
    def error(cls) -> "FetchResult":
        return cls(FetchStatus.ERROR)


class CanonicalResponse:
    """Mixin giving every response a plain-dict form for JSON output."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BookResponse(CanonicalResponse):
    title: str
    subtitle: str = ""
    authors: list[str] = field(default_factory=list)
    number_of_pages: int = 0
    publishers: list[str] = field(default_factory=list)
    publish_date: str = ""
    subjects: list[str] = field(default_factory=list)
    format: str | None = None
    image_url: str | None = None


@dataclass
class MovieResponse(CanonicalResponse):
    title: str
    genres: list[str] = field(default_factory=list)
    studios: list[str] = field(default_factory=list)
    release_date: str = ""
    rating: str = ""
    runtime: int | None = None
    plot: str = ""
    format: str | None = None
    image_url: str | None = None


@dataclass
class GameResponse(CanonicalResponse):
    title: str
    platform: str = ""
    genres: list[str] = field(default_factory=list)
    developers: list[str] = field(default_factory=list)
    publishers: list[str] = field(default_factory=list)
    release_date: str = ""
    rating: str = ""
    description: str = ""
    format: str = ""
    image_url: str | None = None


@dataclass
class DiscResponse:
    track_number: int
    title: str
    duration: int | None = None


@dataclass
class MusicResponse(CanonicalResponse):
    """A music release; durations are in milliseconds."""

    title: str
    artist: str = ""
    release_date: str = ""
    genres: list[str] = field(default_factory=list)
    duration: int | None = None
    label: str = ""
    tracks: int | None = None
    discs: int | None = None
    disc_list: list[DiscResponse] = field(default_factory=list)
    format: str = ""
    image_url: str | None = None


LookupResponse = BookResponse | MovieResponse | GameResponse | MusicResponse
