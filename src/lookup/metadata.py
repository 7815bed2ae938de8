"""Distinct field values per entity type, memoized in the cache.

The catalog UI offers existing values (formats, genres, studios, ...) as
suggestions. Listing every entity to compute them is slow, so each
``(entity type, field)`` pair is cached under
``metadata:<EntityType>:<field>`` until entities of that type change.
"""

from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any, Protocol

from common.constants import METADATA_CACHE_PREFIX
from common.env import env
from common.logger import get_logger

from .cache import CacheService
from .types import EntityType

logger = get_logger(__name__)


class EntityLister(Protocol):
    """Source of stored entities; persistence lives outside this package."""

    def list_entities(self, entity_type: EntityType) -> Iterable[Mapping[str, Any]]: ...


def _field_value(entity: Mapping[str, Any], field: str) -> tuple[bool, Any]:
    """Look a field up case-insensitively; the flag tells whether it exists."""
    if field in entity:
        return True, entity[field]
    lowered = field.lower()
    for key, value in entity.items():
        if isinstance(key, str) and key.lower() == lowered:
            return True, value
    return False, None


class MetadataService:
    """Serves sorted distinct values of one field across all entities of a type."""

    def __init__(self, lister: EntityLister, cache: CacheService, ttl: timedelta | None = None):
        self.lister = lister
        self.cache = cache
        self.ttl = ttl if ttl is not None else timedelta(minutes=env.metadata_cache_ttl_minutes())

    def cache_key(self, entity_type: EntityType, field: str) -> str:
        return f"{METADATA_CACHE_PREFIX}:{entity_type.value}:{field}"

    def get_metadata(self, entity_type: EntityType, field: str) -> list[str]:
        """Return the distinct, trimmed, sorted values of `field`.

        String values and lists of strings are both collected; blanks are
        skipped.

        Raises:
            ValueError: If entities exist but none of them has `field`
        """
        key = self.cache_key(entity_type, field)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Returning cached metadata for {entity_type.value}:{field}")
            return cached

        logger.debug(f"Cache miss for metadata {entity_type.value}:{field}, listing entities")
        values: set[str] = set()
        seen_entities = 0
        field_found = False
        for entity in self.lister.list_entities(entity_type):
            seen_entities += 1
            present, value = _field_value(entity, field)
            if not present:
                continue
            field_found = True
            if isinstance(value, str):
                candidates = [value]
            elif isinstance(value, list | tuple | set):
                candidates = [v for v in value if isinstance(v, str)]
            else:
                candidates = []
            values.update(v.strip() for v in candidates if v and v.strip())

        if seen_entities and not field_found:
            raise ValueError(f"Property {field} not found on {entity_type.value}")

        result = sorted(values)
        self.cache.set(key, result, self.ttl)
        logger.info(
            f"Cached metadata for {entity_type.value}:{field} with {len(result)} distinct values"
        )
        return result

    def invalidate(self, entity_type: EntityType | None = None) -> None:
        """Drop memoized values for one entity type, or for all of them."""
        scope = entity_type.value if entity_type is not None else "*"
        self.cache.remove_by_pattern(f"{METADATA_CACHE_PREFIX}:{scope}:*")
