"""Music lookups: barcode -> MusicBrainz release search -> release details."""

from common.logger import get_logger

from ..cancellation import CancellationToken
from ..clients.musicbrainz import MusicBrainzClient
from ..models import MusicResponse
from ..normalizers.music_normalizer import MusicNormalizer
from ..types import EntityType, IdentifierType
from .base import LookupStrategy

logger = get_logger(__name__)


class MusicLookupStrategy(LookupStrategy):
    """Resolve a UPC/EAN barcode to a MusicResponse."""

    entity_type = EntityType.MUSICS
    supported_identifier_types = (IdentifierType.UPC, IdentifierType.EAN)

    def __init__(self, client: MusicBrainzClient, normalizer: MusicNormalizer | None = None):
        self.client = client
        self.normalizer = normalizer or MusicNormalizer()

    def lookup(
        self,
        identifier_type: IdentifierType,
        identifier_value: str,
        cancellation: CancellationToken | None = None,
    ) -> MusicResponse | None:
        logger.info(f"Looking up music with {identifier_type.value}: {identifier_value}")

        release = self._payload(
            self.client.get_release_by_barcode(identifier_value, cancellation), "MusicBrainz barcode search"
        )
        release_id = (release or {}).get("id")
        if not release_id:
            logger.warning(f"No MusicBrainz release found for barcode: {identifier_value}")
            return None

        details = self._payload(
            self.client.get_release_by_id(release_id, cancellation), "MusicBrainz release details"
        )
        if details is None:
            logger.warning(f"Failed to fetch full release details for ID: {release_id}")
            return None
        return self.normalizer.normalize(details)
