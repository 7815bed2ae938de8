"""Game lookups: barcode -> UPCitemdb title -> IGDB or GiantBomb."""

from common.logger import get_logger

from ..cancellation import CancellationToken
from ..clients.barcode_lookup import BarcodeLookupClient
from ..clients.giantbomb import GiantBombClient
from ..clients.igdb import IgdbClient
from ..clients.upcitemdb import UpcItemDbClient
from ..models import GameResponse
from ..normalizers.game_normalizer import GiantBombGameNormalizer, IgdbGameNormalizer
from ..normalizers.titles import clean_game_title, extract_game_format, extract_platform, find_best_match
from ..types import EntityType, FetchStatus, IdentifierType, ProviderError, QuotaExhaustedError
from .base import BarcodeStrategy

logger = get_logger(__name__)

_FALLBACK_STATUSES = (FetchStatus.ERROR, FetchStatus.RATE_LIMITED)


class GameLookupStrategy(BarcodeStrategy):
    """Resolve a UPC/EAN barcode to a GameResponse.

    IGDB is the primary catalog when it is configured; GiantBomb is used
    otherwise, and as a fallback when IGDB fails transiently (network error,
    token failure, error or rate-limited result). An IGDB quota exhaustion
    is not transient and propagates.
    """

    entity_type = EntityType.GAMES

    def __init__(
        self,
        barcode_client: UpcItemDbClient,
        igdb_client: IgdbClient | None = None,
        giantbomb_client: GiantBombClient | None = None,
        fallback_barcode_client: BarcodeLookupClient | None = None,
    ):
        if igdb_client is None and giantbomb_client is None:
            raise ValueError("GameLookupStrategy needs an IGDB or GiantBomb client")
        super().__init__(barcode_client, fallback_barcode_client)
        self.igdb_client = igdb_client
        self.giantbomb_client = giantbomb_client
        self.igdb_normalizer = IgdbGameNormalizer()
        self.giantbomb_normalizer = GiantBombGameNormalizer()

    def lookup(
        self,
        identifier_type: IdentifierType,
        identifier_value: str,
        cancellation: CancellationToken | None = None,
    ) -> GameResponse | None:
        logger.info(f"Looking up game with {identifier_type.value}: {identifier_value}")

        item = self._barcode_item(identifier_value, cancellation)
        if item is None:
            return None

        raw_title = item["title"]
        title, edition = clean_game_title(raw_title)
        title = title or raw_title.strip()
        context = {
            "edition": edition,
            "format": extract_game_format(raw_title),
            "platform": extract_platform(raw_title, item.get("category"), item.get("brand"), item.get("model")),
        }
        logger.info(
            f"Found title '{raw_title}' from UPC/EAN {identifier_value}, cleaned to '{title}' "
            f"(edition '{edition}', format '{context['format']}', platform '{context['platform']}')"
        )

        if self.igdb_client is not None:
            try:
                found, game = self._lookup_igdb(title, context, cancellation)
                if found or self.giantbomb_client is None:
                    return game
            except QuotaExhaustedError:
                raise
            except ProviderError as e:
                if self.giantbomb_client is None:
                    raise
                logger.warning(f"IGDB lookup failed, falling back to GiantBomb: {e}")

        return self._lookup_giantbomb(title, context, cancellation)

    def _lookup_igdb(
        self, title: str, context: dict, cancellation: CancellationToken | None
    ) -> tuple[bool, GameResponse | None]:
        """Search IGDB; the flag is False when IGDB failed and a fallback may be tried."""
        search = self.igdb_client.search_game(title, cancellation)
        if search.status in _FALLBACK_STATUSES:
            logger.warning(f"IGDB search for '{title}' returned {search.status.value}")
            return False, None

        best = find_best_match(search.data or [], title)
        if best is None:
            logger.warning(f"No IGDB results found for title: {title}")
            return True, None

        logger.info(f"Best IGDB match for '{title}' is '{best.get('name')}' (id: {best.get('id')})")
        details = self.igdb_client.get_game_details(best["id"], cancellation)
        if details.status in _FALLBACK_STATUSES:
            return False, None
        if not details.ok:
            return True, None
        return True, self.igdb_normalizer.normalize(details.data, **context)

    def _lookup_giantbomb(
        self, title: str, context: dict, cancellation: CancellationToken | None
    ) -> GameResponse | None:
        if self.giantbomb_client is None:
            return None

        results = self._payload(
            self.giantbomb_client.search_game(title, cancellation), "GiantBomb search"
        )
        best = find_best_match(results or [], title)
        if best is None:
            logger.warning(f"No GiantBomb results found for title: {title}")
            return None

        logger.info(f"Best GiantBomb match for '{title}' is '{best.get('name')}' (id: {best.get('id')})")
        detail_ref = best.get("api_detail_url") or best.get("guid")
        if not detail_ref:
            return None

        details = self._payload(
            self.giantbomb_client.get_game_details(detail_ref, cancellation), "GiantBomb details"
        )
        if details is None:
            return None
        return self.giantbomb_normalizer.normalize(details, **context)
