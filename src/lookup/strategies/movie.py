"""Movie lookups: barcode -> UPCitemdb title -> TMDB."""

from common.logger import get_logger

from ..cancellation import CancellationToken
from ..clients.barcode_lookup import BarcodeLookupClient
from ..clients.tmdb import TmdbClient
from ..clients.upcitemdb import UpcItemDbClient
from ..models import MovieResponse
from ..normalizers.movie_normalizer import MovieNormalizer
from ..normalizers.titles import extract_year, infer_format, normalize_title
from ..types import EntityType, IdentifierType
from .base import BarcodeStrategy

logger = get_logger(__name__)


class MovieLookupStrategy(BarcodeStrategy):
    """Resolve a UPC/EAN barcode to a MovieResponse.

    The barcode's listing title is cleaned into a search title and release
    year, TMDB is searched with both (an exact title match beats TMDB's
    ranking), and the chosen movie's details are normalized. The physical
    format comes from the listing, since TMDB knows nothing about discs.
    """

    entity_type = EntityType.MOVIES

    def __init__(
        self,
        barcode_client: UpcItemDbClient,
        tmdb_client: TmdbClient,
        normalizer: MovieNormalizer | None = None,
        fallback_barcode_client: BarcodeLookupClient | None = None,
    ):
        super().__init__(barcode_client, fallback_barcode_client)
        self.tmdb_client = tmdb_client
        self.normalizer = normalizer or MovieNormalizer()

    def lookup(
        self,
        identifier_type: IdentifierType,
        identifier_value: str,
        cancellation: CancellationToken | None = None,
    ) -> MovieResponse | None:
        logger.info(f"Looking up movie with {identifier_type.value}: {identifier_value}")

        item = self._barcode_item(identifier_value, cancellation)
        if item is None:
            return None

        raw_title = item["title"]
        title = normalize_title(raw_title) or raw_title.strip()
        year = extract_year(raw_title)
        movie_format = infer_format(raw_title, item.get("category"))
        logger.info(
            f"Found title '{raw_title}' from UPC/EAN {identifier_value}, cleaned to '{title}' "
            f"(year {year}, format {movie_format}) for TMDB search"
        )

        search = self._payload(
            self.tmdb_client.search_movie(title, year, cancellation), "TMDB search"
        )
        results = (search or {}).get("results") or []
        if not results:
            logger.warning(f"No TMDB results found for title: {title}")
            return None

        best = next(
            (r for r in results if (r.get("title") or "").lower() == title.lower()),
            results[0],
        )
        logger.info(f"Found TMDB movie ID {best.get('id')} for title: {title}")

        details = self._payload(
            self.tmdb_client.get_movie_details(best["id"], cancellation), "TMDB details"
        )
        if details is None:
            return None
        return self.normalizer.normalize(details, format=movie_format)
