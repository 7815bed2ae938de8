"""Movie metadata normalizer for TMDB movie details."""

from typing import Any

from common.constants import TMDB_IMAGE_URL

from ..models import MovieResponse
from .base import Normalizer


class MovieNormalizer(Normalizer):
    """Normalize a TMDB ``movie/{id}`` response to `MovieResponse`."""

    def normalize(self, api_response: Any, **context: Any) -> MovieResponse | None:
        """Convert TMDB movie details to a MovieResponse.

        Args:
            api_response: Raw TMDB movie details
            **context: ``format`` inferred from the barcode listing, if any

        Returns:
            MovieResponse, or None if the payload has no title
        """
        title = self._safe_get(api_response, "title")
        if not title:
            return None

        vote_average = self._safe_get(api_response, "vote_average", default=0) or 0
        poster_path = self._safe_get(api_response, "poster_path")

        return MovieResponse(
            title=title,
            genres=self._names(api_response.get("genres")),
            studios=self._names(api_response.get("production_companies")),
            release_date=self._safe_get(api_response, "release_date", default=""),
            rating=f"{vote_average:.1f}/10" if vote_average > 0 else "",
            runtime=self._to_int(api_response.get("runtime")),
            plot=self._safe_get(api_response, "overview", default=""),
            format=context.get("format"),
            image_url=TMDB_IMAGE_URL.format(poster_path) if poster_path else None,
        )
