"""Game metadata normalizers for GiantBomb and IGDB responses."""

from datetime import UTC, datetime
from typing import Any

from ..clients.igdb import fix_cover_url
from ..models import GameResponse
from .base import Normalizer
from .titles import derive_format_from_platforms

# IGDB age rating enums (category -> organisation, rating -> label)
IGDB_RATING_ORGS = {1: "ESRB", 2: "PEGI"}
IGDB_RATINGS = {
    1: "3",
    2: "7",
    3: "12",
    4: "16",
    5: "18",
    6: "RP",
    7: "EC",
    8: "E",
    9: "E10+",
    10: "T",
    11: "M",
    12: "AO",
}


def _titled(name: str, edition: str) -> str:
    return f"{name} ({edition})" if edition else name


class GiantBombGameNormalizer(Normalizer):
    """Normalize GiantBomb game details to `GameResponse`."""

    def normalize(self, api_response: Any, **context: Any) -> GameResponse | None:
        """Convert GiantBomb game details to a GameResponse.

        Args:
            api_response: The ``results`` object of a GiantBomb details call
            **context: ``platform``, ``format`` and ``edition`` learned from
                the barcode listing

        Returns:
            GameResponse, or None if the payload has no name
        """
        name = self._safe_get(api_response, "name")
        if not name:
            return None

        platform = context.get("platform") or ""
        game_format = context.get("format") or derive_format_from_platforms(
            self._names(api_response.get("platforms")), platform
        )

        ratings = self._names(api_response.get("ratings"))
        esrb = next((rating for rating in ratings if "esrb" in rating.lower()), None)
        image = self._safe_get(api_response, "image", default={})

        return GameResponse(
            title=_titled(name, context.get("edition") or ""),
            platform=platform,
            genres=self._names(api_response.get("genres")),
            developers=self._names(api_response.get("developers")),
            publishers=self._names(api_response.get("publishers")),
            release_date=self._safe_get(api_response, "original_release_date", default=""),
            rating=esrb or (ratings[0] if ratings else ""),
            description=self._safe_get(api_response, "deck", default=""),
            format=game_format,
            image_url=(
                self._safe_get(image, "super_url")
                or self._safe_get(image, "medium_url")
                or self._safe_get(image, "small_url")
            ),
        )


class IgdbGameNormalizer(Normalizer):
    """Normalize an IGDB game object to `GameResponse`.

    Companies are split into developers and publishers by their
    ``involved_companies`` flags; an ESRB age rating is preferred over PEGI.
    """

    def normalize(self, api_response: Any, **context: Any) -> GameResponse | None:
        name = self._safe_get(api_response, "name")
        if not name:
            return None

        platform_names = self._names(api_response.get("platforms"))
        platform = context.get("platform") or (platform_names[0] if platform_names else "")
        game_format = context.get("format") or derive_format_from_platforms(platform_names, platform)

        companies = api_response.get("involved_companies") or []
        developers = [
            self._safe_get(c, "company", "name") for c in companies if self._safe_get(c, "developer")
        ]
        publishers = [
            self._safe_get(c, "company", "name") for c in companies if self._safe_get(c, "publisher")
        ]

        return GameResponse(
            title=_titled(name, context.get("edition") or ""),
            platform=platform,
            genres=self._names(api_response.get("genres")),
            developers=[d for d in developers if d],
            publishers=[p for p in publishers if p],
            release_date=self._release_date(api_response.get("first_release_date")),
            rating=self._rating(api_response.get("age_ratings")),
            description=self._safe_get(api_response, "summary", default=""),
            format=game_format,
            image_url=fix_cover_url(self._safe_get(api_response, "cover", "url")),
        )

    def _release_date(self, timestamp: Any) -> str:
        if not isinstance(timestamp, int | float) or isinstance(timestamp, bool):
            return ""
        return datetime.fromtimestamp(timestamp, UTC).strftime("%Y-%m-%d")

    def _rating(self, age_ratings: Any) -> str:
        if not isinstance(age_ratings, list):
            return ""
        labels = {}
        for age_rating in age_ratings:
            org = IGDB_RATING_ORGS.get(self._safe_get(age_rating, "category"))
            label = IGDB_RATINGS.get(self._safe_get(age_rating, "rating"))
            if org and label:
                labels.setdefault(org, f"{org} {label}")
        return labels.get("ESRB") or labels.get("PEGI") or ""
