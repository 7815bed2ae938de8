"""Music metadata normalizer for MusicBrainz release responses."""

import re
from typing import Any

from ..models import DiscResponse, MusicResponse
from .base import Normalizer

MAX_GENRES = 5


def capitalize_genre(genre: str) -> str:
    """Capitalize each word of a tag, treating hyphens as spaces.

    Example:
        >>> capitalize_genre("progressive-rock")
        'Progressive Rock'
    """
    words = [word for word in re.split(r"[\s-]+", genre or "") if word]
    return " ".join(word[0].upper() + word[1:].lower() for word in words)


class MusicNormalizer(Normalizer):
    """Normalize a MusicBrainz release (with recordings, labels and tags) to `MusicResponse`.

    Durations are in milliseconds. A track's own length wins over its
    recording's length.
    """

    def normalize(self, api_response: Any, **context: Any) -> MusicResponse | None:
        title = self._safe_get(api_response, "title")
        if not title:
            return None

        artist_credit = api_response.get("artist-credit") or []
        artist = self._safe_get(artist_credit[0], "name", default="") if artist_credit else ""

        label_info = api_response.get("label-info") or []
        label = self._safe_get(label_info[0], "label", "name", default="") if label_info else ""

        media = api_response.get("media") or []
        total_duration = None
        total_tracks = 0
        disc_list = []
        for medium in media:
            total_tracks += self._to_int(medium.get("track-count")) or 0
            for track in medium.get("tracks") or []:
                length = self._to_int(track.get("length"))
                if length is None:
                    length = self._to_int(self._safe_get(track, "recording", "length"))
                if length is not None:
                    total_duration = (total_duration or 0) + length

                number = track.get("number")
                if isinstance(number, str) and number.strip().isdigit():
                    disc_list.append(
                        DiscResponse(
                            track_number=int(number),
                            title=track.get("title") or "",
                            duration=length,
                        )
                    )

        return MusicResponse(
            title=title,
            artist=artist,
            release_date=self._safe_get(api_response, "date", default=""),
            genres=self._top_genres(api_response.get("tags")),
            duration=total_duration,
            label=label,
            tracks=total_tracks or None,
            discs=len(media) or None,
            disc_list=disc_list,
            format=self._safe_get(media[0], "format", default="") if media else "",
            image_url=None,
        )

    def _top_genres(self, tags: Any) -> list[str]:
        if not isinstance(tags, list):
            return []
        ranked = sorted(
            (tag for tag in tags if isinstance(tag, dict) and tag.get("name")),
            key=lambda tag: self._to_int(tag.get("count")) or 0,
            reverse=True,
        )
        return [capitalize_genre(tag["name"]) for tag in ranked[:MAX_GENRES]]
