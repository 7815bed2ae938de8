"""Book metadata normalizer for Open Library API responses."""

import re
import string
import unicodedata
from typing import Any

from common.constants import OPENLIBRARY_COVER_URL

from ..models import BookResponse
from .base import Normalizer


def subject_key(name: str) -> str:
    """Key that collapses subjects differing only in case, punctuation or accents.

    Example:
        >>> subject_key("Science-Fiction") == subject_key("science fiction")
        True
    """
    decomposed = unicodedata.normalize("NFKD", name or "").lower()
    return "".join(ch for ch in decomposed if ch.isalnum() and not unicodedata.combining(ch))


def display_subject(name: str) -> str:
    """Title-case a subject and use '; ' between its parts.

    Example:
        >>> display_subject("history, modern  ;20th century")
        'History; Modern; 20th Century'
    """
    text = string.capwords((name or "").strip().lower())
    text = text.replace(",", ";")
    return re.sub(r"\s*;\s*", "; ", text).strip()


class BookNormalizer(Normalizer):
    """Normalize Open Library Read API and search responses to `BookResponse`.

    Read API responses hold one or more records keyed by edition; the first
    record is used. Each record carries the ``data`` view (authors,
    publishers, subjects, pages) and the ``details`` view (physical format,
    cover ids).
    """

    def normalize(self, api_response: Any, **context: Any) -> BookResponse | None:
        """Convert a Read API response to a BookResponse.

        Args:
            api_response: Raw ``api/volumes/brief`` response

        Returns:
            BookResponse, or None when the response has no records
        """
        records = self._safe_get(api_response, "records", default={})
        if not isinstance(records, dict) or not records:
            return None

        record = next(iter(records.values()))
        data = self._safe_get(record, "data")
        if not isinstance(data, dict):
            return None

        details = self._safe_get(record, "details", "details", default={})
        publish_dates = self._safe_get(record, "publishDates") or self._safe_get(record, "publish_dates")

        return BookResponse(
            title=self._text(data.get("title")),
            subtitle=self._text(data.get("subtitle")),
            authors=self._names(data.get("authors")),
            number_of_pages=self._extract_page_count(data),
            publishers=self._extract_publishers(data.get("publishers")),
            publish_date=(publish_dates[0] if publish_dates else self._text(data.get("publish_date"))),
            subjects=self._extract_subjects(data.get("subjects")),
            format=self._extract_format(details),
            image_url=self._extract_cover_url(details),
        )

    def _text(self, value: Any) -> str:
        return "" if value is None else str(value)

    def _extract_page_count(self, data: dict[str, Any]) -> int:
        """Prefer ``number_of_pages`` over ``pagination``."""
        if "number_of_pages" in data:
            return self._to_int(data["number_of_pages"]) or 0
        if "pagination" in data:
            return self._to_int(data["pagination"]) or 0
        return 0

    def _extract_publishers(self, publishers: Any) -> list[str]:
        if not isinstance(publishers, list):
            return []
        names = []
        for publisher in publishers:
            name = publisher.get("name") if isinstance(publisher, dict) else publisher
            if name:
                names.append(str(name))
        return names

    def _extract_subjects(self, subjects: Any) -> list[str]:
        if not isinstance(subjects, list):
            return []

        seen = set()
        result = []
        for subject in subjects:
            if isinstance(subject, dict):
                name = subject.get("name") or ""
                key = subject_key(name) or subject_key(subject.get("url") or "")
            else:
                name = str(subject or "")
                key = subject_key(name)
            if not name or key in seen:
                continue
            seen.add(key)
            result.append(display_subject(name))
        return result

    def _extract_format(self, details: Any) -> str | None:
        physical_format = self._safe_get(details, "physical_format")
        if not physical_format:
            return None
        return string.capwords(str(physical_format).lower())

    def _extract_cover_url(self, details: Any) -> str | None:
        covers = self._safe_get(details, "covers")
        if isinstance(covers, list) and covers:
            return OPENLIBRARY_COVER_URL.format(covers[0])
        return None
