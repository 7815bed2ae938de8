"""Cleaning of retail product titles before they are used as search terms.

Barcode databases return listing titles such as
``"The Matrix (Blu-ray) (1999)"`` or ``"Halo 3 - Xbox 360 (Disc) NEW"``.
Metadata providers need the bare work title, so the helpers here strip
packaging noise and report what they learned (year, format, platform,
edition) separately. None of them raise on odd input.
"""

import re
from typing import Any

# Movies

MOVIE_MARKERS = (
    r"blu-?ray|dvd|4k|uhd|digital|combo|pack|edition|widescreen|full\s*screen"
    r"|bd|hd|\d+[\s-]*discs?"
)
MOVIE_YEAR = re.compile(r"\((\d{4})\)")
BRACKETED_MOVIE_MARKER = re.compile(
    rf"[\(\[][^\)\]]*\b(?:{MOVIE_MARKERS})\b[^\)\]]*[\)\]]", re.IGNORECASE
)
TRAILING_MOVIE_FORMAT = re.compile(r"(?:\s+-)?\s+(?:blu-?ray|dvd|4k\s*uhd|4k|uhd)\b.*$", re.IGNORECASE)
TRAILING_CONDITION = re.compile(
    r"\s+(?:new|used|sealed|mint|opened|unopened|like new)\s*$", re.IGNORECASE
)
WHITESPACE = re.compile(r"\s+")
TRAILING_PUNCTUATION = "-:, "
TRAILING_ARTICLE = re.compile(r"^(.+?),?\s+(a|an|the)$", re.IGNORECASE)


def _clean_movie_title_once(title: str) -> str:
    title = MOVIE_YEAR.sub(" ", title)
    title = BRACKETED_MOVIE_MARKER.sub(" ", title)
    title = TRAILING_CONDITION.sub("", title)
    title = TRAILING_MOVIE_FORMAT.sub("", title)
    title = WHITESPACE.sub(" ", title).strip()
    return title.rstrip(TRAILING_PUNCTUATION).strip()


def _move_trailing_article(title: str) -> str:
    """Turn a catalog-style "Matrix, The" into "The Matrix"."""
    match = TRAILING_ARTICLE.match(title)
    if not match:
        return title
    moved = f"{match.group(2)} {match.group(1)}"
    # "A The" would flip back and forth
    return title if TRAILING_ARTICLE.match(moved) else moved


def normalize_title(raw_title: str | None) -> str:
    """Strip format markers, a ``(YYYY)`` year and listing noise from a movie title.

    A trailing article moves to the front. Cleaning is repeated until the
    title stops changing, so the result is a fixed point:
    ``normalize_title(normalize_title(t)) == normalize_title(t)``.

    Example:
        >>> normalize_title("The Matrix (Blu-ray) (1999)")
        'The Matrix'
        >>> normalize_title("Akira [Widescreen] - DVD NEW")
        'Akira'
        >>> normalize_title("Matrix The (DVD)")
        'The Matrix'
    """
    if not raw_title or not isinstance(raw_title, str):
        return ""

    title = WHITESPACE.sub(" ", raw_title).strip()
    while True:
        cleaned = _clean_movie_title_once(title)
        if cleaned == title:
            cleaned = _move_trailing_article(cleaned)
            if cleaned == title:
                return cleaned
        title = cleaned


def extract_year(raw_title: str | None) -> int | None:
    """Return the last ``(YYYY)`` year in a title, if any.

    Example:
        >>> extract_year("The Matrix (Blu-ray) (1999)")
        1999
    """
    if not raw_title or not isinstance(raw_title, str):
        return None
    years = MOVIE_YEAR.findall(raw_title)
    return int(years[-1]) if years else None


def infer_format(title: str | None, category: str | None = None) -> str | None:
    """Infer a movie's physical format from its listing title and category.

    Returns:
        "4K UHD", "Blu-ray", "DVD", or None when nothing matches

    Example:
        >>> infer_format("The Matrix (Blu-ray) (1999)")
        'Blu-ray'
    """
    text = f"{title or ''} {category or ''}".lower()
    if re.search(r"\b(?:4k|uhd)\b", text):
        return "4K UHD"
    if re.search(r"blu-?ray", text):
        return "Blu-ray"
    if re.search(r"\bdvd\b", text):
        return "DVD"
    return None


# Games

EDITION = re.compile(
    r"deluxe|goty|game of the year|definitive|collector'?s edition|complete|ultimate",
    re.IGNORECASE,
)
GAME_PLATFORM = re.compile(
    r"\b(?:ps5|ps4|playstation 5|playstation 4|playstation|xbox series x\|s|xbox series x"
    r"|xbox one|xbox 360|xbox|nintendo switch|switch|wii u|wii|3ds|ds)\b",
    re.IGNORECASE,
)
BRACKETED_GAME_MEDIA = re.compile(r"\s*[\(\[][^\)\]]*(?:disc|cartridge|digital)[^\)\]]*[\)\]]", re.IGNORECASE)
TRAILING_GAME_MEDIA = re.compile(r"\s*-\s*(?:disc|cartridge|digital).*$", re.IGNORECASE)
RELEASE_SUFFIX = re.compile(
    r"\s*-\s*(?:pre-played|pre-owned|used|greatest hits|platinum hits|player's choice"
    r"|nintendo selects|essentials).*$",
    re.IGNORECASE,
)
SKU = re.compile(r"\b[A-Z0-9]{3,}-[A-Z0-9]{2,}\b")
BRACKETED = re.compile(r"\s*(?:\([^)]*\)|\[[^\]]*\])")

PLATFORM_HINTS = (
    (r"ps5|playstation 5", "PlayStation 5"),
    (r"ps4|playstation 4", "PlayStation 4"),
    (r"xbox series x\|s|series x", "Xbox Series X|S"),
    (r"xbox one", "Xbox One"),
    (r"xbox 360", "Xbox 360"),
    (r"nintendo switch|switch", "Nintendo Switch"),
    (r"wii u", "Wii U"),
    (r"wii", "Wii"),
    (r"3ds", "Nintendo 3DS"),
    (r"\bds\b", "Nintendo DS"),
)


def clean_game_title(raw_title: str | None) -> tuple[str, str]:
    """Split a game listing title into a searchable title and an edition.

    Returns:
        Tuple of (cleaned_title, edition); edition is "" when none is named

    Example:
        >>> clean_game_title("Halo 3 Legendary - Xbox 360 (Disc)")
        ('Halo 3 Legendary', '')
        >>> clean_game_title("The Witcher 3 Game of the Year Edition PS4")
        ('The Witcher 3', 'Game of the Year')
    """
    if not raw_title or not isinstance(raw_title, str) or not raw_title.strip():
        return "", ""

    title = raw_title.strip()
    match = EDITION.search(title)
    edition = match.group(0) if match else ""

    title = GAME_PLATFORM.sub("", title)
    title = BRACKETED_GAME_MEDIA.sub("", title)
    title = TRAILING_GAME_MEDIA.sub("", title)
    title = RELEASE_SUFFIX.sub("", title)
    title = re.sub(r"\s*-\s*$", "", title)
    title = SKU.sub("", title)

    if edition:
        title = re.sub(re.escape(edition) + r"\s*edition", "", title, flags=re.IGNORECASE)
        title = re.sub(re.escape(edition), "", title, flags=re.IGNORECASE)

    title = BRACKETED.sub("", title)
    title = WHITESPACE.sub(" ", title).strip().rstrip(TRAILING_PUNCTUATION).strip()
    return title, edition


def extract_game_format(raw_title: str | None) -> str:
    """Return "Cartridge", "Disc", "Digital" or "" from a game listing title."""
    if not raw_title:
        return ""
    if re.search(r"cartridge", raw_title, re.IGNORECASE):
        return "Cartridge"
    if re.search(r"disc|blu-?ray|dvd", raw_title, re.IGNORECASE):
        return "Disc"
    if re.search(r"digital", raw_title, re.IGNORECASE):
        return "Digital"
    return ""


def extract_platform(
    title: str | None,
    category: str | None = None,
    brand: str | None = None,
    model: str | None = None,
) -> str:
    """Detect the console a game listing is for.

    The title is checked first, then category, brand and model together.

    Example:
        >>> extract_platform("Mario Kart 8 Deluxe", category="Nintendo Switch Games")
        'Nintendo Switch'
    """
    for text in (title or "", " ".join(part for part in (category, brand, model) if part)):
        for pattern, platform in PLATFORM_HINTS:
            if re.search(pattern, text, re.IGNORECASE):
                return platform
    return ""


def derive_format_from_platforms(platform_names: list[str], detected_platform: str = "") -> str:
    """Guess the physical media format from the platforms a game shipped on.

    The platform matching `detected_platform` wins; otherwise the first one
    listed is used.
    """
    if not platform_names:
        return ""

    detected = detected_platform.lower()
    chosen = platform_names[0]
    if detected:
        for name in platform_names:
            lowered = name.lower()
            if detected in lowered or (lowered and lowered in detected):
                chosen = name
                break

    name = chosen.lower()

    def has(*needles: str) -> bool:
        # Whole words only: "nes" must not match "genesis"
        return any(re.search(rf"\b{re.escape(needle)}\b", name) for needle in needles)

    if has("dreamcast"):
        return "GD-ROM"
    if has("switch", "3ds", "ds", "game boy", "gameboy", "n64", "snes", "nes", "genesis", "game gear"):
        return "Cartridge"
    if has("playstation 5", "ps5", "playstation 4", "ps4", "xbox series", "xbox one"):
        return "Blu-ray Disc"
    if has("playstation 3", "ps3", "playstation 2", "ps2", "xbox", "wii"):
        return "DVD"
    if has("playstation", "saturn", "sega cd"):
        return "CD-ROM"
    if has("eshop", "digital", "download"):
        return "Nintendo eShop"
    if has("pc", "windows", "mac", "linux"):
        return "CD-ROM"
    return "DVD"


def match_score(candidate: str | None, search_title: str | None) -> float:
    """Score how well a provider's game name matches the searched title (0.0 to 1.0)."""
    if not candidate or not search_title or not candidate.strip() or not search_title.strip():
        return 0.0

    result = candidate.lower()
    search = search_title.lower()
    if result == search:
        return 1.0
    if search in result:
        return 0.9

    separators = r"[\s\-:.]+"
    result_words = [w for w in re.split(separators, result) if w]
    search_words = [w for w in re.split(separators, search) if w]
    if not search_words:
        return 0.0
    matching = sum(1 for sw in search_words if any(sw in rw or rw in sw for rw in result_words))
    return matching / len(search_words)


def find_best_match(
    results: list[dict[str, Any]], search_title: str, key: str = "name", threshold: float = 0.5
) -> dict[str, Any] | None:
    """Pick the search result whose name best matches `search_title`.

    Falls back to the first result when no candidate reaches `threshold`.
    """
    if not results:
        return None
    if len(results) == 1:
        return results[0]

    best = max(results, key=lambda result: match_score(result.get(key), search_title))
    if match_score(best.get(key), search_title) >= threshold:
        return best
    return results[0]
