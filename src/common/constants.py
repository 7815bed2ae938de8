"""Shared constants for the mediaset-lookup application.

For environment-based configuration (API keys, quotas, etc.), use the env module:
    from common.env import env
    per_minute = env.upcitemdb_max_requests_per_minute()
"""

USER_AGENT = "MediaSet/1.0 (https://github.com/mediaset/mediaset-lookup)"

# Cache key prefixes
TOKEN_CACHE_PREFIX = "token"
BARCODE_CACHE_PREFIX = "barcode"
METADATA_CACHE_PREFIX = "metadata"

# Image hosts used to build absolute image URLs
OPENLIBRARY_COVER_URL = "https://covers.openlibrary.org/b/id/{}-L.jpg"
TMDB_IMAGE_URL = "https://image.tmdb.org/t/p/w500{}"

# Barcode products are stable, so lookups are cached for a week
BARCODE_CACHE_DAYS = 7
