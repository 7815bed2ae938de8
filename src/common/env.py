"""Environment configuration interface for mediaset-lookup.

This module provides a clean interface for accessing environment variables,
centralizing all environment variable access in one place. Provider quotas
default to values that leave headroom below each provider's free tier.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def _get_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Environment:
    """Interface for accessing environment configuration."""

    @staticmethod
    def log_level() -> str:
        """Get the default log level.

        Returns:
            Log level name, defaults to 'INFO'
        """
        return os.getenv("LOG_LEVEL", "INFO").upper()

    # Cache

    @staticmethod
    def cache_enabled() -> bool:
        """Whether the in-process cache stores anything.

        Returns:
            True unless CACHE_ENABLED is set to a false value
        """
        return _get_bool("CACHE_ENABLED", True)

    @staticmethod
    def cache_default_ttl_minutes() -> int:
        """Get the TTL used for cache entries stored without an explicit TTL.

        Returns:
            TTL in minutes, defaults to 10
        """
        return _get_int("CACHE_DEFAULT_TTL_MINUTES", 10)

    @staticmethod
    def metadata_cache_ttl_minutes() -> int:
        """Get the TTL for memoized metadata value lists.

        Returns:
            TTL in minutes, defaults to 10
        """
        return _get_int("METADATA_CACHE_TTL_MINUTES", 10)

    # UPCitemdb

    @staticmethod
    def upcitemdb_base_url() -> str:
        """Get the UPCitemdb API base URL.

        Returns:
            Base URL, defaults to the free trial endpoint
        """
        return os.getenv("UPCITEMDB_BASE_URL", "https://api.upcitemdb.com/prod/trial/")

    @staticmethod
    def upcitemdb_timeout() -> int:
        return _get_int("UPCITEMDB_TIMEOUT", 10)

    @staticmethod
    def upcitemdb_max_requests_per_minute() -> int:
        """Get the UPCitemdb per-minute request budget.

        Returns:
            Requests per minute, defaults to 5 (free plan allows 6)
        """
        return _get_int("UPCITEMDB_MAX_REQUESTS_PER_MINUTE", 5)

    @staticmethod
    def upcitemdb_max_requests_per_day() -> int:
        """Get the UPCitemdb daily request budget.

        Returns:
            Requests per day, defaults to 90 (free plan allows 100)
        """
        return _get_int("UPCITEMDB_MAX_REQUESTS_PER_DAY", 90)

    @staticmethod
    def upcitemdb_min_delay_ms() -> int:
        return _get_int("UPCITEMDB_MIN_DELAY_MS", 1000)

    @staticmethod
    def upcitemdb_max_retry_pause_seconds() -> int:
        """Get the longest pause UPCitemdb burst limits are waited out for.

        Returns:
            Seconds, defaults to 65
        """
        return _get_int("UPCITEMDB_MAX_RETRY_PAUSE_SECONDS", 65)

    # Generic barcode lookup

    @staticmethod
    def barcode_lookup_base_url() -> str:
        return os.getenv("BARCODE_LOOKUP_BASE_URL", "https://api.barcodelookup.com/v3/")

    @staticmethod
    def barcode_lookup_api_key() -> str | None:
        """Get the barcodelookup.com API key.

        Returns:
            API key, or None when the provider is not configured
        """
        return os.getenv("BARCODE_LOOKUP_API_KEY") or None

    # OpenLibrary

    @staticmethod
    def openlibrary_base_url() -> str:
        return os.getenv("OPENLIBRARY_BASE_URL", "https://openlibrary.org/")

    @staticmethod
    def openlibrary_timeout() -> int:
        return _get_int("OPENLIBRARY_TIMEOUT", 10)

    # TMDB

    @staticmethod
    def tmdb_base_url() -> str:
        return os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3/")

    @staticmethod
    def tmdb_api_key() -> str | None:
        """Get the TMDB v3 API key.

        Returns:
            API key, or None when not configured
        """
        return os.getenv("TMDB_API_KEY") or None

    @staticmethod
    def tmdb_bearer_token() -> str | None:
        """Get the TMDB v4 read access token.

        Returns:
            Bearer token, or None when not configured
        """
        return os.getenv("TMDB_BEARER_TOKEN") or None

    @staticmethod
    def tmdb_timeout() -> int:
        return _get_int("TMDB_TIMEOUT", 10)

    # IGDB

    @staticmethod
    def igdb_base_url() -> str:
        return os.getenv("IGDB_BASE_URL", "https://api.igdb.com/v4/")

    @staticmethod
    def igdb_token_url() -> str:
        return os.getenv("IGDB_TOKEN_URL", "https://id.twitch.tv/oauth2/token")

    @staticmethod
    def igdb_client_id() -> str | None:
        """Get the Twitch application client id used for IGDB.

        Returns:
            Client id, or None when IGDB is not configured
        """
        return os.getenv("IGDB_CLIENT_ID") or None

    @staticmethod
    def igdb_client_secret() -> str | None:
        return os.getenv("IGDB_CLIENT_SECRET") or None

    @staticmethod
    def igdb_timeout() -> int:
        return _get_int("IGDB_TIMEOUT", 30)

    # GiantBomb

    @staticmethod
    def giantbomb_base_url() -> str:
        return os.getenv("GIANTBOMB_BASE_URL", "https://www.giantbomb.com/api/")

    @staticmethod
    def giantbomb_api_key() -> str | None:
        return os.getenv("GIANTBOMB_API_KEY") or None

    @staticmethod
    def giantbomb_timeout() -> int:
        return _get_int("GIANTBOMB_TIMEOUT", 10)

    # MusicBrainz

    @staticmethod
    def musicbrainz_base_url() -> str:
        return os.getenv("MUSICBRAINZ_BASE_URL", "https://musicbrainz.org/")

    @staticmethod
    def musicbrainz_user_agent() -> str:
        """Get the User-Agent MusicBrainz requires for identification.

        Returns:
            User-Agent string, defaults to the project's identifier
        """
        from common.constants import USER_AGENT

        return os.getenv("MUSICBRAINZ_USER_AGENT", USER_AGENT)

    @staticmethod
    def musicbrainz_timeout() -> int:
        return _get_int("MUSICBRAINZ_TIMEOUT", 10)


# Singleton instance for convenient access
env = Environment()
