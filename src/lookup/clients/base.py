"""Base class for rate-limited metadata API clients."""

from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any

import requests

from common.constants import USER_AGENT
from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..models import FetchResult
from ..types import ProviderError, QuotaExhaustedError
from .rate_limiter import ProviderThrottle, RateLimitConfig

logger = get_logger(__name__)


class RequestState(str, Enum):
    """States a single provider call moves through.

    IDLE -> THROTTLED -> SENT -> SUCCEEDED | FAILED, with at most one
    SENT -> BURST_COOLDOWN -> THROTTLED detour per call.
    """

    IDLE = "idle"
    THROTTLED = "throttled"
    SENT = "sent"
    BURST_COOLDOWN = "burst_cooldown"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class RateLimitedClient:
    """Base class for all external metadata API clients.

    Subclasses expose provider operations that call `_request`, which
    serializes access to the provider, applies its quota, retries a short
    burst limit once and turns the response into a `FetchResult`:

    - OK: 2xx with a JSON body (`data` holds the parsed body)
    - NOT_FOUND: 404
    - RATE_LIMITED: rate-limit status without a usable reset time, or a
      failed retry after a burst pause
    - ERROR: any other status, a timeout or a malformed body

    Exceptional conditions raise instead: `QuotaExhaustedError` for a spent
    daily budget or a distant reset, `ProviderError` when the network stack
    fails, `LookupCancelledError` when the caller cancels.
    """

    # Subclasses must set these class attributes
    name: str = "provider"
    requires_api_key: bool = False

    RATE_LIMIT_STATUSES: tuple[int, ...] = (429,)
    RESET_HEADER = "Retry-After"
    RESET_IS_EPOCH = False
    QUOTA_HEADERS = (
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
        "X-RateLimit-Current",
    )

    def __init__(
        self,
        base_url: str,
        rate_limit: RateLimitConfig,
        *,
        session: requests.Session | None = None,
        timeout: float = 10,
        api_key: str | None = None,
        clock: Clock | None = None,
    ):
        """Initialize client.

        Args:
            base_url: Provider API root; relative paths are joined onto it
            rate_limit: Quota for this provider
            session: Optional requests session for connection pooling
            timeout: Per-request timeout in seconds
            api_key: API key for providers that require one
            clock: Time source for throttling (default: real UTC clock)
        """
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.session = session if session is not None else requests.Session()
        self._owns_session = session is None
        self.timeout = timeout
        self.api_key = api_key
        self.throttle = ProviderThrottle(self.name, rate_limit, clock)
        self.headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}

    @property
    def is_available(self) -> bool:
        """True unless the provider needs an API key and none was given."""
        return not (self.requires_api_key and not self.api_key)

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        cancellation: CancellationToken | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: Any = None,
    ) -> FetchResult:
        """Perform one throttled request against this provider.

        The provider lock is held across throttling, the HTTP call and a
        possible burst retry, so callers of the same client never overlap.
        """
        cancellation = cancellation or CancellationToken()
        url = self._url(path)
        with self.throttle.lock.holding(cancellation):
            return self._run(method, url, cancellation, params, {**self.headers, **(headers or {})}, data)

    def _run(
        self,
        method: str,
        url: str,
        cancellation: CancellationToken,
        params: dict[str, Any] | None,
        headers: dict[str, str],
        data: Any,
    ) -> FetchResult:
        state = RequestState.IDLE
        response: requests.Response | None = None
        reset_at: datetime | None = None
        result: FetchResult | None = None
        retried = False

        while True:
            if state is RequestState.IDLE:
                self.throttle.wait_for_burst_cooldown(cancellation)
                self.throttle.apply_proactive_throttling(cancellation)
                state = RequestState.THROTTLED

            elif state is RequestState.THROTTLED:
                cancellation.raise_if_cancelled()
                try:
                    response = self.session.request(
                        method,
                        url,
                        params=params,
                        headers=headers,
                        data=data,
                        timeout=self.timeout,
                    )
                    state = RequestState.SENT
                except requests.exceptions.Timeout:
                    logger.warning(f"{self.name} request timed out: {url}")
                    result = FetchResult.rate_limited() if retried else FetchResult.error()
                    state = RequestState.FAILED
                except requests.exceptions.RequestException as e:
                    raise ProviderError(f"{self.name} request failed: {e}", provider=self.name) from e

            elif state is RequestState.SENT:
                self._log_quota_headers(url, response)
                status = response.status_code

                if 200 <= status < 300:
                    self.throttle.record_success()
                    result = self._parse_body(url, response)
                    state = RequestState.SUCCEEDED
                elif retried:
                    logger.warning(
                        f"Retry after {self.name} burst rate limit pause failed "
                        f"with status {status}: {url}"
                    )
                    result = FetchResult.rate_limited()
                    state = RequestState.FAILED
                elif status in self.RATE_LIMIT_STATUSES:
                    reset_at = self._parse_reset_time(response.headers)
                    if reset_at is None:
                        logger.warning(
                            f"{self.name} rate limit exceeded but no valid reset time provided: {url}"
                        )
                        result = FetchResult.rate_limited()
                        state = RequestState.FAILED
                    elif self.throttle.is_burst_reset(reset_at):
                        state = RequestState.BURST_COOLDOWN
                    else:
                        hours = self.throttle.seconds_until(reset_at) / 3600
                        logger.error(
                            f"{self.name} daily rate limit exceeded, cannot retry "
                            f"(reset in {hours:.1f} hours)"
                        )
                        raise QuotaExhaustedError(
                            f"{self.name} rate limit resets in {hours:.1f} hours",
                            provider=self.name,
                        )
                elif status == 404:
                    logger.info(f"{self.name} returned 404 for {url}")
                    result = FetchResult.not_found()
                    state = RequestState.FAILED
                else:
                    logger.warning(f"{self.name} returned status code {status} for {url}")
                    result = FetchResult.error()
                    state = RequestState.FAILED

            elif state is RequestState.BURST_COOLDOWN:
                self.throttle.pause_for_burst(reset_at, cancellation)
                logger.info(f"Retrying {self.name} request after burst rate limit pause")
                retried = True
                state = RequestState.THROTTLED

            else:
                return result

    def _parse_body(self, url: str, response: requests.Response) -> FetchResult:
        try:
            return FetchResult.success(response.json())
        except ValueError as e:
            logger.warning(f"{self.name} returned a malformed body for {url}: {e}")
            return FetchResult.error()

    def _parse_reset_time(self, headers: Any) -> datetime | None:
        """Read the provider's reset header as an absolute UTC time.

        Returns:
            Reset time, or None if the header is missing or unparsable
        """
        value = headers.get(self.RESET_HEADER) if headers is not None else None
        if not value:
            return None

        try:
            number = int(str(value).strip())
        except ValueError:
            if self.RESET_IS_EPOCH:
                return None
            # Retry-After may also be an HTTP date
            try:
                parsed = parsedate_to_datetime(str(value))
            except (TypeError, ValueError):
                return None
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)

        try:
            if self.RESET_IS_EPOCH:
                return datetime.fromtimestamp(number, UTC)
            return self.throttle.clock.now() + timedelta(seconds=number)
        except (OverflowError, OSError, ValueError):
            # Out of datetime's range
            return None

    def _log_quota_headers(self, url: str, response: requests.Response) -> None:
        headers = response.headers if response.headers is not None else {}
        values = ", ".join(f"{h}={headers.get(h, 'null')}" for h in self.QUOTA_HEADERS)
        state = self.throttle.state
        logger.info(
            f"{self.name} rate limit status for {url}: {values}, "
            f"LocalMinute={state.requests_in_current_minute}, LocalDay={state.requests_today}"
        )

    def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
