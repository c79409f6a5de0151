"""Service for executing GitHub API GETs with automatic retries.

Implements exponential backoff for transient failures (5xx, secondary
rate limits, network errors) and fails fast on outcomes a retry cannot
change: 404, 422, and a 403 that reports an exhausted quota.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from ghlens.domain.events.api_events import (
    ApiCallFailed, ApiCallInitiated, ApiCallSucceeded,
    DomainEvent, RateLimitExhausted, RetryScheduled,
)
from ghlens.domain.models.errors import (
    GitHubApiError, InvalidInputError, MaxRetryError, NotFoundError,
    RateLimitedError, ServerError, TransportFailure,
)
from ghlens.infrastructure.github.http_client import REMAINING_HEADER, RESET_HEADER
from ghlens.infrastructure.resilience.rate_limiter import RateLimitTracker, parse_reset_epoch

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_BACKOFF_SECONDS = 1.0
DEFAULT_BACKOFF_FACTOR = 2.0
DEFAULT_MAX_BACKOFF_SECONDS = 10.0

# --- Retry Service ---

class ApiRetryService:
    """Handles GitHub GET requests with bounded retries and typed failures."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        rate_limit_tracker: Optional[RateLimitTracker] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_backoff_s: float = DEFAULT_INITIAL_BACKOFF_SECONDS,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        max_backoff_s: float = DEFAULT_MAX_BACKOFF_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        event_listener: Optional[Callable[[DomainEvent], None]] = None,
    ):
        """Initializes the ApiRetryService.

        Args:
            client: Shared GitHub HTTP client (headers already configured).
            rate_limit_tracker: Updated from every response's quota headers.
            max_retries: Retries after the first attempt.
            initial_backoff_s: Delay before the first retry.
            backoff_factor: Multiplier applied per retry (2 = exponential).
            max_backoff_s: Upper bound for any single delay.
            sleep: Coroutine used to wait between attempts.
            event_listener: Optional receiver for domain events.
        """
        self.client = client
        self.rate_limit_tracker = rate_limit_tracker
        self.max_retries = max_retries
        self.initial_backoff_s = initial_backoff_s
        self.backoff_factor = backoff_factor
        self.max_backoff_s = max_backoff_s
        self._sleep = sleep
        self._event_listener = event_listener

        logger.info(
            f"ApiRetryService initialized: max_retries={max_retries}, "
            f"initial_backoff={initial_backoff_s}s, factor={backoff_factor}, cap={max_backoff_s}s"
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retrying after the given 0-based attempt."""
        return min(self.initial_backoff_s * (self.backoff_factor ** attempt), self.max_backoff_s)

    def _dispatch(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self._event_listener:
            self._event_listener(event)

    def _fail(self, url: str, error: GitHubApiError, attempts: int) -> GitHubApiError:
        """Logs and announces a definitive failure, returning the error to raise."""
        logger.error(f"GET {url} failed after {attempts} attempt(s): {error}")
        self._dispatch(ApiCallFailed(
            url=url, error_kind=error.kind.value, error_message=str(error), attempts=attempts
        ))
        return error

    async def _wait_before_retry(self, url: str, attempt: int, retries: int, reason: str) -> None:
        delay = self.backoff_delay(attempt)
        logger.warning(
            f"Retryable error for GET {url} on attempt {attempt + 1}/{retries + 1}: {reason}. "
            f"Waiting {delay:.2f}s..."
        )
        self._dispatch(RetryScheduled(url=url, attempt_number=attempt + 1, delay_seconds=delay, reason=reason))
        await self._sleep(delay)

    async def fetch_with_retry(
        self,
        url: str,
        max_retries: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Performs one logical GET, retrying transient failures.

        Args:
            url: Absolute URL or path relative to the client's base URL.
            max_retries: Overrides the service default for this call.
            params: Query parameters.

        Returns:
            The parsed JSON body of the first 2xx response.

        Raises:
            NotFoundError: On 404, without retrying.
            InvalidInputError: On 422, without retrying.
            RateLimitedError: On a 403 with an exhausted quota (carries
                reset_at, no retry), or when 403s outlast the retries.
            ServerError: When other non-2xx statuses outlast the retries,
                or a 2xx body is not JSON.
            TransportFailure: When network errors outlast the retries.
            MaxRetryError: If no attempt could be made at all.
        """
        retries = self.max_retries if max_retries is None else max_retries
        last_error: Optional[Exception] = None

        for attempt in range(retries + 1):
            is_last_attempt = attempt == retries
            self._dispatch(ApiCallInitiated(url=url, attempt_number=attempt + 1))
            start_time = time.perf_counter()

            try:
                response = await self.client.get(url, params=params)
            except httpx.RequestError as e:
                last_error = e
                if is_last_attempt:
                    raise self._fail(url, TransportFailure(f"Connection error: {e}"), attempt + 1) from e
                await self._wait_before_retry(url, attempt, retries, f"{type(e).__name__}: {e}")
                continue

            latency_ms = (time.perf_counter() - start_time) * 1000
            if self.rate_limit_tracker:
                self.rate_limit_tracker.update_from_headers(response.headers)

            status = response.status_code

            if status == 404:
                raise self._fail(url, NotFoundError(f"404: {url} not found"), attempt + 1)

            if status == 422:
                raise self._fail(url, InvalidInputError(f"422: invalid request for {url}"), attempt + 1)

            if status == 403:
                reset_at = parse_reset_epoch(response.headers.get(RESET_HEADER))
                if response.headers.get(REMAINING_HEADER) == "0" and reset_at is not None:
                    # Nothing succeeds before reset_at, so retrying here is pointless
                    self._dispatch(RateLimitExhausted(url=url, reset_at=reset_at))
                    raise self._fail(url, RateLimitedError(reset_at), attempt + 1)
                last_error = RateLimitedError()
                if is_last_attempt:
                    raise self._fail(url, last_error, attempt + 1)
                await self._wait_before_retry(url, attempt, retries, "403 secondary rate limit")
                continue

            if not response.is_success:
                last_error = ServerError(status)
                if is_last_attempt:
                    raise self._fail(url, last_error, attempt + 1)
                await self._wait_before_retry(url, attempt, retries, f"HTTP {status}")
                continue

            try:
                data = response.json()
            except ValueError as e:
                raise self._fail(url, ServerError(status, f"{status}: response was not valid JSON"), attempt + 1) from e

            self._dispatch(ApiCallSucceeded(url=url, status_code=status, latency_ms=latency_ms))
            return data

        # --- Loop finished without a typed outcome (e.g. negative max_retries) ---
        raise self._fail(url, MaxRetryError(retries, last_error), max(retries + 1, 0))
