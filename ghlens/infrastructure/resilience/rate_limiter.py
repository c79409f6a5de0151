"""Tracker for the GitHub API rate limit.

Observes the quota reported in response headers and polls the
/rate_limit endpoint so the status indicator can warn before the next
real request fails.
"""

import asyncio
import dataclasses
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx

from ghlens.domain.models.errors import GitHubApiError, ServerError, TransportFailure
from ghlens.domain.models.github import RateLimitState
from ghlens.infrastructure.github.http_client import (
    LIMIT_HEADER,
    RATE_LIMIT_PATH,
    REMAINING_HEADER,
    RESET_HEADER,
)

logger = logging.getLogger(__name__)

NEAR_LIMIT_REMAINING = 10
DEFER_MIN_TIME_TO_RESET = timedelta(minutes=5)
DEFAULT_POLL_INTERVAL_SECONDS = 30


def parse_reset_epoch(value: Any) -> Optional[datetime]:
    """Converts an X-RateLimit-Reset epoch-seconds value to an aware datetime."""
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _parse_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class RateLimitTracker:
    """Process-wide view of the remaining GitHub API quota."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        initial_state: Optional[RateLimitState] = None,
    ):
        """Initializes the tracker.

        Args:
            client: Shared GitHub HTTP client used for /rate_limit polls.
            clock: Returns the current time as an aware datetime.
            sleep: Coroutine used to wait between polls.
            initial_state: Starting snapshot; optimistic defaults if None.
        """
        self._client = client
        self._clock = clock
        self._sleep = sleep
        self._state = initial_state or RateLimitState()
        logger.info(f"RateLimitTracker initialized: {self._state.remaining}/{self._state.limit}")

    def current_state(self) -> RateLimitState:
        """Returns a copy of the latest known quota snapshot."""
        return dataclasses.replace(self._state)

    def is_near_limit(self) -> bool:
        """True once fewer than NEAR_LIMIT_REMAINING requests are left."""
        return self._state.remaining < NEAR_LIMIT_REMAINING

    def should_defer(self) -> bool:
        """True when the quota is nearly gone and the reset is still far away.

        A request made now would likely fail, and waiting for the reset
        takes more than five minutes.
        """
        if not self.is_near_limit():
            return False
        seconds = self._state.seconds_until_reset(self._clock())
        if seconds is None:
            return False
        return seconds > DEFER_MIN_TIME_TO_RESET.total_seconds()

    def update_from_headers(self, headers: Mapping[str, str]) -> bool:
        """Replaces the state from X-RateLimit-* response headers.

        Returns:
            True if the headers carried a quota and the state was updated.
        """
        headers = httpx.Headers(headers)
        remaining = _parse_int(headers.get(REMAINING_HEADER))
        if remaining is None:
            return False
        limit = _parse_int(headers.get(LIMIT_HEADER))
        reset_at = parse_reset_epoch(headers.get(RESET_HEADER))
        self._state = RateLimitState(
            remaining=remaining,
            limit=limit if limit is not None else self._state.limit,
            reset_at=reset_at or self._state.reset_at,
        )
        logger.debug(f"Rate limit updated from headers: {remaining}/{self._state.limit}")
        return True

    async def refresh(self) -> RateLimitState:
        """Polls GET /rate_limit and replaces the stored state.

        Raises:
            TransportFailure: If the poll produced no response.
            ServerError: If the poll returned a non-200 status or an
                unexpected body.
        """
        try:
            response = await self._client.get(RATE_LIMIT_PATH)
        except httpx.RequestError as e:
            raise TransportFailure(f"Rate limit check failed: {e}") from e

        if response.status_code != 200:
            raise ServerError(response.status_code, f"{response.status_code}: rate limit check failed")

        try:
            core = response.json()["resources"]["core"]
            state = RateLimitState(
                remaining=int(core["remaining"]),
                limit=int(core["limit"]),
                reset_at=parse_reset_epoch(core["reset"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise ServerError(response.status_code, f"Unexpected rate limit payload: {e}") from e

        self._state = state
        logger.info(f"Rate limit refreshed: {state.remaining}/{state.limit}, reset at {state.reset_at}")
        return self.current_state()

    async def poll(
        self,
        interval_s: float = DEFAULT_POLL_INTERVAL_SECONDS,
        on_update: Optional[Callable[[RateLimitState], None]] = None,
        iterations: Optional[int] = None,
    ) -> None:
        """Refreshes on a fixed interval, independent of fetch activity.

        A failed poll keeps the previous state and is only logged.

        Args:
            interval_s: Seconds between polls.
            on_update: Called with the new state after each successful poll.
            iterations: Number of polls to run; None polls until cancelled.
        """
        count = 0
        while iterations is None or count < iterations:
            try:
                state = await self.refresh()
            except GitHubApiError as e:
                logger.warning(f"Could not check the rate limit: {e}")
            else:
                if on_update:
                    on_update(state)
            count += 1
            if iterations is not None and count >= iterations:
                break
            await self._sleep(interval_s)
