"""Core service serving GitHub profile and top-repository lookups.

Every consumer (the profile card, the repos listing, the interactive
session) goes through this one client, so cache checks and network
fetches follow the same path everywhere.
"""

import logging
from typing import Any, List, Optional

# Domain Layer Imports
from ghlens.domain.interfaces.cache import CacheService
from ghlens.domain.models.common import (
    PROFILE_PREFIX, REPOS_PREFIX, CacheStats, make_cache_key, normalize_username,
)
from ghlens.domain.models.errors import GitHubApiError, InvalidInputError, ServerError
from ghlens.domain.models.github import ProfileLookup, ProfileRecord, RateLimitState, RepoSummary

# Infrastructure Layer Imports (implementations injected)
from ghlens.infrastructure.github.http_client import profile_path, repos_params, repos_path
from ghlens.infrastructure.resilience.api_retry import ApiRetryService
from ghlens.infrastructure.resilience.rate_limiter import RateLimitTracker

from ghlens.core.error_messages import friendly_error_message

logger = logging.getLogger(__name__)

DEFAULT_REPO_COUNT = 3


def _unexpected_payload(path: str, detail: str) -> ServerError:
    """A 2xx answer whose body does not have the documented shape."""
    logger.error(f"Unexpected payload from {path}: {detail}")
    return ServerError(200, f"200: unexpected payload from {path} ({detail})")


class ProfileService:
    """Cache-first client for GitHub profiles and their top repositories."""

    def __init__(
        self,
        api_retry_service: ApiRetryService,
        cache_service: CacheService,
        rate_limit_tracker: Optional[RateLimitTracker] = None,
        default_repo_count: int = DEFAULT_REPO_COUNT,
    ):
        """Initializes the ProfileService with its dependencies."""
        self.api_retry_service = api_retry_service
        self.cache_service = cache_service
        self.rate_limit_tracker = rate_limit_tracker
        self.default_repo_count = default_repo_count

    @staticmethod
    def _require_username(username: str) -> str:
        login = normalize_username(username)
        if not login:
            raise InvalidInputError("422: username must not be empty", status_code=None)
        return login

    async def get_profile(self, username: str) -> ProfileRecord:
        """Returns the profile for `username`, from cache when still valid.

        Raises:
            GitHubApiError: Any typed fetch failure, unchanged.
        """
        login = self._require_username(username)
        key = make_cache_key(PROFILE_PREFIX, login)

        cached = self.cache_service.get(key)
        if cached is not None:
            return cached

        path = profile_path(login)
        data: Any = await self.api_retry_service.fetch_with_retry(path)
        if not isinstance(data, dict):
            raise _unexpected_payload(path, f"expected an object, got {type(data).__name__}")
        try:
            profile = ProfileRecord.from_api(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise _unexpected_payload(path, f"missing or malformed field {e}") from e
        self.cache_service.set(key, profile)
        return profile

    async def get_top_repos(self, username: str, count: Optional[int] = None) -> List[RepoSummary]:
        """Returns up to `count` repositories in the order GitHub sorted them.

        Raises:
            InvalidInputError: If `count` is below 1 (no request is made).
            ServerError: If GitHub answers 2xx with a body that is not a
                list of repository objects.
        """
        login = self._require_username(username)
        if count is None:
            count = self.default_repo_count
        if count < 1:
            raise InvalidInputError(f"422: repository count must be at least 1, got {count}", status_code=None)
        key = make_cache_key(REPOS_PREFIX, login, count)

        cached = self.cache_service.get(key)
        if cached is not None:
            return cached

        path = repos_path(login)
        data: Any = await self.api_retry_service.fetch_with_retry(path, params=repos_params(count))
        if not isinstance(data, list):
            raise _unexpected_payload(path, f"expected a list, got {type(data).__name__}")
        try:
            repos = [RepoSummary.from_api(item) for item in data][:count]
        except (KeyError, TypeError, AttributeError) as e:
            raise _unexpected_payload(path, f"missing or malformed field {e}") from e
        self.cache_service.set(key, repos)
        return repos

    async def lookup(self, username: str, repo_count: Optional[int] = None) -> ProfileLookup:
        """Profile plus top repositories, as shown on the profile card.

        Only a profile failure propagates. A repository failure leaves the
        card with an empty list and a warning.
        """
        profile = await self.get_profile(username)
        try:
            repos = await self.get_top_repos(username, repo_count)
        except GitHubApiError as e:
            logger.warning(f"Could not load repositories for '{username}': {e}")
            return ProfileLookup(profile=profile, repos=[], repo_error=friendly_error_message(e))
        return ProfileLookup(profile=profile, repos=repos)

    # --- Administrative hooks ---

    def clear_cache(self) -> None:
        self.cache_service.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache_service.stats()

    # --- Status indicator pass-throughs ---

    def current_rate_limit(self) -> Optional[RateLimitState]:
        if self.rate_limit_tracker is None:
            return None
        return self.rate_limit_tracker.current_state()

    def is_near_rate_limit(self) -> bool:
        return self.rate_limit_tracker is not None and self.rate_limit_tracker.is_near_limit()
