"""Shared httpx client for the GitHub REST API.

Every request carries the fixed Accept, User-Agent and API-version
headers; an Authorization header is added only when a token is set.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

PROFILE_PATH = "/users/{username}"
REPOS_PATH = "/users/{username}/repos"
RATE_LIMIT_PATH = "/rate_limit"

REPO_SORT = "stars"

# Rate-limit response headers
REMAINING_HEADER = "X-RateLimit-Remaining"
LIMIT_HEADER = "X-RateLimit-Limit"
RESET_HEADER = "X-RateLimit-Reset"


def build_headers(
    user_agent: str,
    api_version: str,
    accept: str = "application/vnd.github.v3+json",
    token: Optional[str] = None,
) -> Dict[str, str]:
    headers = {
        "Accept": accept,
        "User-Agent": user_agent,
        "X-GitHub-Api-Version": api_version,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def create_http_client(
    base_url: str,
    user_agent: str,
    api_version: str,
    accept: str = "application/vnd.github.v3+json",
    token: Optional[str] = None,
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Creates the AsyncClient shared by the fetcher and the rate-limit tracker.

    Args:
        base_url: API root, e.g. https://api.github.com.
        user_agent: Identifying agent string GitHub requires.
        api_version: Value for the X-GitHub-Api-Version header.
        accept: Media type for the Accept header.
        token: Optional personal access token.
        timeout: Per-request timeout in seconds.
        transport: Optional transport override (used by tests).

    Returns:
        A configured httpx.AsyncClient; the caller owns closing it.
    """
    logger.debug(f"Creating GitHub HTTP client for {base_url} (authenticated={bool(token)})")
    kwargs: Dict[str, Any] = {}
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(
        base_url=base_url,
        headers=build_headers(user_agent, api_version, accept, token),
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        **kwargs,
    )


def profile_path(username: str) -> str:
    return PROFILE_PATH.format(username=quote(username, safe=""))


def repos_path(username: str) -> str:
    return REPOS_PATH.format(username=quote(username, safe=""))


def repos_params(count: int) -> Dict[str, Any]:
    return {"sort": REPO_SORT, "per_page": count}
