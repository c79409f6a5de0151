"""Domain records for data read from the GitHub API.

Includes the `ProfileRecord` and `RepoSummary` read models, the shared
`RateLimitState`, and the `ProfileLookup` payload rendered by the
profile card.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

AVATAR_URL_TEMPLATE = "https://github.com/{username}.png"

# Optimistic defaults until the first header observation or poll
DEFAULT_RATE_LIMIT = 60

# Status indicator thresholds
CRITICAL_REMAINING = 5
LOW_REMAINING = 20


def parse_github_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parses GitHub's ISO-8601 timestamps ('2011-01-25T18:44:36Z')."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def avatar_url_for(username: str) -> str:
    """Public avatar image for a login; needs no API call."""
    return AVATAR_URL_TEMPLATE.format(username=username)


@dataclass(frozen=True)
class ProfileRecord:
    """Read-only GitHub user profile. Identity is `login`."""
    login: str
    name: Optional[str] = None
    bio: Optional[str] = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    created_at: Optional[datetime] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProfileRecord":
        login = data["login"]
        return cls(
            login=login,
            name=data.get("name"),
            bio=data.get("bio"),
            public_repos=data.get("public_repos") or 0,
            followers=data.get("followers") or 0,
            following=data.get("following") or 0,
            created_at=parse_github_timestamp(data.get("created_at")),
            avatar_url=data.get("avatar_url") or avatar_url_for(login),
            html_url=data.get("html_url"),
        )

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass(frozen=True)
class RepoSummary:
    """Read-only repository metadata. Identity is `name` within one profile."""
    name: str
    description: Optional[str] = None
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    language: Optional[str] = None
    updated_at: Optional[datetime] = None
    html_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RepoSummary":
        return cls(
            name=data["name"],
            description=data.get("description"),
            stars=data.get("stargazers_count") or 0,
            forks=data.get("forks_count") or 0,
            watchers=data.get("watchers_count") or 0,
            language=data.get("language"),
            updated_at=parse_github_timestamp(data.get("updated_at")),
            html_url=data.get("html_url"),
        )


@dataclass
class RateLimitState:
    """Remaining/limit/reset snapshot of the core API quota."""
    remaining: int = DEFAULT_RATE_LIMIT
    limit: int = DEFAULT_RATE_LIMIT
    reset_at: Optional[datetime] = None

    def seconds_until_reset(self, now: Optional[datetime] = None) -> Optional[float]:
        if self.reset_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return (self.reset_at - now).total_seconds()

    def minutes_until_reset(self, now: Optional[datetime] = None) -> Optional[int]:
        seconds = self.seconds_until_reset(now)
        if seconds is None:
            return None
        return max(0, math.ceil(seconds / 60))

    @property
    def usage_fraction(self) -> float:
        """Share of the quota still available, 0.0 - 1.0."""
        if self.limit <= 0:
            return 0.0
        return max(0.0, min(1.0, self.remaining / self.limit))

    @property
    def status_level(self) -> str:
        if self.remaining < CRITICAL_REMAINING:
            return "critical"
        if self.remaining < LOW_REMAINING:
            return "low"
        return "ok"


@dataclass
class ProfileLookup:
    """Everything the profile card shows for one username."""
    profile: ProfileRecord
    repos: List[RepoSummary] = field(default_factory=list)
    repo_error: Optional[str] = None  # Friendly warning when repos could not load
