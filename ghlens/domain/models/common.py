"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like usernames, cache keys and
backoff settings, ensuring consistency and type safety.
"""

from typing import NewType, TypedDict, Optional

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
Username = NewType("Username", str)            # GitHub login as typed by the user

# === Caching Context ===
CacheKey = NewType("CacheKey", str)              # Unique key for a cache entry
CachePrefix = NewType("CachePrefix", str)      # Resource kind prefix (e.g., 'profile')

PROFILE_PREFIX = CachePrefix("profile")
REPOS_PREFIX = CachePrefix("repos")

def make_cache_key(prefix: CachePrefix, *parts: object) -> CacheKey:
    """Builds a composite key like 'profile:octocat' or 'repos:octocat:3'."""
    return CacheKey(":".join([prefix, *(str(p) for p in parts)]))

def normalize_username(username: Optional[str]) -> Username:
    """Strips surrounding whitespace and lower-cases a login.

    GitHub logins are case-insensitive, so 'Octocat' and 'octocat'
    share a cache entry.
    """
    return Username((username or "").strip().lower())

# --- Structured Data ---
class CacheStats(TypedDict):
    """Counts reported by the cache's stats hook."""
    total: int
    valid: int
    expired: int

class BackoffPolicy(TypedDict):
    """Value Object representing retry backoff configuration."""
    max_retries: int
    initial_delay: float
    factor: float
    max_delay: float
