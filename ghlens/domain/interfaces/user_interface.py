"""Interface for interacting with the user (input/output).

Defines the contract for displaying profiles, rate-limit status, errors,
warnings, and getting input from the user, allowing different UI
implementations (e.g., console, web).
"""

import abc
from typing import Any, List

# Import relevant domain models
from ghlens.domain.models.common import CacheStats
from ghlens.domain.models.github import ProfileLookup, RateLimitState, RepoSummary

class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The user-facing error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_profile(self, lookup: ProfileLookup) -> None:
        """Renders the profile card (profile, top repos, repo warning)."""
        pass

    @abc.abstractmethod
    def display_repos(self, username: str, repos: List[RepoSummary]) -> None:
        """Renders a list of repositories."""
        pass

    @abc.abstractmethod
    def display_rate_limit(self, state: RateLimitState, near_limit: bool) -> None:
        """Renders the API quota status indicator.

        Args:
            state: The current rate-limit snapshot.
            near_limit: Whether the quota is close to exhaustion.
        """
        pass

    @abc.abstractmethod
    def display_cache_stats(self, stats: CacheStats) -> None:
        """Renders cache entry counts."""
        pass

    @abc.abstractmethod
    def display_session_header(self) -> None:
        """Shows the banner for an interactive lookup session."""
        pass

    @abc.abstractmethod
    def get_prompt(self, prompt_message: str = "> ") -> str:
        """Gets input from the user synchronously.

        Args:
            prompt_message: The message to display before the input cursor.

        Returns:
            The text input by the user.
        """
        pass
