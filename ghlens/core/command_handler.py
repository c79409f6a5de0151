"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the ProfileService and the RateLimitTracker, rendering results
through the UserInterface. Failures are always shown as friendly
messages.
"""

import logging
from typing import Optional

# Core Services Imports
from ghlens.core.error_messages import friendly_error_message
from ghlens.core.services.profile_service import ProfileService

# Domain Layer Imports
from ghlens.domain.interfaces.user_interface import UserInterface
from ghlens.domain.models.errors import GitHubApiError
from ghlens.domain.models.github import RateLimitState

# Infrastructure Layer Imports (implementation injected)
from ghlens.infrastructure.resilience.rate_limiter import DEFAULT_POLL_INTERVAL_SECONDS, RateLimitTracker

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {":quit", ":q", "exit", "quit"}
SESSION_PROMPT = "github user> "

class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        profile_service: ProfileService,
        rate_limit_tracker: RateLimitTracker,
        ui: UserInterface,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ):
        """Initializes the CommandHandler with required services."""
        self.profile_service = profile_service
        self.rate_limit_tracker = rate_limit_tracker
        self.ui = ui
        self.poll_interval_s = poll_interval_s

    def _report_failure(self, action: str, error: Exception) -> None:
        if isinstance(error, GitHubApiError):
            logger.error(f"{action} failed: {error}")
        else:
            logger.error(f"{action} failed unexpectedly: {error}", exc_info=True)
        self.ui.display_error(friendly_error_message(error))

    def _warn_if_near_limit(self) -> None:
        if self.rate_limit_tracker.is_near_limit():
            state = self.rate_limit_tracker.current_state()
            self.ui.display_warning(
                f"Only {state.remaining} of {state.limit} GitHub API requests left."
            )

    async def handle_profile(self, username: str, repo_count: Optional[int] = None) -> bool:
        """Handles the 'profile' command (the profile card)."""
        logger.info(f"Handling 'profile' command for: {username}")
        try:
            lookup = await self.profile_service.lookup(username, repo_count)
        except Exception as e:
            self._report_failure(f"Profile lookup for '{username}'", e)
            return False
        self.ui.display_profile(lookup)
        self._warn_if_near_limit()
        return True

    async def handle_repos(self, username: str, count: Optional[int] = None) -> bool:
        """Handles the 'repos' command."""
        logger.info(f"Handling 'repos' command for: {username} (count={count or 'default'})")
        try:
            repos = await self.profile_service.get_top_repos(username, count)
        except Exception as e:
            self._report_failure(f"Repository lookup for '{username}'", e)
            return False
        self.ui.display_repos(username, repos)
        self._warn_if_near_limit()
        return True

    def _show_rate_limit(self, state: RateLimitState) -> None:
        self.ui.display_rate_limit(state, self.rate_limit_tracker.is_near_limit())

    async def handle_rate_limit(
        self,
        watch: bool = False,
        interval_s: Optional[float] = None,
        iterations: Optional[int] = None,
    ) -> bool:
        """Handles the 'rate-limit' command (the status indicator).

        With watch=True the quota is polled every interval_s seconds until
        interrupted or `iterations` polls have run.
        """
        if watch:
            interval = interval_s or self.poll_interval_s
            logger.info(f"Watching rate limit every {interval}s")
            await self.rate_limit_tracker.poll(interval, on_update=self._show_rate_limit, iterations=iterations)
            return True

        try:
            state = await self.rate_limit_tracker.refresh()
        except Exception as e:
            self._report_failure("Rate limit check", e)
            return False
        self._show_rate_limit(state)
        return True

    def handle_cache_stats(self) -> None:
        """Handles the session's :stats command."""
        self.ui.display_cache_stats(self.profile_service.cache_stats())

    def handle_clear_cache(self) -> None:
        """Handles the session's :clear command."""
        self.profile_service.clear_cache()
        self.ui.display_info("Cache cleared.")

    async def run_session(self) -> None:
        """Interactive lookups sharing one cache and one rate-limit tracker."""
        logger.info("Starting interactive lookup session.")
        self.ui.display_session_header()
        while True:
            try:
                line = self.ui.get_prompt(SESSION_PROMPT).strip()
            except (EOFError, KeyboardInterrupt):
                break

            if not line:
                continue
            command = line.lower()
            if command in QUIT_COMMANDS:
                break
            if command == ":stats":
                self.handle_cache_stats()
            elif command == ":clear":
                self.handle_clear_cache()
            elif command == ":rate":
                await self.handle_rate_limit()
            elif command.startswith(":"):
                self.ui.display_error(f"Unknown command: {line}")
            else:
                await self.handle_profile(line)
        logger.info("Interactive lookup session ended.")
