"""Main entry point for the ghlens application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Annotated, Any, Awaitable, Callable, Dict, Optional

import httpx
import typer

# --- Core Layer ---
from ghlens.core.command_handler import CommandHandler
from ghlens.core.services.profile_service import ProfileService

# --- Domain Layer ---
from ghlens.domain.interfaces.user_interface import UserInterface

# --- Infrastructure Layer ---
# Config
from ghlens.infrastructure.config.settings import (
    get_cache_settings, get_config, get_default_repo_count, get_github_settings,
    get_poll_interval, get_retry_policy, load_configuration,
)
# UI
from ghlens.infrastructure.cli.display import ConsoleDisplay
# Cache
from ghlens.infrastructure.cache.caching_service import CachingServiceImpl
# GitHub HTTP
from ghlens.infrastructure.github.http_client import create_http_client
# Resilience
from ghlens.infrastructure.resilience.api_retry import ApiRetryService
from ghlens.infrastructure.resilience.rate_limiter import RateLimitTracker
# Monitoring
from ghlens.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def configure_logging(verbose: bool = False) -> None:
    """Loads configuration and sets up logging from it."""
    load_configuration()
    level = "DEBUG" if verbose else get_config('logging.level')
    setup_logging(
        log_level=level,
        log_format=get_config('logging.format'),
        log_file=get_config('logging.file'),
    )

def create_http_client_from_config() -> httpx.AsyncClient:
    """Builds the shared GitHub client from the configured settings."""
    return create_http_client(**get_github_settings())

def create_dependencies(http_client: httpx.AsyncClient, ui: Optional[UserInterface] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one run of the application.

    This acts as the Composition Root. Cache and tracker are owned here,
    so everything in one run shares them and nothing leaks across runs.
    """
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ui or ConsoleDisplay()
    dependencies['cache_service'] = CachingServiceImpl(**get_cache_settings())
    dependencies['rate_limit_tracker'] = RateLimitTracker(client=http_client)

    policy = get_retry_policy()
    dependencies['api_retry_service'] = ApiRetryService(
        client=http_client,
        rate_limit_tracker=dependencies['rate_limit_tracker'],
        max_retries=policy['max_retries'],
        initial_backoff_s=policy['initial_delay'],
        backoff_factor=policy['factor'],
        max_backoff_s=policy['max_delay'],
    )
    dependencies['profile_service'] = ProfileService(
        api_retry_service=dependencies['api_retry_service'],
        cache_service=dependencies['cache_service'],
        rate_limit_tracker=dependencies['rate_limit_tracker'],
        default_repo_count=get_default_repo_count(),
    )
    dependencies['command_handler'] = CommandHandler(
        profile_service=dependencies['profile_service'],
        rate_limit_tracker=dependencies['rate_limit_tracker'],
        ui=dependencies['ui'],
        poll_interval_s=get_poll_interval(),
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies

# --- Helper for Running Async Commands ---
def run_command(action: Callable[[CommandHandler], Awaitable[Any]]) -> Any:
    """Opens the HTTP client, wires dependencies and runs one async action."""
    async def _runner() -> Any:
        async with create_http_client_from_config() as client:
            handler: CommandHandler = create_dependencies(client)['command_handler']
            return await action(handler)

    try:
        return asyncio.run(_runner())
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        return None

def _exit_on_failure(succeeded: Optional[bool]) -> None:
    if succeeded is False:
        raise typer.Exit(code=1)

# --- Typer App Definition ---
app = typer.Typer(
    name="ghlens",
    help="GitHub profile lookups with caching, retries and rate-limit awareness.",
    add_completion=False,
)

@app.command()
def profile(
    username: Annotated[str, typer.Argument(help="GitHub username to look up.")],
    repos: Annotated[Optional[int], typer.Option("--repos", "-r", min=1, help="Number of top repositories to show.")] = None,
):
    """Show the profile card for a GitHub user."""
    _exit_on_failure(run_command(lambda handler: handler.handle_profile(username, repos)))

@app.command(name="repos")
def repos_command(
    username: Annotated[str, typer.Argument(help="GitHub username to look up.")],
    count: Annotated[Optional[int], typer.Option("--count", "-n", min=1, help="Number of repositories.")] = None,
):
    """List a user's top repositories."""
    _exit_on_failure(run_command(lambda handler: handler.handle_repos(username, count)))

@app.command(name="rate-limit")
def rate_limit_command(
    watch: Annotated[bool, typer.Option("--watch", "-w", help="Keep polling the quota.")] = False,
    interval: Annotated[Optional[float], typer.Option("--interval", min=1, help="Seconds between polls.")] = None,
    iterations: Annotated[Optional[int], typer.Option("--iterations", min=1, help="Stop after N polls.")] = None,
):
    """Show the GitHub API rate-limit status."""
    _exit_on_failure(run_command(lambda handler: handler.handle_rate_limit(watch, interval, iterations)))

@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Main entry point. Starts an interactive session if no command is given.

    The session keeps one cache for its lifetime; :stats and :clear inspect
    and reset it.
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        logger.info("No command invoked, starting interactive lookup session.")
        run_command(lambda handler: handler.run_session())

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
