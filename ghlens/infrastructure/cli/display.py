import logging
from datetime import datetime
from typing import Any, List, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console, Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from ghlens.domain.interfaces.user_interface import UserInterface
from ghlens.domain.models.common import CacheStats
from ghlens.domain.models.github import ProfileLookup, RateLimitState, RepoSummary

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    "critical": ("red", "!"),
    "low": ("yellow", "~"),
    "ok": ("green", "✓"),
}

# Reset countdown is only worth showing once the quota runs low
SHOW_RESET_BELOW = 20


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self.console = console or Console()

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The user-facing error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def _repos_table(self, repos: List[RepoSummary]) -> Table:
        table = Table(box=SIMPLE, padding=(0, 1), show_edge=False)
        table.add_column("Repository", style="bold")
        table.add_column("Language", style="magenta")
        table.add_column("★", justify="right")
        table.add_column("Forks", justify="right")
        table.add_column("Watchers", justify="right")
        for repo in repos:
            name = repo.name
            if repo.description:
                name = f"{repo.name}\n[dim]{repo.description}[/dim]"
            table.add_row(
                name,
                repo.language or "-",
                str(repo.stars),
                str(repo.forks),
                str(repo.watchers),
            )
        return table

    def display_profile(self, lookup: ProfileLookup) -> None:
        """Renders the profile card: identity, counts, join date and top repos."""
        profile = lookup.profile
        header = Text()
        header.append(profile.display_name, style="bold white")
        if profile.name:
            header.append(f"  @{profile.login}", style="dim")

        lines: List[Any] = [header]
        if profile.bio:
            lines.append(Text(profile.bio, style="italic"))
        lines.append(Text(
            f"{profile.public_repos} repos · {profile.followers} followers · {profile.following} following"
        ))
        if profile.created_at:
            lines.append(Text(f"Joined {profile.created_at.strftime('%B %Y')}", style="dim"))
        if profile.avatar_url:
            lines.append(Text(f"Avatar: {profile.avatar_url}", style="dim"))

        if lookup.repos:
            lines.append(Text("Top repositories", style="bold cyan"))
            lines.append(self._repos_table(lookup.repos))
        elif lookup.repo_error:
            lines.append(Text(f"Repositories unavailable: {lookup.repo_error}", style="yellow"))
        else:
            lines.append(Text("No public repositories", style="dim"))

        panel = Panel(
            Group(*lines),
            title=f"[bold]GitHub[/bold] · {profile.login}",
            subtitle=profile.html_url or None,
            border_style="cyan",
            box=ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_repos(self, username: str, repos: List[RepoSummary]) -> None:
        if not repos:
            self.display_info(f"{username} has no public repositories.")
            return
        table = self._repos_table(repos)
        table.title = f"Top repositories for {username}"
        self.console.print(table)

    def display_rate_limit(self, state: RateLimitState, near_limit: bool, now: Optional[datetime] = None) -> None:
        """Renders the status indicator: remaining/limit, usage bar and reset countdown."""
        color, icon = STATUS_STYLES[state.status_level]
        lines: List[Any] = [
            Text(f"{icon} {state.remaining} / {state.limit} requests remaining", style=f"bold {color}"),
            ProgressBar(
                total=max(state.limit, 1),
                completed=max(state.remaining, 0),
                complete_style=color,
                width=40,
            ),
        ]
        minutes = state.minutes_until_reset(now)
        if state.remaining < SHOW_RESET_BELOW and minutes is not None:
            lines.append(Text(f"Resets in {minutes} min", style="dim"))
        if near_limit:
            lines.append(Text("Close to the GitHub API limit; lookups may fail until the reset.", style="yellow"))

        panel = Panel(
            Group(*lines),
            title="[bold]GitHub API Status[/bold]",
            border_style=color,
            box=ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_cache_stats(self, stats: CacheStats) -> None:
        table = Table(title="Cache", box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Total", justify="right")
        table.add_column("Valid", justify="right", style="green")
        table.add_column("Expired", justify="right", style="yellow")
        table.add_row(str(stats["total"]), str(stats["valid"]), str(stats["expired"]))
        self.console.print(table)

    def display_session_header(self) -> None:
        table = Table(show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Content", style="cyan")
        table.add_row("[bold cyan]ghlens interactive lookup[/bold cyan]")
        table.add_row("Type a GitHub username to see its profile card")
        table.add_row("Commands: :rate  :stats  :clear  :quit")
        self.console.print(table)

    def get_prompt(self, prompt_message: str = "> ") -> str:
        """Gets input from the user.

        Args:
            prompt_message: The message to display before the input cursor.

        Returns:
            The text input by the user.
        """
        return self.console.input(f"[bold green]{prompt_message}[/bold green]")
