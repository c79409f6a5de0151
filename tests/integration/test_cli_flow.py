import httpx
import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from ghlens.main import app

# These fixtures are defined in tests/conftest.py:
# runner: CliRunner
# mock_console_display: MagicMock (patches ConsoleDisplay)
# github_api: FakeGitHubApi (patches the HTTP client factory)

def test_profile_command_flow(runner: CliRunner, github_api, mock_console_display: MagicMock):
    """Profile card for an existing user: one profile and one repos request."""
    result = runner.invoke(app, ["profile", "octocat", "--repos", "2"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert github_api.paths() == ["/users/octocat", "/users/octocat/repos"]
    assert github_api.requests[1].url.params["per_page"] == "2"

    mock_console_display.display_profile.assert_called_once()
    lookup = mock_console_display.display_profile.call_args.args[0]
    assert lookup.profile.login == "octocat"
    assert [r.name for r in lookup.repos] == ["Spoon-Knife", "Hello-World"]
    mock_console_display.display_error.assert_not_called()

def test_profile_command_renders_card(runner: CliRunner, github_api):
    """Same flow with the real rich display."""
    result = runner.invoke(app, ["profile", "octocat"])

    assert result.exit_code == 0
    assert "The Octocat" in result.stdout
    assert "Spoon-Knife" in result.stdout

def test_profile_not_found_exits_with_error(runner: CliRunner, github_api, mock_console_display: MagicMock):
    github_api.missing.add("ghost")

    result = runner.invoke(app, ["profile", "ghost"])

    assert result.exit_code == 1
    assert github_api.paths() == ["/users/ghost"]
    mock_console_display.display_error.assert_called_once_with("User not found on GitHub")
    mock_console_display.display_profile.assert_not_called()

def test_repos_command_flow(runner: CliRunner, github_api, mock_console_display: MagicMock):
    result = runner.invoke(app, ["repos", "octocat", "-n", "3"])

    assert result.exit_code == 0
    args = mock_console_display.display_repos.call_args.args
    assert args[0] == "octocat"
    assert [r.name for r in args[1]] == ["Spoon-Knife", "Hello-World", "linguist"]

def test_rate_limit_command_flow(runner: CliRunner, github_api, mock_console_display: MagicMock):
    result = runner.invoke(app, ["rate-limit"])

    assert result.exit_code == 0
    assert github_api.paths() == ["/rate_limit"]
    state, near_limit = mock_console_display.display_rate_limit.call_args.args
    assert (state.remaining, state.limit) == (57, 60)
    assert near_limit is False

def test_rate_limit_failure_exits_with_error(runner: CliRunner, github_api, mock_console_display: MagicMock):
    github_api.offline = True

    result = runner.invoke(app, ["rate-limit"])

    assert result.exit_code == 1
    mock_console_display.display_error.assert_called_once_with("Connection error. Check your internet connection")

def test_session_reuses_cache_across_lookups(runner: CliRunner, github_api, mock_console_display: MagicMock):
    """Looking up the same user twice in one session fetches it once."""
    mock_console_display.get_prompt.side_effect = ["octocat", "OctoCat", ":stats", ":quit"]

    result = runner.invoke(app, [])

    assert result.exit_code == 0
    assert github_api.paths() == ["/users/octocat", "/users/octocat/repos"]
    assert mock_console_display.display_profile.call_count == 2
    mock_console_display.display_cache_stats.assert_called_once_with({"total": 2, "valid": 2, "expired": 0})

def test_session_clear_forces_a_refetch(runner: CliRunner, github_api, mock_console_display: MagicMock):
    """:clear empties the session cache, so the next lookup goes back to GitHub."""
    mock_console_display.get_prompt.side_effect = ["octocat", ":clear", ":stats", "octocat", ":quit"]

    result = runner.invoke(app, [])

    assert result.exit_code == 0
    mock_console_display.display_info.assert_any_call("Cache cleared.")
    mock_console_display.display_cache_stats.assert_called_once_with({"total": 0, "valid": 0, "expired": 0})
    assert github_api.paths() == ["/users/octocat", "/users/octocat/repos"] * 2

def test_cache_subcommands_are_not_offered(runner: CliRunner, github_api):
    for command in ("cache-stats", "clear-cache"):
        result = runner.invoke(app, [command])
        assert result.exit_code != 0
    assert github_api.requests == []
