import httpx
import pytest

from ghlens.infrastructure.github.http_client import (
    build_headers, create_http_client, profile_path, repos_params, repos_path,
)


def test_build_headers_without_token():
    headers = build_headers("B4OS-Dashboard/1.0", "2022-11-28")
    assert headers == {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": "B4OS-Dashboard/1.0",
        "X-GitHub-Api-Version": "2022-11-28",
    }


def test_build_headers_with_token_adds_bearer_auth():
    headers = build_headers("agent", "2022-11-28", token="ghp_secret")
    assert headers["Authorization"] == "Bearer ghp_secret"


def test_username_is_escaped_in_paths():
    assert profile_path("octocat") == "/users/octocat"
    assert repos_path("a/b c") == "/users/a%2Fb%20c/repos"


def test_repos_params_ask_github_for_star_order():
    assert repos_params(5) == {"sort": "stars", "per_page": 5}


@pytest.mark.asyncio
async def test_client_sends_fixed_headers_on_every_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    client = create_http_client(
        base_url="https://api.github.test",
        user_agent="B4OS-Dashboard/1.0",
        api_version="2022-11-28",
        transport=httpx.MockTransport(handler),
    )
    async with client:
        await client.get(profile_path("octocat"))
        await client.get("/rate_limit")

    assert len(seen) == 2
    for request in seen:
        assert request.headers["User-Agent"] == "B4OS-Dashboard/1.0"
        assert request.headers["Accept"] == "application/vnd.github.v3+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert "Authorization" not in request.headers
    assert str(seen[0].url) == "https://api.github.test/users/octocat"
