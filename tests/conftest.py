import httpx
import pytest
from typer.testing import CliRunner

from ghlens.infrastructure.cli.display import ConsoleDisplay
from ghlens.infrastructure.config.settings import clear_test_config, set_config_for_testing

BASE_URL = "https://api.github.test"
RESET_EPOCH = 1_900_000_000  # 2030-03-17, always in the future for these tests


class ScriptedTransport:
    """Replays responses (or raises exceptions) in order and records requests.

    The last outcome repeats once the script runs out.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.requests)


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def scripted_client():
    """Factory returning (AsyncClient, ScriptedTransport) for a list of outcomes."""
    def _make(*outcomes):
        transport = ScriptedTransport(*outcomes)
        client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(transport))
        return client, transport
    return _make


@pytest.fixture
def routed_client():
    """Factory returning an AsyncClient whose responses come from a handler function."""
    def _make(handler):
        return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def reset_epoch():
    return RESET_EPOCH


@pytest.fixture
def octocat_json():
    return {
        "login": "octocat",
        "name": "The Octocat",
        "bio": "GitHub mascot",
        "public_repos": 8,
        "followers": 9000,
        "following": 9,
        "created_at": "2011-01-25T18:44:36Z",
        "avatar_url": "https://avatars.githubusercontent.com/u/583231?v=4",
        "html_url": "https://github.com/octocat",
    }


@pytest.fixture
def octocat_repos_json():
    # Deliberately not in star order: the client must keep the server's order
    return [
        {
            "name": "Spoon-Knife",
            "description": "This repo is for demonstration purposes only.",
            "stargazers_count": 12000,
            "forks_count": 140000,
            "watchers_count": 12000,
            "language": "HTML",
            "updated_at": "2024-05-01T10:00:00Z",
            "html_url": "https://github.com/octocat/Spoon-Knife",
        },
        {
            "name": "Hello-World",
            "description": "My first repository on GitHub!",
            "stargazers_count": 2500,
            "forks_count": 2300,
            "watchers_count": 2500,
            "language": None,
            "updated_at": "2024-04-01T10:00:00Z",
            "html_url": "https://github.com/octocat/Hello-World",
        },
        {
            "name": "linguist",
            "description": None,
            "stargazers_count": 99000,
            "forks_count": 4000,
            "watchers_count": 99000,
            "language": "Ruby",
            "updated_at": None,
            "html_url": "https://github.com/octocat/linguist",
        },
    ]


@pytest.fixture(autouse=True)
def reset_test_config():
    yield
    clear_test_config()


# --- CLI integration fixtures ---

class FakeGitHubApi:
    """Serves /users/<login>, /users/<login>/repos and /rate_limit from memory."""

    def __init__(self, profile, repos, reset_epoch):
        self.profile = profile
        self.repos = repos
        self.reset_epoch = reset_epoch
        self.missing = set()
        self.offline = False
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("network unreachable", request=request)
        path = request.url.path
        if path == "/rate_limit":
            core = {"remaining": 57, "limit": 60, "reset": self.reset_epoch}
            return httpx.Response(200, json={"resources": {"core": core}, "rate": core})
        parts = path.strip("/").split("/")
        login = parts[1]
        if login in self.missing:
            return httpx.Response(404, json={"message": "Not Found"})
        if len(parts) == 3 and parts[2] == "repos":
            per_page = int(request.url.params.get("per_page", 30))
            return httpx.Response(200, json=self.repos[:per_page])
        return httpx.Response(200, json=dict(self.profile, login=login))

    def paths(self):
        return [r.url.path for r in self.requests]


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def github_api(mocker, octocat_json, octocat_repos_json):
    """Routes every client the CLI opens to a FakeGitHubApi, with retries disabled."""
    api = FakeGitHubApi(octocat_json, octocat_repos_json, RESET_EPOCH)
    mocker.patch(
        'ghlens.main.create_http_client_from_config',
        side_effect=lambda: httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(api)),
    )
    # Root logger handlers belong to pytest during tests
    mocker.patch('ghlens.main.setup_logging')
    set_config_for_testing({"retry.max_retries": 0})
    return api


@pytest.fixture
def mock_console_display(mocker):
    """Mocks the ConsoleDisplay to capture output easily.
    Patches the ConsoleDisplay where main.py builds it.
    """
    mock = mocker.MagicMock(spec=ConsoleDisplay)
    mocker.patch('ghlens.main.ConsoleDisplay', return_value=mock)
    return mock
