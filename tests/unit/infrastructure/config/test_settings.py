from pathlib import Path

import pytest

from ghlens.infrastructure.config import settings
from ghlens.infrastructure.config.settings import (
    DEFAULTS, get_cache_settings, get_config, get_github_settings, get_retry_policy,
    load_configuration, set_config_for_testing,
)

@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch):
    """Reloads configuration from a temp YAML file with no .env and a clean environment."""
    for key in DEFAULTS:
        for name in settings._env_names(key):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GHLENS_GITHUB_TOKEN", raising=False)

    config_file = tmp_path / "config.yaml"
    empty_env = tmp_path / "empty.env"
    empty_env.write_text("")

    def _load(yaml_text: str = ""):
        config_file.write_text(yaml_text)
        load_configuration(config_file=config_file, env_file=empty_env, force=True)
    yield _load
    load_configuration(config_file=tmp_path / "missing.yaml", env_file=empty_env, force=True)

def test_defaults_apply_without_any_configuration(isolated_config):
    isolated_config()
    assert get_config("cache.ttl_seconds") == 300
    assert get_config("github.user_agent") == "B4OS-Dashboard/1.0"
    assert get_config("github.token") is None

def test_explicit_default_wins_for_unknown_keys(isolated_config):
    isolated_config()
    assert get_config("nope.missing", "fallback") == "fallback"

def test_nested_yaml_is_flattened(isolated_config):
    isolated_config("cache:\n  ttl_seconds: 60\nretry:\n  max_retries: 5\n")
    assert get_config("cache.ttl_seconds") == 60
    assert get_retry_policy()["max_retries"] == 5

def test_environment_overrides_yaml(isolated_config, monkeypatch):
    isolated_config("cache:\n  ttl_seconds: 60\n")
    monkeypatch.setenv("GHLENS_CACHE_TTL_SECONDS", "90")
    assert get_config("cache.ttl_seconds") == 90

def test_unprefixed_environment_variable(isolated_config, monkeypatch):
    isolated_config()
    monkeypatch.setenv("RETRY_BACKOFF_FACTOR", "1.5")
    assert get_config("retry.backoff_factor") == 1.5

def test_test_overrides_take_priority(isolated_config, monkeypatch):
    isolated_config()
    monkeypatch.setenv("GHLENS_REPOS_DEFAULT_COUNT", "7")
    set_config_for_testing({"repos.default_count": 2})
    assert get_config("repos.default_count") == 2

def test_invalid_yaml_is_ignored(isolated_config):
    isolated_config("cache: [unclosed\n")
    assert get_config("cache.ttl_seconds") == 300

def test_github_settings_include_token(isolated_config, monkeypatch):
    isolated_config()
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")
    github = get_github_settings()
    assert github["token"] == "ghp_example"
    assert github["base_url"] == "https://api.github.com"
    assert github["timeout"] == 10.0

def test_retry_and_cache_settings_defaults(isolated_config):
    isolated_config()
    assert get_retry_policy() == {"max_retries": 3, "initial_delay": 1.0, "factor": 2.0, "max_delay": 10.0}
    assert get_cache_settings() == {"ttl": 300.0, "max_entries": 100}
