import pytest

from gauge_rewards.config import AppSettings, CountingConfig
from gauge_rewards.errors import ConfigurationError


def _settings(**overrides: object) -> AppSettings:
    return AppSettings(_env_file=None, **overrides)  # type: ignore[arg-type]


def test_defaults_target_the_gauge_space() -> None:
    settings = _settings()

    assert settings.snapshot_space == "beets-gauges.eth"
    assert settings.snapshot_network == "146"
    assert settings.delegation_strategy_index == 1
    assert settings.tally_precision == 14
    assert settings.voting_strategies[0]["name"] == "reliquary"


def test_environment_overrides_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SNAPSHOT_SPACE", "other.eth")
    monkeypatch.setenv("MAX_CONCURRENCY", "8")

    settings = _settings()

    assert settings.snapshot_space == "other.eth"
    assert settings.max_concurrency == 8


def test_counting_config_fills_in_gateway_key() -> None:
    config = CountingConfig.from_settings(_settings(graph_api_key="k3y"))

    assert "/api/k3y/subgraphs/" in config.delegation_subgraph_url
    assert config.hub_graphql_url == "https://hub.snapshot.org/graphql"
    assert config.score_api_url == "https://score.snapshot.org/api/scores"
    assert config.space == "beets-gauges.eth"


def test_counting_requires_gateway_key() -> None:
    with pytest.raises(ConfigurationError, match="graph_api_key"):
        CountingConfig.from_settings(_settings(graph_api_key=""))


def test_gateway_key_is_optional_without_delegations() -> None:
    config = CountingConfig.from_settings(_settings(graph_api_key=""), require_delegations=False)

    assert config.delegation_subgraph_url == ""


def test_space_override_wins() -> None:
    config = CountingConfig.from_settings(_settings(graph_api_key="k"), space="other.eth")

    assert config.space == "other.eth"


def test_blank_space_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        CountingConfig.from_settings(_settings(graph_api_key="k"), space="  ")


def test_invalid_limits_are_rejected() -> None:
    with pytest.raises(ConfigurationError):
        CountingConfig.from_settings(_settings(graph_api_key="k", page_size=0))
    with pytest.raises(ConfigurationError):
        CountingConfig.from_settings(_settings(graph_api_key="k", max_concurrency=0))


def test_config_is_immutable() -> None:
    config = CountingConfig.from_settings(_settings(graph_api_key="k"))

    with pytest.raises(AttributeError):
        config.space = "other.eth"  # type: ignore[misc]


def test_score_endpoint_tolerates_trailing_slash() -> None:
    config = CountingConfig.from_settings(
        _settings(graph_api_key="k", score_api_url="https://score.test")
    )

    assert config.score_api_url == "https://score.test/api/scores"


def test_retries_count_on_top_of_the_first_attempt() -> None:
    assert CountingConfig.from_settings(_settings(graph_api_key="k")).max_tries == 5
    assert CountingConfig.from_settings(_settings(graph_api_key="k", max_retries=0)).max_tries == 1


def test_negative_retries_are_rejected() -> None:
    with pytest.raises(ConfigurationError, match="max_retries"):
        CountingConfig.from_settings(_settings(graph_api_key="k", max_retries=-1))
