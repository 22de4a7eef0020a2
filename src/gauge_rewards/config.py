from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gauge_rewards.errors import ConfigurationError

DEFAULT_VOTING_STRATEGIES: list[dict[str, Any]] = [
    {
        "name": "reliquary",
        "params": {
            "poolId": 0,
            "symbol": "maBEETS",
            "decimals": 18,
            "strategy": "multiplier",
            "maxVotingLevel": 10,
            "minVotingLevel": 0,
            "reliquaryAddress": "0x973670ce19594f857a7cd85ee834c7a74a941684",
            "useLevelOnUpdate": False,
        },
    }
]


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"

    snapshot_id: str = ""
    snapshot_space: str = "beets-gauges.eth"
    snapshot_hub_url: str = "https://hub.snapshot.org"
    score_api_url: str = "https://score.snapshot.org"
    snapshot_network: str = "146"
    voting_strategies: list[dict[str, Any]] = Field(
        default_factory=lambda: [dict(strategy) for strategy in DEFAULT_VOTING_STRATEGIES]
    )

    delegation_subgraph_url: str = (
        "https://gateway.thegraph.com/api/{api_key}/subgraphs/id/"
        "3VUpuJv8J7kdvEMd6ymD1XszpGNQiTjK5oGAnmS3C2Bb"
    )
    graph_api_key: str = ""
    delegation_strategy_index: int = 1

    tally_precision: int = 14
    page_size: int = 1000
    request_timeout_seconds: float = 30.0
    max_retries: int = 4
    retry_backoff_factor: float = 1.0
    max_concurrency: int = 4

    vote_weights_csv_path: str = "data/vote-weights.csv"
    reward_token_decimals: int = 18
    budget_share_decimals: int | None = 4
    epochs_per_round: int = 2


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


@dataclass(slots=True, frozen=True)
class CountingConfig:
    """Everything the counting engine needs, resolved once per run."""

    space: str
    hub_graphql_url: str
    delegation_subgraph_url: str
    score_api_url: str
    network: str
    strategies: tuple[dict[str, Any], ...]
    delegation_strategy_index: int = 1
    precision: int = 14
    page_size: int = 1000
    request_timeout_seconds: float = 30.0
    max_tries: int = 5
    backoff_factor: float = 1.0
    max_concurrency: int = 4

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        space: str | None = None,
        require_delegations: bool = True,
    ) -> CountingConfig:
        resolved_space = (space if space is not None else settings.snapshot_space).strip()
        if not resolved_space:
            raise ConfigurationError("snapshot_space is required")

        subgraph_url = settings.delegation_subgraph_url.strip()
        if "{api_key}" in subgraph_url:
            api_key = settings.graph_api_key.strip()
            if api_key:
                subgraph_url = subgraph_url.format(api_key=api_key)
            elif require_delegations:
                raise ConfigurationError(
                    "graph_api_key is required by the configured delegation subgraph url"
                )
            else:
                subgraph_url = ""
        if require_delegations and not subgraph_url:
            raise ConfigurationError("delegation_subgraph_url is required")

        if settings.delegation_strategy_index < 0:
            raise ConfigurationError("delegation_strategy_index must be non-negative")
        if settings.max_retries < 0:
            raise ConfigurationError("max_retries must be non-negative")
        if settings.page_size <= 0:
            raise ConfigurationError("page_size must be positive")
        if settings.max_concurrency <= 0:
            raise ConfigurationError("max_concurrency must be positive")

        return cls(
            space=resolved_space,
            hub_graphql_url=settings.snapshot_hub_url.rstrip("/") + "/graphql",
            delegation_subgraph_url=subgraph_url,
            score_api_url=settings.score_api_url.rstrip("/") + "/api/scores",
            network=settings.snapshot_network,
            strategies=tuple(settings.voting_strategies),
            delegation_strategy_index=settings.delegation_strategy_index,
            precision=settings.tally_precision,
            page_size=settings.page_size,
            request_timeout_seconds=settings.request_timeout_seconds,
            max_tries=settings.max_retries + 1,
            backoff_factor=settings.retry_backoff_factor,
            max_concurrency=settings.max_concurrency,
        )
