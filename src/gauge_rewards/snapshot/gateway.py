from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

import httpx

from gauge_rewards.config import CountingConfig
from gauge_rewards.snapshot.delegations import DelegationLedger
from gauge_rewards.snapshot.graphql import SnapshotHttpClient
from gauge_rewards.snapshot.hub import VoteLedger
from gauge_rewards.snapshot.scores import ScoreService


@dataclass(slots=True)
class SnapshotGateway:
    """The three read-only collaborators of a counting run over one HTTP client."""

    http: SnapshotHttpClient
    votes: VoteLedger
    delegations: DelegationLedger
    scores: ScoreService

    @classmethod
    def from_config(
        cls,
        config: CountingConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> SnapshotGateway:
        http = SnapshotHttpClient(
            timeout_seconds=config.request_timeout_seconds,
            max_tries=config.max_tries,
            backoff_factor=config.backoff_factor,
            transport=transport,
        )
        return cls(
            http=http,
            votes=VoteLedger(http, config.hub_graphql_url, page_size=config.page_size),
            delegations=DelegationLedger(
                http,
                config.delegation_subgraph_url,
                config.space,
                page_size=config.page_size,
            ),
            scores=ScoreService(
                http,
                config.score_api_url,
                space=config.space,
                network=config.network,
                strategies=config.strategies,
            ),
        )

    async def __aenter__(self) -> SnapshotGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.http.aclose()


def open_gateway(config: CountingConfig) -> SnapshotGateway:
    return SnapshotGateway.from_config(config)
