from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest
import structlog

from gauge_rewards.config import CountingConfig, get_settings
from gauge_rewards.snapshot import gateway as gateway_module
from gauge_rewards.snapshot.gateway import SnapshotGateway

ENV_KEYS = (
    "SNAPSHOT_ID",
    "SNAPSHOT_SPACE",
    "SNAPSHOT_HUB_URL",
    "SCORE_API_URL",
    "DELEGATION_SUBGRAPH_URL",
    "GRAPH_API_KEY",
    "VOTE_WEIGHTS_CSV_PATH",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    # settings read .env from the working directory
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    # configure_logging binds the current sys.stderr, which pytest closes after capture
    yield
    structlog.reset_defaults()


VOTER_A = "0x" + "a1" * 20
VOTER_B = "0x" + "b2" * 20
DELEGATE = "0x" + "de" * 20
DELEGATOR_1 = "0x" + "d1" * 20
DELEGATOR_2 = "0x" + "d2" * 20

PROPOSAL = {
    "id": "0xprop",
    "choices": ["PoolA", "PoolB"],
    "snapshot": "1000",
    "strategies": [{"name": "reliquary"}, {"name": "delegation"}],
    "scores": [60, 40],
    "scores_total": 100,
    "votes": 3,
    "end": 1700000000,
}

VOTES = [
    {
        "id": "vote-3",
        "created": 1699990300,
        "voter": VOTER_A,
        "choice": {"1": 1, "2": 1},
        "vp": 20,
        "vp_by_strategy": [20, 0],
    },
    {
        "id": "vote-2",
        "created": 1699990200,
        "voter": VOTER_B,
        "choice": {"1": 1},
        "vp": 50,
        "vp_by_strategy": [50, 0],
    },
    {
        "id": "vote-1",
        "created": 1699990100,
        "voter": DELEGATE,
        "choice": {"2": 1},
        "vp": 30,
        "vp_by_strategy": [10, 20],
    },
]

DELEGATIONS = [
    {"id": "0x01", "delegator": DELEGATOR_1, "delegate": DELEGATE, "space": "beets-gauges.eth"},
    {"id": "0x02", "delegator": DELEGATOR_2, "delegate": DELEGATE, "space": ""},
]

SCORES = {DELEGATOR_1: 12.0, DELEGATOR_2: 8.0}


@dataclass
class FakeSnapshot:
    """Hub, subgraph and score API served from in-memory fixtures."""

    proposal: dict[str, Any] | None = field(default_factory=lambda: dict(PROPOSAL))
    votes: list[dict[str, Any]] = field(default_factory=lambda: list(VOTES))
    delegations: list[dict[str, Any]] = field(default_factory=lambda: list(DELEGATIONS))
    scores: dict[str, float] = field(default_factory=lambda: dict(SCORES))

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if request.url.host == "hub.test" and request.url.path == "/graphql":
            if "proposal(id" in body["query"]:
                return httpx.Response(200, json={"data": {"proposal": self.proposal}})
            variables = body["variables"]
            page = [vote for vote in self.votes if vote["created"] <= variables["createdBefore"]]
            return httpx.Response(200, json={"data": {"votes": page[: variables["first"]]}})
        if request.url.host == "subgraph.test":
            variables = body["variables"]
            page = [edge for edge in self.delegations if edge["id"] > variables["lastId"]]
            return httpx.Response(200, json={"data": {"delegations": page[: variables["first"]]}})
        if request.url.host == "score.test" and request.url.path == "/api/scores":
            addresses = body["params"]["addresses"]
            scores = {address: self.scores.get(address.lower(), 0.0) for address in addresses}
            return httpx.Response(200, json={"result": {"scores": [scores]}})
        return httpx.Response(404)


@pytest.fixture
def fake_snapshot(monkeypatch: pytest.MonkeyPatch) -> FakeSnapshot:
    monkeypatch.setenv("SNAPSHOT_HUB_URL", "https://hub.test")
    monkeypatch.setenv("SCORE_API_URL", "https://score.test")
    monkeypatch.setenv("DELEGATION_SUBGRAPH_URL", "https://subgraph.test/api/{api_key}/subgraphs/id/x")
    monkeypatch.setenv("GRAPH_API_KEY", "test-key")
    monkeypatch.setenv("RETRY_BACKOFF_FACTOR", "0")
    fake = FakeSnapshot()

    def open_fake_gateway(config: CountingConfig) -> SnapshotGateway:
        return SnapshotGateway.from_config(config, transport=httpx.MockTransport(fake.handle))

    monkeypatch.setattr(gateway_module, "open_gateway", open_fake_gateway)
    return fake
