from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from gauge_rewards.errors import TransientNetworkError
from gauge_rewards.snapshot.graphql import SnapshotHttpClient


class ScoreService:
    """Historical voting power from the Snapshot score API.

    The API answers one address -> power mapping per strategy, with keys in
    whatever case the strategy produced. Keys are lower-cased and summed
    across strategies; addresses the API omits resolve to zero.
    """

    def __init__(
        self,
        http: SnapshotHttpClient,
        score_api_url: str,
        *,
        space: str,
        network: str,
        strategies: Sequence[dict[str, Any]],
    ) -> None:
        self._http = http
        self._url = score_api_url
        self._space = space
        self._network = network
        self._strategies = list(strategies)

    async def voting_power(self, addresses: Sequence[str], block: int) -> dict[str, float]:
        if not addresses:
            return {}

        body = await self._http.post_json(
            self._url,
            {
                "params": {
                    "space": self._space,
                    "network": self._network,
                    "snapshot": block,
                    "strategies": self._strategies,
                    "addresses": list(addresses),
                }
            },
        )
        result = body.get("result")
        scores = result.get("scores") if isinstance(result, dict) else None
        if not isinstance(scores, list):
            raise TransientNetworkError("score api returned no scores", retryable=False)

        totals: dict[str, float] = {}
        for strategy_scores in scores:
            for address, value in (strategy_scores or {}).items():
                key = str(address).lower()
                totals[key] = totals.get(key, 0.0) + float(value or 0.0)

        return {address.lower(): totals.get(address.lower(), 0.0) for address in addresses}
