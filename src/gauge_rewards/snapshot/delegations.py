from __future__ import annotations

from gauge_rewards.domain.delegation import GLOBAL_SPACE, Delegation
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.snapshot.graphql import SnapshotHttpClient

DELEGATIONS_QUERY = """
query Delegations($first: Int!, $lastId: String!, $block: Int!, $spaces: [String!]) {
  delegations(
    first: $first
    block: { number: $block }
    where: { space_in: $spaces, id_gt: $lastId }
    orderBy: id
    orderDirection: asc
  ) {
    id
    delegator
    delegate
    space
  }
}
"""


class DelegationLedger:
    """Delegation edges for one space (plus global ones) as of a historical block."""

    def __init__(
        self,
        http: SnapshotHttpClient,
        subgraph_url: str,
        space: str,
        *,
        page_size: int = 1000,
    ) -> None:
        self._http = http
        self._url = subgraph_url
        self._space = space
        self._page_size = page_size
        self._logger = get_logger("delegation_ledger")

    async def fetch_delegations(self, block: int) -> list[Delegation]:
        delegations: list[Delegation] = []
        last_id = ""
        while True:
            data = await self._http.query(
                self._url,
                DELEGATIONS_QUERY,
                {
                    "first": self._page_size,
                    "lastId": last_id,
                    "block": block,
                    "spaces": [self._space, GLOBAL_SPACE],
                },
            )
            page = data.get("delegations") or []
            delegations.extend(Delegation.from_dict(edge) for edge in page)
            if len(page) < self._page_size:
                break
            last_id = str(page[-1]["id"])

        self._logger.info("delegations_fetched", block=block, delegations=len(delegations))
        return delegations
