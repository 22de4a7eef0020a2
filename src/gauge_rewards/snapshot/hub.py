from __future__ import annotations

from gauge_rewards.domain.ballot import Ballot, Proposal
from gauge_rewards.errors import NotFoundError
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.snapshot.graphql import SnapshotHttpClient

PROPOSAL_QUERY = """
query Proposal($id: String!) {
  proposal(id: $id) {
    id
    choices
    snapshot
    strategies { name }
    scores
    scores_total
    votes
    end
  }
}
"""

# Upper bound for the first page of the created cursor.
LATEST_CREATED = 2**31 - 1

VOTES_QUERY = """
query Votes($proposal: String!, $first: Int!, $createdBefore: Int!) {
  votes(
    first: $first
    where: { proposal: $proposal, created_lte: $createdBefore }
    orderBy: "created"
    orderDirection: desc
  ) {
    id
    created
    voter
    choice
    vp
    vp_by_strategy
  }
}
"""


class VoteLedger:
    """Read-only access to proposals and ballots on the Snapshot hub."""

    def __init__(self, http: SnapshotHttpClient, graphql_url: str, *, page_size: int = 1000) -> None:
        self._http = http
        self._url = graphql_url
        self._page_size = page_size
        self._logger = get_logger("vote_ledger")

    async def fetch_proposal(self, proposal_id: str) -> Proposal:
        data = await self._http.query(self._url, PROPOSAL_QUERY, {"id": proposal_id})
        payload = data.get("proposal")
        if payload is None:
            raise NotFoundError(f"snapshot proposal {proposal_id!r} not found on {self._url}")

        proposal = Proposal.from_dict(proposal_id, payload)
        self._logger.info(
            "proposal_fetched",
            proposal_id=proposal.proposal_id,
            choices=len(proposal.choices),
            block=proposal.snapshot_block,
            scores_total=proposal.scores_total,
        )
        return proposal

    async def fetch_ballots(self, proposal_id: str) -> list[Ballot]:
        """Page through the ballots newest first.

        The cursor is the oldest `created` of the last page, inclusive, so
        ballots sharing that second come back again and are skipped by vote
        id. A page with nothing new moves the cursor below that second; more
        than `page_size` ballots cast in one second cannot all be reached.
        """
        ballots: list[Ballot] = []
        seen: set[str] = set()
        created_before = LATEST_CREATED
        while True:
            data = await self._http.query(
                self._url,
                VOTES_QUERY,
                {
                    "proposal": proposal_id,
                    "first": self._page_size,
                    "createdBefore": created_before,
                },
            )
            page = data.get("votes") or []
            fresh = [vote for vote in page if str(vote.get("id")) not in seen]
            seen.update(str(vote.get("id")) for vote in fresh)
            ballots.extend(Ballot.from_dict(vote) for vote in fresh)
            if len(page) < self._page_size:
                break
            oldest = int(page[-1]["created"])
            created_before = oldest if fresh else oldest - 1

        self._logger.info("ballots_fetched", proposal_id=proposal_id, ballots=len(ballots))
        return ballots
