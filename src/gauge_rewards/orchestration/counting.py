from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from gauge_rewards.config import CountingConfig
from gauge_rewards.domain.allocation import AllocationBuilder, AllocationResult
from gauge_rewards.domain.ballot import Ballot, Proposal
from gauge_rewards.domain.delegation import DelegationMismatch
from gauge_rewards.domain.vote_share import compute_vote_shares
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.orchestration.delegation import DelegationResolver
from gauge_rewards.snapshot.gateway import SnapshotGateway


class VoteSource(Protocol):
    async def fetch_proposal(self, proposal_id: str) -> Proposal:
        ...

    async def fetch_ballots(self, proposal_id: str) -> list[Ballot]:
        ...


@dataclass(slots=True, frozen=True)
class CountingOutcome:
    result: AllocationResult
    ballots_counted: int
    delegators_counted: int
    mismatches: tuple[DelegationMismatch, ...]

    @property
    def proposal(self) -> Proposal:
        return self.result.proposal

    def summary(self) -> dict[str, Any]:
        return {
            "proposal_id": self.proposal.proposal_id,
            "snapshot_block": self.proposal.snapshot_block,
            "choices": len(self.proposal.choices),
            "scores_total": self.proposal.scores_total,
            "ballots_counted": self.ballots_counted,
            "delegators_counted": self.delegators_counted,
            "voters_per_choice": {
                label: len(self.result.voters(label)) for label in self.result.choices
            },
            "delegation_mismatches": [mismatch.as_dict() for mismatch in self.mismatches],
        }


class VoteCounter:
    """One counting run: fetch, resolve delegation, aggregate, validate."""

    def __init__(
        self,
        votes: VoteSource,
        resolver: DelegationResolver,
        *,
        delegation_strategy_index: int = 1,
        precision: int = 14,
    ) -> None:
        self._votes = votes
        self._resolver = resolver
        self._strategy_index = delegation_strategy_index
        self._precision = precision
        self._logger = get_logger("vote_counter")

    @classmethod
    def from_gateway(cls, gateway: SnapshotGateway, config: CountingConfig) -> VoteCounter:
        resolver = DelegationResolver(
            gateway.delegations,
            gateway.scores,
            space=config.space,
            delegation_strategy_index=config.delegation_strategy_index,
            precision=config.precision,
            max_concurrency=config.max_concurrency,
        )
        return cls(
            gateway.votes,
            resolver,
            delegation_strategy_index=config.delegation_strategy_index,
            precision=config.precision,
        )

    async def count(self, proposal_id: str) -> CountingOutcome:
        proposal = await self._votes.fetch_proposal(proposal_id)
        ballots = await self._votes.fetch_ballots(proposal_id)

        builder = AllocationBuilder(proposal, precision=self._precision)
        delegated = self._count_direct_votes(builder, proposal, ballots)
        self._logger.info(
            "direct_votes_counted",
            proposal_id=proposal.proposal_id,
            ballots=len(ballots),
            delegated_ballots=len(delegated),
        )

        resolution = await self._resolver.resolve(proposal.snapshot_block, delegated, ballots)

        delegators_counted = 0
        for delegate in resolution.delegates:
            for power in delegate.powers:
                delegator_ballot = Ballot(
                    voter=power.delegator,
                    choice_weights=delegate.ballot.choice_weights,
                    vp=power.voting_power,
                )
                builder.add_all(compute_vote_shares(delegator_ballot, proposal))
                delegators_counted += 1

        result = builder.finalize()
        self._logger.info(
            "allocation_validated",
            proposal_id=proposal.proposal_id,
            choices=len(result.choices),
            entries=len(builder),
            delegators=delegators_counted,
            mismatches=len(resolution.mismatches),
        )
        return CountingOutcome(
            result=result,
            ballots_counted=len(ballots),
            delegators_counted=delegators_counted,
            mismatches=resolution.mismatches,
        )

    def _count_direct_votes(
        self,
        builder: AllocationBuilder,
        proposal: Proposal,
        ballots: Sequence[Ballot],
    ) -> list[Ballot]:
        delegated: list[Ballot] = []
        for ballot in ballots:
            if ballot.strategy_vp(self._strategy_index) != 0:
                delegated.append(ballot)

            direct_vp = ballot.direct_vp(self._strategy_index)
            if direct_vp > 0:
                builder.add_all(compute_vote_shares(ballot, proposal, vp=direct_vp))
        return delegated
