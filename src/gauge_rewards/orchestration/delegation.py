from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from gauge_rewards.domain.allocation import matches_at_precision
from gauge_rewards.domain.ballot import Ballot
from gauge_rewards.domain.delegation import DelegatedPower, Delegation, DelegationMismatch
from gauge_rewards.observability.logging import get_logger


class DelegationSource(Protocol):
    async def fetch_delegations(self, block: int) -> list[Delegation]:
        ...


class VotingPowerSource(Protocol):
    async def voting_power(self, addresses: Sequence[str], block: int) -> dict[str, float]:
        ...


def dedupe_delegations(delegations: Iterable[Delegation], space: str) -> list[Delegation]:
    """Keep one edge per delegator, preferring the edge scoped to ``space``.

    The space-scoped edge wins whatever order the edges arrive in; when a
    delegator has no space-scoped edge the first edge seen is kept.
    """
    chosen: dict[str, Delegation] = {}
    for edge in delegations:
        key = edge.delegator.lower()
        current = chosen.get(key)
        if current is None or (current.space != space and edge.space == space):
            chosen[key] = edge
    return list(chosen.values())


def delegators_of(delegations: Iterable[Delegation], delegate: str) -> list[str]:
    target = delegate.lower()
    return [edge.delegator for edge in delegations if edge.delegate.lower() == target]


@dataclass(slots=True, frozen=True)
class ResolvedDelegate:
    ballot: Ballot
    powers: tuple[DelegatedPower, ...]
    declared_vp: float

    @property
    def resolved_vp(self) -> float:
        return sum(power.voting_power for power in self.powers)


@dataclass(slots=True, frozen=True)
class DelegationResolution:
    delegates: tuple[ResolvedDelegate, ...]
    mismatches: tuple[DelegationMismatch, ...]


class DelegationResolver:
    def __init__(
        self,
        ledger: DelegationSource,
        scores: VotingPowerSource,
        *,
        space: str,
        delegation_strategy_index: int = 1,
        precision: int = 14,
        max_concurrency: int = 4,
    ) -> None:
        self._ledger = ledger
        self._scores = scores
        self._space = space
        self._strategy_index = delegation_strategy_index
        self._precision = precision
        self._max_concurrency = max_concurrency
        self._logger = get_logger("delegation_resolver")

    async def resolve(
        self,
        block: int,
        delegated_ballots: Sequence[Ballot],
        all_ballots: Sequence[Ballot],
    ) -> DelegationResolution:
        if not delegated_ballots:
            return DelegationResolution(delegates=(), mismatches=())

        delegations = dedupe_delegations(await self._ledger.fetch_delegations(block), self._space)
        self._logger.info(
            "delegations_deduplicated",
            block=block,
            delegations=len(delegations),
            delegated_ballots=len(delegated_ballots),
        )

        # A delegator who voted directly is counted through their own ballot.
        self_voters = {ballot.voter.lower() for ballot in all_ballots}
        semaphore = asyncio.Semaphore(self._max_concurrency)

        delegates = await asyncio.gather(
            *(
                self._resolve_delegate(ballot, delegations, self_voters, block, semaphore)
                for ballot in delegated_ballots
            )
        )

        mismatches: list[DelegationMismatch] = []
        for delegate in delegates:
            if not matches_at_precision(delegate.resolved_vp, delegate.declared_vp, self._precision):
                mismatch = DelegationMismatch(
                    delegate=delegate.ballot.voter,
                    declared_vp=delegate.declared_vp,
                    resolved_vp=delegate.resolved_vp,
                )
                mismatches.append(mismatch)
                self._logger.warning("delegation_mismatch", **mismatch.as_dict())

        return DelegationResolution(delegates=tuple(delegates), mismatches=tuple(mismatches))

    async def _resolve_delegate(
        self,
        ballot: Ballot,
        delegations: Sequence[Delegation],
        self_voters: set[str],
        block: int,
        semaphore: asyncio.Semaphore,
    ) -> ResolvedDelegate:
        delegators = [
            delegator
            for delegator in delegators_of(delegations, ballot.voter)
            if delegator.lower() not in self_voters
        ]
        async with semaphore:
            voting_power = await self._scores.voting_power(delegators, block)

        self._logger.debug("delegate_resolved", delegate=ballot.voter, delegators=len(delegators))
        return ResolvedDelegate(
            ballot=ballot,
            powers=tuple(
                DelegatedPower(delegator=delegator, voting_power=voting_power.get(delegator.lower(), 0.0))
                for delegator in delegators
            ),
            declared_vp=ballot.strategy_vp(self._strategy_index),
        )
