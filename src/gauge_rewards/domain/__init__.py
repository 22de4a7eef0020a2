"""Domain models for gauge vote counting and reward allocation."""

from gauge_rewards.domain.allocation import (
    AllocationBuilder,
    AllocationResult,
    matches_at_precision,
    to_precision,
)
from gauge_rewards.domain.ballot import Ballot, Proposal
from gauge_rewards.domain.delegation import DelegatedPower, Delegation, DelegationMismatch
from gauge_rewards.domain.vote_share import VoteShare, compute_vote_shares

__all__ = [
    "AllocationBuilder",
    "AllocationResult",
    "Ballot",
    "DelegatedPower",
    "Delegation",
    "DelegationMismatch",
    "Proposal",
    "VoteShare",
    "compute_vote_shares",
    "matches_at_precision",
    "to_precision",
]
