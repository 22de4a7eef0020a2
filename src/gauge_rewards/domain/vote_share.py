from __future__ import annotations

from dataclasses import dataclass

from gauge_rewards.domain.ballot import Ballot, Proposal


@dataclass(slots=True, frozen=True)
class VoteShare:
    address: str
    absolute_votes: float
    vote_share: float


def compute_vote_shares(
    ballot: Ballot,
    proposal: Proposal,
    *,
    vp: float | None = None,
) -> dict[str, VoteShare]:
    """Split a ballot's voting power across the choices it weighted.

    ``vp`` overrides the ballot's own voting power, e.g. to count only the
    directly held part of a delegate's ballot. A ballot without any weight
    contributes nothing.
    """
    voting_parts = ballot.voting_parts
    if voting_parts <= 0:
        return {}

    votes_per_part = (ballot.vp if vp is None else vp) / voting_parts

    shares: dict[str, VoteShare] = {}
    for choice_index, weight in ballot.choice_weights.items():
        label = proposal.choice_label(choice_index)
        choice_score = proposal.choice_score(choice_index)
        absolute_votes = weight * votes_per_part
        shares[label] = VoteShare(
            address=ballot.voter,
            absolute_votes=absolute_votes,
            vote_share=absolute_votes / choice_score if choice_score else 0.0,
        )
    return shares
