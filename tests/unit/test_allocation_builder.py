import pytest

from gauge_rewards.domain.allocation import AllocationBuilder, matches_at_precision, to_precision
from gauge_rewards.domain.ballot import Ballot, Proposal
from gauge_rewards.domain.vote_share import VoteShare, compute_vote_shares
from gauge_rewards.errors import ShareSumMismatchError, TallyMismatchError


def _proposal() -> Proposal:
    return Proposal(
        proposal_id="0xprop",
        choices=("PoolA", "PoolB"),
        scores=(60.0, 40.0),
        scores_total=100.0,
        snapshot_block=1000,
    )


def _ballots() -> list[Ballot]:
    return [
        Ballot(voter="0xA", choice_weights={1: 1, 2: 1}, vp=20.0),
        Ballot(voter="0xB", choice_weights={1: 1}, vp=50.0),
        Ballot(voter="0xC", choice_weights={2: 1}, vp=30.0),
    ]


def test_matching_tally_finalizes() -> None:
    proposal = _proposal()
    builder = AllocationBuilder(proposal)
    for ballot in _ballots():
        builder.add_all(compute_vote_shares(ballot, proposal))

    result = builder.finalize()

    assert list(result.choices) == ["PoolA", "PoolB"]
    assert result.voters("PoolA") == ["0xA", "0xB"]
    assert result.voters("PoolB") == ["0xA", "0xC"]
    assert sum(share.absolute_votes for share in result.choices["PoolA"]) == 60.0
    assert sum(share.absolute_votes for share in result.choices["PoolB"]) == 40.0
    assert len(builder) == 4


def test_vote_shares_sum_to_one_per_choice() -> None:
    proposal = _proposal()
    builder = AllocationBuilder(proposal)
    for ballot in _ballots():
        builder.add_all(compute_vote_shares(ballot, proposal))

    result = builder.finalize()

    for label in result.choices:
        total_share = sum(share.vote_share for share in result.choices[label])
        assert matches_at_precision(total_share, 1.0, 14)


def test_impossible_vp_raises_tally_mismatch() -> None:
    proposal = _proposal()
    builder = AllocationBuilder(proposal)
    for ballot in _ballots():
        builder.add_all(compute_vote_shares(ballot, proposal))
    builder.add_all(
        compute_vote_shares(Ballot(voter="0xD", choice_weights={1: 1}, vp=5.0), proposal)
    )

    with pytest.raises(TallyMismatchError) as exc_info:
        builder.finalize()

    assert exc_info.value.choice == "PoolA"
    assert exc_info.value.expected == 60.0
    assert exc_info.value.actual == 65.0
    assert exc_info.value.details()["delta"] == 5.0


def test_missing_votes_for_scored_choice_raise() -> None:
    proposal = _proposal()
    builder = AllocationBuilder(proposal)
    builder.add_all(
        compute_vote_shares(Ballot(voter="0xB", choice_weights={1: 1}, vp=60.0), proposal)
    )

    with pytest.raises(TallyMismatchError) as exc_info:
        builder.finalize()

    assert exc_info.value.choice == "PoolB"


def test_total_mismatch_raises_without_choice() -> None:
    proposal = Proposal(
        proposal_id="0xprop",
        choices=("PoolA",),
        scores=(60.0,),
        scores_total=61.0,
        snapshot_block=1000,
    )
    builder = AllocationBuilder(proposal)
    builder.add_all(
        compute_vote_shares(Ballot(voter="0xB", choice_weights={1: 1}, vp=60.0), proposal)
    )

    with pytest.raises(TallyMismatchError) as exc_info:
        builder.finalize()

    assert exc_info.value.choice is None


def test_shares_not_normalized_raise() -> None:
    proposal = Proposal(
        proposal_id="0xprop",
        choices=("PoolA",),
        scores=(60.0,),
        scores_total=60.0,
        snapshot_block=1000,
    )
    builder = AllocationBuilder(proposal)
    builder.add("PoolA", VoteShare(address="0xA", absolute_votes=30.0, vote_share=0.5))
    builder.add("PoolA", VoteShare(address="0xB", absolute_votes=30.0, vote_share=0.25))

    with pytest.raises(ShareSumMismatchError):
        builder.finalize()


def test_builder_rejects_adds_after_finalize() -> None:
    proposal = Proposal(
        proposal_id="0xprop",
        choices=("PoolA",),
        scores=(0.0,),
        scores_total=0.0,
        snapshot_block=1000,
    )
    builder = AllocationBuilder(proposal)
    builder.finalize()

    with pytest.raises(RuntimeError):
        builder.add("PoolA", VoteShare(address="0xA", absolute_votes=1.0, vote_share=1.0))


def test_precision_comparison_ignores_float_noise() -> None:
    assert to_precision(0.1 + 0.2, 14) == 0.3
    assert matches_at_precision(59.99999999999999, 60.0, 14)
    assert not matches_at_precision(59.9999, 60.0, 14)
