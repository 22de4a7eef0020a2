from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from gauge_rewards.domain.ballot import Proposal
from gauge_rewards.domain.vote_share import VoteShare
from gauge_rewards.errors import ShareSumMismatchError, TallyMismatchError

DEFAULT_PRECISION = 14


def to_precision(value: float, digits: int) -> float:
    """Round ``value`` to ``digits`` significant digits."""
    return float(f"{value:.{digits}g}")


def matches_at_precision(left: float, right: float, digits: int) -> bool:
    return to_precision(left, digits) == to_precision(right, digits)


@dataclass(slots=True, frozen=True)
class AllocationResult:
    proposal: Proposal
    choices: Mapping[str, tuple[VoteShare, ...]]

    def rows(self) -> Iterator[tuple[str, VoteShare]]:
        for label, shares in self.choices.items():
            for share in shares:
                yield label, share

    def voters(self, label: str) -> list[str]:
        return [share.address for share in self.choices.get(label, ())]


class AllocationBuilder:
    """Collects vote shares per choice, then validates them against the tally.

    Choices keep first-seen order and voters keep insertion order, so the
    exported table is reproducible for identical input.
    """

    def __init__(self, proposal: Proposal, *, precision: int = DEFAULT_PRECISION) -> None:
        self._proposal = proposal
        self._precision = precision
        self._choices: dict[str, list[VoteShare]] = {}
        self._finalized = False

    def add(self, choice: str, share: VoteShare) -> None:
        if self._finalized:
            raise RuntimeError("allocation already finalized")
        self._choices.setdefault(choice, []).append(share)

    def add_all(self, shares: Mapping[str, VoteShare]) -> None:
        for choice, share in shares.items():
            self.add(choice, share)

    def __len__(self) -> int:
        return sum(len(shares) for shares in self._choices.values())

    def finalize(self) -> AllocationResult:
        self._finalized = True
        self._validate()
        return AllocationResult(
            proposal=self._proposal,
            choices={label: tuple(shares) for label, shares in self._choices.items()},
        )

    def _validate(self) -> None:
        unknown = [label for label in self._choices if label not in self._proposal.choices]
        if unknown:
            raise TallyMismatchError(unknown[0], 0.0, self._sum_votes(unknown[0]))

        calculated_total = 0.0
        for label, expected in zip(self._proposal.choices, self._proposal.scores):
            calculated = self._sum_votes(label)
            calculated_total += calculated
            if not matches_at_precision(calculated, expected, self._precision):
                raise TallyMismatchError(label, expected, calculated)

            total_share = sum(share.vote_share for share in self._choices.get(label, ()))
            if total_share and not matches_at_precision(total_share, 1.0, self._precision):
                raise ShareSumMismatchError(label, total_share)

        if not matches_at_precision(calculated_total, self._proposal.scores_total, self._precision):
            raise TallyMismatchError(None, self._proposal.scores_total, calculated_total)

    def _sum_votes(self, label: str) -> float:
        return sum(share.absolute_votes for share in self._choices.get(label, ()))
