from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from gauge_rewards.errors import InvalidBallotError


def _coerce_choice_weights(raw_choice: Any) -> dict[int, float]:
    # weighted: {"1": 2, "3": 1}; single-choice: 3; approval: [1, 3]
    if isinstance(raw_choice, Mapping):
        weights: dict[int, float] = {}
        for raw_index, raw_weight in raw_choice.items():
            try:
                index = int(raw_index)
                weight = float(raw_weight)
            except (TypeError, ValueError) as exc:
                raise InvalidBallotError(f"invalid choice entry {raw_index!r}: {raw_weight!r}") from exc
            if weight < 0:
                raise InvalidBallotError(f"choice {index} has a negative weight")
            weights[index] = weight
        return weights

    if isinstance(raw_choice, bool):
        raise InvalidBallotError(f"unsupported choice payload: {raw_choice!r}")

    if isinstance(raw_choice, int):
        return {raw_choice: 1.0}

    if isinstance(raw_choice, list):
        try:
            return {int(index): 1.0 for index in raw_choice}
        except (TypeError, ValueError) as exc:
            raise InvalidBallotError(f"unsupported choice payload: {raw_choice!r}") from exc

    raise InvalidBallotError(f"unsupported choice payload: {raw_choice!r}")


@dataclass(slots=True, frozen=True)
class Ballot:
    voter: str
    choice_weights: Mapping[int, float]
    vp: float
    vp_by_strategy: tuple[float, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Ballot:
        voter = str(payload.get("voter") or "").strip()
        if not voter:
            raise InvalidBallotError("ballot is missing a voter")
        return cls(
            voter=voter,
            choice_weights=_coerce_choice_weights(payload.get("choice")),
            vp=float(payload.get("vp") or 0.0),
            vp_by_strategy=tuple(float(value or 0.0) for value in payload.get("vp_by_strategy") or ()),
        )

    @property
    def voting_parts(self) -> float:
        return sum(self.choice_weights.values())

    def strategy_vp(self, index: int) -> float:
        if index < len(self.vp_by_strategy):
            return self.vp_by_strategy[index]
        return 0.0

    def direct_vp(self, delegation_strategy_index: int) -> float:
        """Voting power the voter holds themselves, without delegated power."""
        return self.vp - self.strategy_vp(delegation_strategy_index)


@dataclass(slots=True, frozen=True)
class Proposal:
    proposal_id: str
    choices: tuple[str, ...]
    scores: tuple[float, ...]
    scores_total: float
    snapshot_block: int
    strategies: tuple[str, ...] = field(default_factory=tuple)
    votes: int = 0
    end: int = 0

    def __post_init__(self) -> None:
        if len(self.choices) != len(self.scores):
            raise InvalidBallotError(
                f"proposal {self.proposal_id} has {len(self.choices)} choices "
                f"but {len(self.scores)} scores"
            )
        if len(set(self.choices)) != len(self.choices):
            raise InvalidBallotError(f"proposal {self.proposal_id} has duplicate choice labels")

    @classmethod
    def from_dict(cls, proposal_id: str, payload: Mapping[str, Any]) -> Proposal:
        try:
            snapshot_block = int(payload["snapshot"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidBallotError(
                f"proposal {proposal_id} has no usable snapshot block"
            ) from exc

        return cls(
            proposal_id=str(payload.get("id") or proposal_id),
            choices=tuple(str(choice) for choice in payload.get("choices") or ()),
            scores=tuple(float(score or 0.0) for score in payload.get("scores") or ()),
            scores_total=float(payload.get("scores_total") or 0.0),
            snapshot_block=snapshot_block,
            strategies=tuple(
                str(strategy.get("name", "")) for strategy in payload.get("strategies") or ()
            ),
            votes=int(payload.get("votes") or 0),
            end=int(payload.get("end") or 0),
        )

    def _position(self, choice_index: int) -> int:
        position = choice_index - 1
        if position < 0 or position >= len(self.choices):
            raise InvalidBallotError(
                f"choice index {choice_index} is outside proposal {self.proposal_id} "
                f"(1..{len(self.choices)})"
            )
        return position

    def choice_label(self, choice_index: int) -> str:
        return self.choices[self._position(choice_index)]

    def choice_score(self, choice_index: int) -> float:
        return self.scores[self._position(choice_index)]
