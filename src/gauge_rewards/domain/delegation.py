from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Snapshot stores global delegations under the empty space id.
GLOBAL_SPACE = ""


@dataclass(slots=True, frozen=True)
class Delegation:
    delegator: str
    delegate: str
    space: str = GLOBAL_SPACE

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Delegation:
        return cls(
            delegator=str(payload.get("delegator") or "").strip(),
            delegate=str(payload.get("delegate") or "").strip(),
            space=str(payload.get("space") or GLOBAL_SPACE).strip(),
        )


@dataclass(slots=True, frozen=True)
class DelegatedPower:
    delegator: str
    voting_power: float


@dataclass(slots=True, frozen=True)
class DelegationMismatch:
    """Delegated power reported by the hub versus the power resolved from scores."""

    delegate: str
    declared_vp: float
    resolved_vp: float

    @property
    def difference(self) -> float:
        return self.declared_vp - self.resolved_vp

    def as_dict(self) -> dict[str, Any]:
        return {
            "delegate": self.delegate,
            "declared_vp": self.declared_vp,
            "resolved_vp": self.resolved_vp,
            "difference": self.difference,
        }
