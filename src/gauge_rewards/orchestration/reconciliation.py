from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from gauge_rewards.errors import BudgetConservationError


@dataclass(slots=True, frozen=True)
class Reconciliation:
    amounts: dict[str, int]
    adjustment: int = 0
    adjusted_key: str | None = None


def reconcile_to_total(raw_amounts: Mapping[str, int], total: int) -> Reconciliation:
    """Make ``raw_amounts`` sum to ``total`` exactly.

    The whole signed difference lands on the single largest raw amount; on a
    tie the first one in iteration order wins. This conserves the total but
    does not spread the correction proportionally.
    """
    amounts = dict(raw_amounts)
    difference = total - sum(amounts.values())
    if difference == 0:
        return Reconciliation(amounts=amounts)

    if not amounts or max(amounts.values()) <= 0:
        raise BudgetConservationError(
            f"cannot place a difference of {difference} base units: no positive allocation"
        )

    largest = max(amounts, key=amounts.__getitem__)
    amounts[largest] += difference
    if amounts[largest] < 0:
        raise BudgetConservationError(
            f"reconciling {difference} base units would make {largest!r} negative"
        )
    return Reconciliation(amounts=amounts, adjustment=difference, adjusted_key=largest)


@dataclass(slots=True, frozen=True)
class BudgetAllocation:
    total: int
    shares: dict[str, Decimal]
    raw_amounts: dict[str, int]
    amounts: dict[str, int]
    adjustment: int
    adjusted_choice: str | None

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": str(self.total),
            "adjustment": str(self.adjustment),
            "adjusted_choice": self.adjusted_choice,
            "choices": [
                {
                    "choice": choice,
                    "share": str(self.shares[choice]),
                    "raw_amount": str(self.raw_amounts[choice]),
                    "amount": str(amount),
                }
                for choice, amount in self.amounts.items()
            ],
        }


def allocate_budget(
    total: int,
    weights: Mapping[str, float],
    *,
    share_decimals: int | None = None,
) -> BudgetAllocation:
    """Split an integer budget proportionally to ``weights``, conserving it exactly."""
    if total < 0:
        raise BudgetConservationError("budget must be non-negative")

    with localcontext() as ctx:
        ctx.prec = 80
        decimal_weights = {choice: Decimal(repr(float(weight))) for choice, weight in weights.items()}
        if any(weight < 0 for weight in decimal_weights.values()):
            raise BudgetConservationError("choice weights must be non-negative")
        weight_total = sum(decimal_weights.values(), Decimal(0))
        if weight_total <= 0:
            raise BudgetConservationError("no votes to allocate the budget by")

        shares: dict[str, Decimal] = {}
        raw_amounts: dict[str, int] = {}
        for choice, weight in decimal_weights.items():
            share = weight / weight_total
            if share_decimals is not None:
                share = share.quantize(Decimal(1).scaleb(-share_decimals), rounding=ROUND_HALF_UP)
            shares[choice] = share
            raw_amounts[choice] = int((Decimal(total) * share).to_integral_value(rounding=ROUND_FLOOR))

    reconciliation = reconcile_to_total(raw_amounts, total)
    return BudgetAllocation(
        total=total,
        shares=shares,
        raw_amounts=raw_amounts,
        amounts=reconciliation.amounts,
        adjustment=reconciliation.adjustment,
        adjusted_choice=reconciliation.adjusted_key,
    )


def per_epoch_amounts(amounts: Mapping[str, int], epochs: int) -> dict[str, int]:
    if epochs <= 0:
        raise ValueError("epochs must be positive")
    return {choice: amount // epochs for choice, amount in amounts.items()}
