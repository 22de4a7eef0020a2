from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, localcontext
from typing import Any

from gauge_rewards.domain.rewards import Bounty, VoteWeightRow, format_units, strip_delimiters
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.orchestration.reconciliation import reconcile_to_total


@dataclass(slots=True, frozen=True)
class TokenDistribution:
    token_address: str
    token_name: str
    decimals: int
    expected_total: int
    amounts: dict[str, int]
    adjustment: int
    adjusted_recipient: str | None

    def as_dict(self) -> dict[str, Any]:
        return {
            "token_address": self.token_address,
            "token_name": self.token_name,
            "decimals": self.decimals,
            "total": str(self.expected_total),
            "total_formatted": format_units(self.expected_total, self.decimals),
            "adjustment": str(self.adjustment),
            "adjusted_recipient": self.adjusted_recipient,
            "recipients": [
                {"address": address, "amount": str(amount)}
                for address, amount in self.amounts.items()
                if amount > 0
            ],
        }


@dataclass(slots=True, frozen=True)
class BountySplit:
    distributions: tuple[TokenDistribution, ...]
    unmatched: tuple[Bounty, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "distributions": [distribution.as_dict() for distribution in self.distributions],
            "unmatched_bounties": [bounty.as_dict() for bounty in self.unmatched],
        }


def split_bounties(rows: Sequence[VoteWeightRow], bounties: Sequence[Bounty]) -> BountySplit:
    """Share each pool's bounties among that pool's voters by vote share.

    Per token, the recipients' amounts add up exactly to the sum of the
    bounties that had voters; truncation dust goes to the largest recipient.
    """
    logger = get_logger("bounty_split")

    rows_by_pool: dict[str, list[VoteWeightRow]] = {}
    for row in rows:
        rows_by_pool.setdefault(strip_delimiters(row.pool_name), []).append(row)

    raw_amounts: dict[str, dict[str, int]] = {}
    expected: dict[str, int] = {}
    tokens: dict[str, Bounty] = {}
    unmatched: list[Bounty] = []

    with localcontext() as ctx:
        ctx.prec = 80
        for bounty in bounties:
            pool_rows = rows_by_pool.get(strip_delimiters(bounty.pool_token_name))
            if not pool_rows:
                logger.warning(
                    "bounty_without_voters",
                    pool=bounty.pool_token_name,
                    token=bounty.token_address,
                    amount=str(bounty.amount),
                )
                unmatched.append(bounty)
                continue

            token = bounty.token_address
            base_units = bounty.amount_base_units
            tokens.setdefault(token, bounty)
            expected[token] = expected.get(token, 0) + base_units
            recipients = raw_amounts.setdefault(token, {})
            for row in pool_rows:
                voter = row.wallet.lower()
                amount = int(
                    (Decimal(base_units) * Decimal(repr(row.share_vote))).to_integral_value(
                        rounding=ROUND_FLOOR
                    )
                )
                recipients[voter] = recipients.get(voter, 0) + amount

    distributions: list[TokenDistribution] = []
    for token, recipients in raw_amounts.items():
        reconciliation = reconcile_to_total(recipients, expected[token])
        if reconciliation.adjustment:
            logger.info(
                "bounty_total_reconciled",
                token=token,
                recipient=reconciliation.adjusted_key,
                adjustment=reconciliation.adjustment,
            )
        distributions.append(
            TokenDistribution(
                token_address=token,
                token_name=tokens[token].token_name,
                decimals=tokens[token].decimals,
                expected_total=expected[token],
                amounts=reconciliation.amounts,
                adjustment=reconciliation.adjustment,
                adjusted_recipient=reconciliation.adjusted_key,
            )
        )

    return BountySplit(distributions=tuple(distributions), unmatched=tuple(unmatched))
