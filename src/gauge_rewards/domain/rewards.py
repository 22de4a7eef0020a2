from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

CSV_DELIMITER = ","
# characters that would make the csv writer quote a field
QUOTING_CHARACTERS = (CSV_DELIMITER, '"', "\r", "\n")


def strip_delimiters(pool_name: str) -> str:
    for character in QUOTING_CHARACTERS:
        pool_name = pool_name.replace(character, "")
    return pool_name


def to_base_units(amount: Decimal | str, decimals: int) -> int:
    """Convert a token amount to integer base units, refusing to drop precision."""
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    try:
        value = Decimal(amount)
    except InvalidOperation as exc:
        raise ValueError(f"invalid token amount {amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"invalid token amount {amount!r}")

    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"token amount {amount} has more than {decimals} decimals")
    return int(scaled)


def format_units(base_units: int, decimals: int) -> str:
    text = format(Decimal(base_units).scaleb(-decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(slots=True, frozen=True)
class VoteWeightRow:
    pool_name: str
    wallet: str
    absolute_votes: float
    share_vote: float


@dataclass(slots=True, frozen=True)
class Bounty:
    pool_token_name: str
    token_name: str
    amount: Decimal
    decimals: int
    token_address: str

    @property
    def amount_base_units(self) -> int:
        return to_base_units(self.amount, self.decimals)

    def as_dict(self) -> dict[str, Any]:
        return {
            "pool_token_name": self.pool_token_name,
            "token_name": self.token_name,
            "amount": str(self.amount),
            "decimals": self.decimals,
            "token_address": self.token_address,
        }
