from __future__ import annotations

import csv
from decimal import Decimal, InvalidOperation
from pathlib import Path

from gauge_rewards.domain.rewards import Bounty, to_base_units
from gauge_rewards.errors import ConfigurationError
from gauge_rewards.snapshot.addresses import checksum_address

BOUNTY_HEADER: tuple[str, ...] = (
    "poolTokenName",
    "bountyTokenName",
    "bountyAmount",
    "bountyTokenDecimals",
    "bountyTokenAddress",
)


def _field(record: dict[str, str], name: str) -> str:
    return str(record.get(name) or "").strip()


def _parse_bounty(record: dict[str, str], *, location: str) -> Bounty:
    try:
        amount = Decimal(_field(record, "bountyAmount"))
        decimals = int(_field(record, "bountyTokenDecimals"))
        to_base_units(amount, decimals)
        token_address = checksum_address(
            _field(record, "bountyTokenAddress"),
            field_name="bountyTokenAddress",
        )
    except (InvalidOperation, ValueError) as exc:
        raise ConfigurationError(f"{location}: {exc}") from exc

    return Bounty(
        pool_token_name=_field(record, "poolTokenName"),
        token_name=_field(record, "bountyTokenName"),
        amount=amount,
        decimals=decimals,
        token_address=token_address,
    )


def read_bounties(path: str | Path) -> list[Bounty]:
    source = Path(path)
    if not source.exists():
        raise ConfigurationError(f"bounty file not found: {source}")

    with source.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        missing = set(BOUNTY_HEADER) - set(reader.fieldnames or ())
        if missing:
            raise ConfigurationError(
                f"bounty file {source} is missing columns: {', '.join(sorted(missing))}"
            )
        return [
            _parse_bounty(record, location=f"{source}:{line_number}")
            for line_number, record in enumerate(reader, start=2)
            if any(_field(record, name) for name in BOUNTY_HEADER)
        ]
