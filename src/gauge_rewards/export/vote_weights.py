from __future__ import annotations

import csv
import io
from pathlib import Path

from gauge_rewards.domain.allocation import AllocationResult
from gauge_rewards.domain.rewards import VoteWeightRow, strip_delimiters
from gauge_rewards.errors import ConfigurationError
from gauge_rewards.export.files import atomic_write_text

VOTE_WEIGHTS_HEADER: tuple[str, ...] = ("poolName", "wallet", "absoluteVotes", "shareVote")


def render_vote_weights(result: AllocationResult) -> tuple[str, int]:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(VOTE_WEIGHTS_HEADER)

    rows = 0
    for pool_name, share in result.rows():
        if share.absolute_votes == 0:
            continue
        writer.writerow(
            [
                strip_delimiters(pool_name),
                share.address,
                repr(share.absolute_votes),
                repr(share.vote_share),
            ]
        )
        rows += 1
    return buffer.getvalue(), rows


def write_vote_weights(result: AllocationResult, path: str | Path) -> int:
    """Export one row per (pool, voter) with non-zero votes; returns the row count."""
    content, rows = render_vote_weights(result)
    atomic_write_text(path, content)
    return rows


def read_vote_weights(path: str | Path) -> list[VoteWeightRow]:
    source = Path(path)
    if not source.exists():
        raise ConfigurationError(f"vote weights file not found: {source}")

    with source.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        missing = set(VOTE_WEIGHTS_HEADER) - set(reader.fieldnames or ())
        if missing:
            raise ConfigurationError(
                f"vote weights file {source} is missing columns: {', '.join(sorted(missing))}"
            )

        rows: list[VoteWeightRow] = []
        for line_number, record in enumerate(reader, start=2):
            try:
                rows.append(
                    VoteWeightRow(
                        pool_name=record["poolName"],
                        wallet=record["wallet"].strip(),
                        absolute_votes=float(record["absoluteVotes"]),
                        share_vote=float(record["shareVote"]),
                    )
                )
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"{source}:{line_number}: invalid vote weight row") from exc

    if not rows:
        raise ConfigurationError(f"vote weights file {source} has no rows")
    return rows
