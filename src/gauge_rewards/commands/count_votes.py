from __future__ import annotations

import asyncio
from argparse import Namespace
from pathlib import Path

from gauge_rewards.config import AppSettings, CountingConfig
from gauge_rewards.errors import ConfigurationError, GaugeRewardsError
from gauge_rewards.export.vote_weights import write_vote_weights
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.orchestration.counting import CountingOutcome, VoteCounter
from gauge_rewards.snapshot import gateway as snapshot_gateway
from gauge_rewards.types import CommandResult, CommandStatus


def resolve_snapshot_id(args: Namespace, settings: AppSettings) -> str:
    snapshot_id = str(getattr(args, "snapshot_id", None) or settings.snapshot_id or "").strip()
    if not snapshot_id:
        raise ConfigurationError("snapshot id is required (--snapshot-id or SNAPSHOT_ID)")
    return snapshot_id


async def _count(config: CountingConfig, snapshot_id: str) -> CountingOutcome:
    async with snapshot_gateway.open_gateway(config) as gateway:
        return await VoteCounter.from_gateway(gateway, config).count(snapshot_id)


def run_count_votes(args: Namespace, settings: AppSettings) -> CommandResult:
    logger = get_logger("count_votes")
    try:
        snapshot_id = resolve_snapshot_id(args, settings)
        config = CountingConfig.from_settings(settings, space=getattr(args, "space", None))
        output = Path(getattr(args, "output", None) or settings.vote_weights_csv_path)

        logger.info("counting_votes", proposal_id=snapshot_id, space=config.space)
        outcome = asyncio.run(_count(config, snapshot_id))
        rows = write_vote_weights(outcome.result, output)
    except GaugeRewardsError as exc:
        logger.error("count_votes_failed", **exc.details())
        return CommandResult(
            command="count-votes",
            status=CommandStatus.FAILED,
            details=exc.details(),
        )

    logger.info("vote_weights_exported", path=str(output), rows=rows)
    return CommandResult(
        command="count-votes",
        status=CommandStatus.COMPLETED_WITH_WARNINGS if outcome.mismatches else CommandStatus.COMPLETED,
        details={
            **outcome.summary(),
            "output": str(output),
            "rows": rows,
        },
    )
