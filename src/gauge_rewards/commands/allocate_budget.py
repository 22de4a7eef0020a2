from __future__ import annotations

import asyncio
from argparse import Namespace

from gauge_rewards.commands.count_votes import resolve_snapshot_id
from gauge_rewards.config import AppSettings, CountingConfig
from gauge_rewards.domain.ballot import Proposal
from gauge_rewards.domain.rewards import format_units, to_base_units
from gauge_rewards.errors import ConfigurationError, GaugeRewardsError
from gauge_rewards.export.files import write_json_artifact
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.orchestration.reconciliation import allocate_budget, per_epoch_amounts
from gauge_rewards.snapshot import gateway as snapshot_gateway
from gauge_rewards.types import CommandResult, CommandStatus


async def _fetch_proposal(config: CountingConfig, snapshot_id: str) -> Proposal:
    async with snapshot_gateway.open_gateway(config) as gateway:
        return await gateway.votes.fetch_proposal(snapshot_id)


def _int_option(args: Namespace, name: str, default: int | None) -> int | None:
    raw_value = getattr(args, name, None)
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        raise ConfigurationError(f"{name} must be an integer")
    try:
        return int(raw_value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer") from exc


def run_allocate_budget(args: Namespace, settings: AppSettings) -> CommandResult:
    logger = get_logger("allocate_budget")
    try:
        decimals = _int_option(args, "decimals", settings.reward_token_decimals)
        epochs = _int_option(args, "epochs", settings.epochs_per_round)
        share_decimals = (
            None
            if getattr(args, "exact_shares", False)
            else _int_option(args, "share_decimals", settings.budget_share_decimals)
        )
        if decimals is None or decimals < 0:
            raise ConfigurationError("decimals must be non-negative")
        if epochs is None or epochs <= 0:
            raise ConfigurationError("epochs must be positive")
        if share_decimals is not None and share_decimals < 0:
            raise ConfigurationError("share_decimals must be non-negative")

        raw_amount = str(getattr(args, "amount", "") or "").strip()
        try:
            total = to_base_units(raw_amount, decimals)
        except ValueError as exc:
            raise ConfigurationError(f"amount: {exc}") from exc

        snapshot_id = resolve_snapshot_id(args, settings)
        config = CountingConfig.from_settings(
            settings,
            space=getattr(args, "space", None),
            require_delegations=False,
        )

        proposal = asyncio.run(_fetch_proposal(config, snapshot_id))
        allocation = allocate_budget(
            total,
            dict(zip(proposal.choices, proposal.scores)),
            share_decimals=share_decimals,
        )
    except GaugeRewardsError as exc:
        logger.error("allocate_budget_failed", **exc.details())
        return CommandResult(
            command="allocate-budget",
            status=CommandStatus.FAILED,
            details=exc.details(),
        )

    per_epoch = per_epoch_amounts(allocation.amounts, epochs)
    logger.info(
        "budget_allocated",
        proposal_id=proposal.proposal_id,
        total=str(total),
        adjustment=allocation.adjustment,
        adjusted_choice=allocation.adjusted_choice,
    )

    artifact = {
        "proposal_id": proposal.proposal_id,
        "snapshot_block": proposal.snapshot_block,
        "end": proposal.end,
        "decimals": decimals,
        "total_formatted": format_units(total, decimals),
        "epochs": epochs,
        "allocation": allocation.as_dict(),
        "per_epoch": {choice: str(amount) for choice, amount in per_epoch.items()},
    }
    output = getattr(args, "output", None)
    if output:
        write_json_artifact(artifact, output)
        artifact["output"] = str(output)

    return CommandResult(
        command="allocate-budget",
        status=CommandStatus.COMPLETED,
        details=artifact,
    )
