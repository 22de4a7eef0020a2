from __future__ import annotations

from argparse import Namespace

from gauge_rewards.config import AppSettings
from gauge_rewards.errors import ConfigurationError, GaugeRewardsError
from gauge_rewards.export.bounties import read_bounties
from gauge_rewards.export.files import write_json_artifact
from gauge_rewards.export.vote_weights import read_vote_weights
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.orchestration.bounties import split_bounties
from gauge_rewards.types import CommandResult, CommandStatus


def run_split_bounties(args: Namespace, settings: AppSettings) -> CommandResult:
    logger = get_logger("split_bounties")
    try:
        bounties_path = str(getattr(args, "bounties", "") or "").strip()
        if not bounties_path:
            raise ConfigurationError("bounties file is required")
        vote_weights_path = (
            str(getattr(args, "vote_weights", "") or "").strip() or settings.vote_weights_csv_path
        )

        rows = read_vote_weights(vote_weights_path)
        bounties = read_bounties(bounties_path)
        split = split_bounties(rows, bounties)
    except GaugeRewardsError as exc:
        logger.error("split_bounties_failed", **exc.details())
        return CommandResult(
            command="split-bounties",
            status=CommandStatus.FAILED,
            details=exc.details(),
        )

    details = {
        "vote_weights": vote_weights_path,
        "bounties": bounties_path,
        **split.as_dict(),
    }
    output = getattr(args, "output", None)
    if output:
        write_json_artifact(details, output)
        details["output"] = str(output)

    logger.info(
        "bounties_split",
        tokens=len(split.distributions),
        unmatched=len(split.unmatched),
    )
    return CommandResult(
        command="split-bounties",
        status=CommandStatus.COMPLETED_WITH_WARNINGS if split.unmatched else CommandStatus.COMPLETED,
        details=details,
    )
