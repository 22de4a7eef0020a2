from __future__ import annotations

import json
from argparse import ArgumentParser, Namespace
from collections.abc import Callable, Sequence

from gauge_rewards.commands import run_allocate_budget, run_count_votes, run_split_bounties
from gauge_rewards.config import AppSettings, get_settings
from gauge_rewards.observability.logging import configure_logging
from gauge_rewards.types import CommandResult, CommandStatus

CommandHandler = Callable[[Namespace, AppSettings], CommandResult]

COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "count-votes": run_count_votes,
    "allocate-budget": run_allocate_budget,
    "split-bounties": run_split_bounties,
}


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="gauge-rewards", description="Gauge vote counting and reward CLI")
    parser.add_argument("--json", action="store_true", help="emit machine-readable JSON output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    count = subparsers.add_parser("count-votes", help="count a gauge vote and export vote weights")
    count.add_argument("--snapshot-id", default=None, help="snapshot proposal id (or SNAPSHOT_ID)")
    count.add_argument("--space", default=None, help="governance space (or SNAPSHOT_SPACE)")
    count.add_argument("--output", default=None, help="vote weights csv path")

    budget = subparsers.add_parser("allocate-budget", help="split an emission budget across pools")
    budget.add_argument("--amount", required=True, help="budget in whole tokens, e.g. 125000.5")
    budget.add_argument("--snapshot-id", default=None)
    budget.add_argument("--space", default=None)
    budget.add_argument("--decimals", type=int, default=None)
    budget.add_argument("--epochs", type=int, default=None, help="emission epochs per round")
    share_group = budget.add_mutually_exclusive_group(required=False)
    share_group.add_argument("--share-decimals", type=int, default=None)
    share_group.add_argument("--exact-shares", action="store_true")
    budget.add_argument("--output", default=None, help="json artifact path")

    bounties = subparsers.add_parser("split-bounties", help="split pool bounties across voters")
    bounties.add_argument("--bounties", required=True, help="bounty csv path")
    bounties.add_argument("--vote-weights", default=None, help="vote weights csv path")
    bounties.add_argument("--output", default=None, help="json artifact path")

    return parser


def _emit_result(result: CommandResult, *, as_json: bool) -> None:
    if as_json:
        print(result.to_json())
        return

    print(f"{result.command}: {result.status.value}")
    if result.details:
        print(json.dumps(result.details, indent=2, sort_keys=True))


def entrypoint(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    settings = get_settings()
    configure_logging(settings.log_level)

    handler = COMMAND_HANDLERS[str(args.command)]
    result = handler(args, settings)
    _emit_result(result, as_json=bool(args.json))
    return 1 if result.status == CommandStatus.FAILED else 0


if __name__ == "__main__":
    raise SystemExit(entrypoint())
