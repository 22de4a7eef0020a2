"""Command handlers for the gauge-rewards CLI."""

from gauge_rewards.commands.allocate_budget import run_allocate_budget
from gauge_rewards.commands.count_votes import run_count_votes
from gauge_rewards.commands.split_bounties import run_split_bounties

__all__ = [
    "run_allocate_budget",
    "run_count_votes",
    "run_split_bounties",
]
