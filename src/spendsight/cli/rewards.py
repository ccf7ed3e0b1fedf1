#!/usr/bin/env python3
"""
Rewards CLI - Points and Cashback Commands
"""

import click

from ..analysis import rewards as analysis
from ..data.service import Dataset
from .common import emit, get_service, period_option, to_period

REWARD_TYPES = click.Choice(["all", "transactions", "load", "flyy_points"], case_sensitive=False)


@click.group()
def rewards() -> None:
    """Loyalty points, cashback and wallet loads."""
    pass


@rewards.command()
@click.option("--type", "reward_type", type=REWARD_TYPES, default="all", show_default=True)
@period_option()
@click.pass_context
def summary(ctx: click.Context, reward_type: str, period: str | None) -> None:
    """Points, cashback and load totals with loyalty tier."""
    service = get_service(ctx)
    emit(lambda: analysis.rewards_summary(service.sheets(Dataset.REWARDS), reward_type, to_period(period)))


@rewards.command()
@click.option("--type", "reward_type", type=REWARD_TYPES, default="all", show_default=True)
@period_option()
@click.pass_context
def activity(ctx: click.Context, reward_type: str, period: str | None) -> None:
    """Recent reward events, newest first."""
    service = get_service(ctx)
    emit(lambda: analysis.rewards_activity(service.sheets(Dataset.REWARDS), reward_type, to_period(period)))


@rewards.command()
@click.argument("category", required=False)
def strategy(category: str | None) -> None:
    """Best way to earn rewards on a spend category."""
    emit(lambda: analysis.best_strategy(category))
