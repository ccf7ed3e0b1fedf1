#!/usr/bin/env python3
"""
Spending CLI - Transaction Analysis Commands
"""

import click

from ..analysis import spending
from ..data.service import Dataset
from .common import emit, get_service, period_option, to_period


@click.group()
def spend() -> None:
    """Spending analysis over card and account transactions."""
    pass


@spend.command()
@period_option()
@click.pass_context
def summary(ctx: click.Context, period: str | None) -> None:
    """
    Total spent, received and net for a period.

    Examples:
      spendsight spend summary --period last_month
      spendsight spend summary -p 2024
    """
    service = get_service(ctx)
    emit(
        lambda: spending.spend_summary(
            service.rows(Dataset.TRANSACTIONS), service.rows(Dataset.TRAVELBUDDY), to_period(period)
        )
    )


@spend.command()
@period_option()
@click.pass_context
def categories(ctx: click.Context, period: str | None) -> None:
    """Spending per merchant category."""
    service = get_service(ctx)
    emit(lambda: spending.spend_by_category(service.rows(Dataset.TRANSACTIONS), to_period(period)))


@spend.command()
@period_option()
@click.option("--limit", type=int, default=10, show_default=True, help="Number of merchants")
@click.pass_context
def merchants(ctx: click.Context, period: str | None, limit: int) -> None:
    """Top merchants by total spend."""
    service = get_service(ctx)
    emit(lambda: spending.top_merchants(service.rows(Dataset.TRANSACTIONS), to_period(period), limit=limit))


@spend.command()
@click.argument("query")
@period_option()
@click.option("--limit", type=int, default=5, show_default=True)
@click.option("--offset", type=int, default=0, show_default=True)
@click.pass_context
def search(ctx: click.Context, query: str, period: str | None, limit: int, offset: int) -> None:
    """
    Search transactions by merchant, description or category.

    Examples:
      spendsight spend search lulu
      spendsight spend search "coffee" --period this_month --limit 20
    """
    service = get_service(ctx)
    emit(
        lambda: spending.search_transactions(
            service.rows(Dataset.TRANSACTIONS), query, to_period(period), limit=limit, offset=offset
        )
    )


@spend.command()
@period_option(default="week")
@click.pass_context
def daily(ctx: click.Context, period: str) -> None:
    """Spending per day."""
    service = get_service(ctx)
    emit(lambda: spending.daily_spend(service.rows(Dataset.TRANSACTIONS), to_period(period)))


@spend.command()
@period_option()
@click.pass_context
def unusual(ctx: click.Context, period: str | None) -> None:
    """Transactions far above the average amount."""
    service = get_service(ctx)
    emit(lambda: spending.unusual_spend(service.rows(Dataset.TRANSACTIONS), to_period(period)))
