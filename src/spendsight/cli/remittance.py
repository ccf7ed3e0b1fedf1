#!/usr/bin/env python3
"""
Remittance CLI - Money Transfer Commands
"""

import click

from ..analysis import remittance as analysis
from ..core.periods import MAX_YEAR, MIN_YEAR
from ..data.service import Dataset
from .common import emit, get_service


@click.group()
def remittance() -> None:
    """Money sent abroad."""
    pass


@remittance.command()
@click.option("--year", type=click.IntRange(MIN_YEAR, MAX_YEAR), help="Year (default: current year)")
@click.option("--month", type=click.IntRange(1, 12), help="Month 1-12 (default: whole year)")
@click.pass_context
def summary(ctx: click.Context, year: int | None, month: int | None) -> None:
    """
    Total and average remitted in a year or month.

    Examples:
      spendsight remittance summary --year 2024
      spendsight remittance summary --year 2024 --month 11
    """
    service = get_service(ctx)
    emit(lambda: analysis.remittance_summary(service.rows(Dataset.REMITTANCE), year=year, month=month))


@remittance.command()
@click.argument("name")
@click.pass_context
def recipient(ctx: click.Context, name: str) -> None:
    """Totals sent to a beneficiary (substring match)."""
    service = get_service(ctx)
    emit(lambda: analysis.recipient_stats(service.rows(Dataset.REMITTANCE), name))


@remittance.command()
@click.option("--years", type=click.IntRange(1, analysis.MAX_TREND_YEARS), default=3, show_default=True)
@click.pass_context
def trend(ctx: click.Context, years: int) -> None:
    """Yearly remittance totals."""
    service = get_service(ctx)
    emit(lambda: analysis.remittance_trend(service.rows(Dataset.REMITTANCE), years=years))


@remittance.command()
@click.argument("query")
@click.option("--limit", type=int, default=5, show_default=True)
@click.option("--offset", type=int, default=0, show_default=True)
@click.pass_context
def search(ctx: click.Context, query: str, limit: int, offset: int) -> None:
    """Search transfers by purpose, beneficiary or biller."""
    service = get_service(ctx)
    emit(lambda: analysis.search_remittances(service.rows(Dataset.REMITTANCE), query, limit=limit, offset=offset))


@remittance.command("fx-rate")
@click.argument("currency")
def fx_rate(currency: str) -> None:
    """Indicative BHD exchange rate for a currency code."""
    emit(lambda: analysis.fx_rate(currency))
