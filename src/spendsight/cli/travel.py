#!/usr/bin/env python3
"""
Travel CLI - Trip Analysis Commands

Trip ids are printed by ``spendsight travel trips`` and look like
``Thailand_202411_3`` (country, year+month, day of the first transaction).
"""

import click

from ..data.service import Dataset
from ..travel import analytics
from .common import emit, get_service, period_option, to_period


@click.group()
def travel() -> None:
    """Trips abroad reconstructed from travel-wallet transactions."""
    pass


@travel.command()
@period_option()
@click.pass_context
def trips(ctx: click.Context, period: str | None) -> None:
    """
    List trips, newest first.

    Examples:
      spendsight travel trips
      spendsight travel trips --period 2024
    """
    service = get_service(ctx)
    emit(
        lambda: analytics.list_trips(
            service.rows(Dataset.TRAVELBUDDY), to_period(period), settings=service.config.travel
        )
    )


@travel.command()
@click.argument("trip_id")
@click.pass_context
def trip(ctx: click.Context, trip_id: str) -> None:
    """Category breakdown of one trip's spending."""
    service = get_service(ctx)
    emit(lambda: analytics.trip_spend(service.rows(Dataset.TRAVELBUDDY), trip_id, settings=service.config.travel))


@travel.command("load-vs-spend")
@click.argument("trip_id")
@click.pass_context
def load_vs_spend(ctx: click.Context, trip_id: str) -> None:
    """Wallet loads before and during a trip versus its spend."""
    service = get_service(ctx)
    emit(
        lambda: analytics.load_vs_spend(service.rows(Dataset.TRAVELBUDDY), trip_id, settings=service.config.travel)
    )


@travel.command()
@click.argument("trip_id_1")
@click.argument("trip_id_2")
@click.pass_context
def compare(ctx: click.Context, trip_id_1: str, trip_id_2: str) -> None:
    """Compare total and daily spend of two trips."""
    service = get_service(ctx)
    emit(
        lambda: analytics.compare_trips(
            service.rows(Dataset.TRAVELBUDDY), trip_id_1, trip_id_2, settings=service.config.travel
        )
    )


@travel.command("currency-mix")
@click.argument("trip_id")
@click.pass_context
def currency_mix(ctx: click.Context, trip_id: str) -> None:
    """Spend per transaction currency on one trip."""
    service = get_service(ctx)
    emit(
        lambda: analytics.currency_mix(service.rows(Dataset.TRAVELBUDDY), trip_id, settings=service.config.travel)
    )
