#!/usr/bin/env python3
"""
Data CLI - Raw Dataset and Cache Commands
"""

import click

from ..core.periods import MAX_YEAR, MIN_YEAR, month_filter_period, resolve_period
from ..data.filters import filter_names
from ..data.service import Dataset
from .common import emit, get_service

DATASETS = click.Choice([d.value for d in Dataset], case_sensitive=False)


def parse_filters(dataset: Dataset, raw: tuple[str, ...]) -> dict[str, str]:
    """
    NAME=VALUE pairs from repeated --filter options.

    Raises:
        click.BadParameter: On a malformed pair or a name the dataset does not filter on
    """
    valid = filter_names(dataset)
    filters: dict[str, str] = {}
    for item in raw:
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not value.strip():
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="--filter")
        if name not in valid:
            raise click.BadParameter(
                f"unknown filter {name!r} for {dataset.value} (valid: {', '.join(valid)})", param_hint="--filter"
            )
        filters[name] = value
    return filters


@click.group()
def data() -> None:
    """Inspect the source workbooks."""
    pass


@data.command("list")
@click.argument("dataset", type=DATASETS)
@click.option("--period", "-p", help="Period token; overrides --month/--year")
@click.option("--month", type=click.IntRange(1, 12), help="Month 1-12 (default: current month)")
@click.option("--year", type=click.IntRange(MIN_YEAR, MAX_YEAR), help="Year (default: current year)")
@click.option("--all", "all_records", is_flag=True, help="All records, no date filter")
@click.option("--sheet", help="Only this sheet")
@click.option("--filter", "-f", "filter_pairs", multiple=True, metavar="NAME=VALUE", help="Field filter (repeatable)")
@click.pass_context
def list_rows(
    ctx: click.Context,
    dataset: str,
    period: str | None,
    month: int | None,
    year: int | None,
    all_records: bool,
    sheet: str | None,
    filter_pairs: tuple[str, ...],
) -> None:
    """
    Print the rows of a dataset, grouped by sheet, with per-sheet amount stats.

    Without options only the current month is listed.

    \b
    Filters per dataset:
      remittance:   cpr, paymentmode, status
      transactions: sender_cr, transaction_type, transaction_status, credit_debit
      rewards:      customerId
      travelbuddy:  customerId, country, transactionType

    Examples:
      spendsight data list transactions
      spendsight data list rewards --month 11 --year 2024 --sheet load
      spendsight data list travelbuddy --period last_3_months
      spendsight data list travelbuddy --all -f transactionType=LOAD
    """
    service = get_service(ctx)
    filters = parse_filters(Dataset.parse(dataset), filter_pairs)
    selected = resolve_period(period) if period else month_filter_period(month, year, all_records)
    emit(lambda: service.listing(dataset, selected, sheet=sheet, filters=filters))


@data.command("all")
@click.pass_context
def all_rows(ctx: click.Context) -> None:
    """Print every row of every dataset, keyed by dataset and sheet."""
    service = get_service(ctx)
    emit(service.all_datasets)


@data.command()
@click.pass_context
def sheets(ctx: click.Context) -> None:
    """Workbook file and sheet names of every dataset."""
    service = get_service(ctx)
    emit(service.sheet_info)


@click.group()
def cache() -> None:
    """Parsed-workbook cache."""
    pass


@cache.command()
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Drop all cached workbook data."""
    get_service(ctx).refresh()
    click.echo("Cache cleared")
