#!/usr/bin/env python3
"""
Shared CLI Helpers

Service construction, period options and JSON output for the report commands.
"""

from collections.abc import Callable
from typing import Any

import click

from ..cache import TieredCache
from ..core.config import Config, get_config
from ..core.json_utils import format_json
from ..core.periods import Period, resolve_period
from ..data.service import DataService, UnknownDatasetError
from ..travel.models import TripNotFoundError
from ..workbook.loader import WorkbookError

REPORT_ERRORS = (TripNotFoundError, UnknownDatasetError, WorkbookError)


def get_cli_config(ctx: click.Context) -> Config:
    """Configuration stored on the context, loading it on first use."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        ctx.obj["config"] = get_config()
    return ctx.obj["config"]


def get_service(ctx: click.Context) -> DataService:
    """
    Dataset service for this invocation.

    A service already placed on ``ctx.obj`` is reused; otherwise one is built
    from configuration and its cache is closed when the command finishes.
    """
    ctx.ensure_object(dict)
    if "service" not in ctx.obj:
        config = get_cli_config(ctx)
        cache = TieredCache.from_config(config.cache)
        cache.open()
        ctx.find_root().call_on_close(cache.close)
        ctx.obj["service"] = DataService(config, cache)
    return ctx.obj["service"]


def period_option(default: str | None = None) -> Callable:
    """``--period`` option accepting any period token."""
    return click.option(
        "--period",
        "-p",
        default=default,
        help="Period token, e.g. last_month, 2024, november_2024, week_2_november (default: all time)"
        if default is None
        else f"Period token (default: {default})",
    )


def to_period(token: str | None) -> Period:
    return resolve_period(token)


def emit(producer: Callable[[], Any]) -> None:
    """
    Run a report and print its result as JSON.

    Domain errors are turned into click errors (exit status 1).
    """
    try:
        result = producer()
    except REPORT_ERRORS as e:
        raise click.ClickException(str(e)) from e
    click.echo(format_json(result))
