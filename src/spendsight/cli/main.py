#!/usr/bin/env python3
"""
Main CLI Entry Point for Spendsight

Provides unified command-line interface for all reports over the workbooks.
"""

import logging
import os

import click

from ..core.json_utils import format_json
from ..core.periods import resolve_period
from .common import get_cli_config


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Spendsight - Personal Finance Analytics

    Spending, travel, remittance and rewards reports over the banking app's
    Excel exports. All report commands print JSON.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["SPENDSIGHT_ENV"] = config_env

    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("spendsight").setLevel(logging.DEBUG)

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    config = get_cli_config(ctx)

    if verbose:
        click.echo(f"Environment: {config.environment.value}", err=True)
        click.echo(f"Data directory: {config.data_dir}", err=True)


@main.command()
def version() -> None:
    """Show version information."""
    from spendsight import __author__, __version__

    click.echo(f"Spendsight v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration (password redacted)."""
    config_obj = get_cli_config(ctx)

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  Cache Directory: {config_obj.cache_dir}")
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")
    click.echo(format_json(config_obj.to_dict()))


@main.command()
@click.argument("token")
def period(token: str) -> None:
    """
    Show how a period token resolves.

    Examples:
      spendsight period last_month
      spendsight period "week 2 of november 2024"
    """
    click.echo(format_json(resolve_period(token).to_dict()))


@main.command()
@click.option("--host", help="Bind address (default: from configuration)")
@click.option("--port", type=int, help="Port (default: from configuration)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the HTTP API."""
    import uvicorn

    from ..api.app import create_app

    config_obj = get_cli_config(ctx)
    bind_host = host or config_obj.server.host
    bind_port = port or config_obj.server.port
    click.echo(f"Serving on http://{bind_host}:{bind_port}", err=True)
    uvicorn.run(create_app(config_obj), host=bind_host, port=bind_port, log_level=config_obj.log_level.lower())


# Import command groups
from .data import cache, data  # noqa: E402
from .remittance import remittance  # noqa: E402
from .rewards import rewards  # noqa: E402
from .spend import spend  # noqa: E402
from .travel import travel  # noqa: E402

main.add_command(data)
main.add_command(cache)
main.add_command(spend)
main.add_command(travel)
main.add_command(remittance)
main.add_command(rewards)


if __name__ == "__main__":
    main()
