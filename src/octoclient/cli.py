"""Command line access to the API."""

import asyncio
import dataclasses
import json
import logging
from typing import Any

import click

from octoclient.config import Configuration, load_configuration
from octoclient.connection import Connection
from octoclient.errors import ConfigurationError, OctoClientError
from octoclient.utils.logging import configure_logging, log_error

logger = logging.getLogger(__name__)

accept_option = click.option(
    "--accept",
    default=None,
    help="Media type for the Accept header, e.g. application/vnd.github.v3.raw",
)


def _parse_body(ctx: click.Context, param: click.Parameter, value: str) -> Any:  # noqa: ANN401, ARG001
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        msg = f"not a JSON document: {e}"
        raise click.BadParameter(msg) from e


async def _request(config: Configuration, method: str, path: str, body: Any, accept: str | None) -> Any:  # noqa: ANN401
    async with Connection(config) as connection:
        if method == "GET":
            return await connection.get(path, accept)
        if method == "POST":
            return await connection.post(path, body, accept)
        return await connection.patch(path, body, accept)


def _run(config: Configuration, method: str, path: str, accept: str | None, body: Any = None) -> None:  # noqa: ANN401
    try:
        result = asyncio.run(_request(config, method, path, body, accept))
    except OctoClientError as e:
        log_error(logger, f"{method} {path} failed", e)
        raise click.ClickException(e.message) from e

    if isinstance(result, str):
        click.echo(result)
    else:
        click.echo(json.dumps(result, indent=2))


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file.",
)
@click.option("--dry-run", is_flag=True, default=False, help="Do not send any request.")
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, dry_run: bool, debug: bool) -> None:
    """Send requests to the API server."""
    configure_logging(debug)
    try:
        config = load_configuration(config_path)
    except ConfigurationError as e:
        raise click.ClickException(e.message) from e
    if dry_run:
        config = dataclasses.replace(config, dry_run=True)
    ctx.obj = config


@cli.command()
@click.argument("path")
@accept_option
@click.pass_obj
def get(config: Configuration, path: str, accept: str | None) -> None:
    """GET PATH, following all result pages."""
    _run(config, "GET", path, accept)


@cli.command()
@click.argument("path")
@click.argument("body", callback=_parse_body)
@accept_option
@click.pass_obj
def post(config: Configuration, path: str, body: Any, accept: str | None) -> None:  # noqa: ANN401
    """POST the JSON BODY to PATH."""
    _run(config, "POST", path, accept, body)


@cli.command()
@click.argument("path")
@click.argument("body", callback=_parse_body)
@accept_option
@click.pass_obj
def patch(config: Configuration, path: str, body: Any, accept: str | None) -> None:  # noqa: ANN401
    """PATCH PATH with the JSON BODY."""
    _run(config, "PATCH", path, accept, body)


if __name__ == "__main__":
    cli()
