"""Main CLI command group for micpipe."""

from __future__ import annotations

import click

import micpipe
from micpipe.logging import configure_logging


@click.group()
@click.version_option(version=micpipe.__version__, prog_name="micpipe")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Log format. Default: MICPIPE_LOG_FORMAT or console.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Log level. Default: MICPIPE_LOG_LEVEL or INFO.",
)
def cli(log_format: str | None, log_level: str | None) -> None:
    """micpipe: real-time microphone conditioning pipeline."""
    configure_logging(log_format=log_format, level=log_level)
