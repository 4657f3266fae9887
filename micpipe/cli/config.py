"""`micpipe config` command: shows the resolved pipeline settings."""

from __future__ import annotations

import json

import click

from micpipe.cli.main import cli
from micpipe.config.settings import get_settings


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print as JSON.")
def config(as_json: bool) -> None:
    """Shows the settings resolved from MICPIPE_* variables and .env."""
    settings = get_settings()
    data = settings.model_dump()

    if as_json:
        click.echo(json.dumps(data, indent=2, sort_keys=True))
        return

    for group, values in data.items():
        click.echo(f"[{group}]")
        for key, value in values.items():
            click.echo(f"  {key} = {value}")
