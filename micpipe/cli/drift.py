"""`micpipe drift` command: runs queue depths through the drift controller."""

from __future__ import annotations

import click

from micpipe.cli.main import cli
from micpipe.config.settings import get_settings
from micpipe.effects.resampler import DriftController


@cli.command()
@click.argument("queued_ms", nargs=-1, type=float, required=True)
@click.option(
    "--target",
    type=float,
    default=None,
    help="Target queue depth in ms. Default: MICPIPE_DRIFT_TARGET_QUEUE_MS or 60.",
)
def drift(queued_ms: tuple[float, ...], target: float | None) -> None:
    """Feeds QUEUED_MS observations, in order, to a fresh drift controller.

    Prints the controller mode, error, ratio and integral after each step.

    \b
    Example:
        micpipe drift 60 90 120 200 40
    """
    if target is None:
        target = get_settings().drift.target_queue_ms
    if target <= 0:
        raise click.BadParameter("must be positive", param_hint="--target")

    controller = DriftController(target_queue_ms=target)

    header = f"{'STEP':>4}  {'QUEUED':>8}  {'ERROR':>8}  {'MODE':<4}  {'RATIO':>8}"
    click.echo(f"{header}  {'INTEGRAL':>9}")
    for step, value in enumerate(queued_ms, start=1):
        controller.update_playback_ratio(value)
        update = controller.last_update
        if update is None:
            continue
        click.echo(
            f"{step:>4}  {update.queued_ms:>8.1f}  {update.error_ms:>8.1f}  "
            f"{update.mode.value:<4}  {update.ratio:>8.5f}  {update.integral:>9.1f}"
        )
