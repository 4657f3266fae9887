"""micpipe CLI.

Registers all commands on the main group.
"""

from micpipe.cli.config import config
from micpipe.cli.drift import drift
from micpipe.cli.main import cli

__all__ = [
    "cli",
    "config",
    "drift",
]
