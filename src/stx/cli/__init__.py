"""
stx CLI — Syncthing helper for pairing folders and watching servers.

Each command group lives in its own module and is attached to the main
Click group through a register function.

Entry point: stx.cli:main
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ._common import LOG_FORMAT, CliContext


@click.group()
@click.version_option(version=__version__, prog_name="stx")
@click.option("--home", envvar="STX_HOME", default=None, type=click.Path(),
              help="Config directory (servers.json, config.yaml).")
@click.option("--verbose", "-v", is_flag=True, help="Log requests and decisions to stderr.")
@click.pass_context
def main(ctx: click.Context, home: Optional[str], verbose: bool):
    """stx — pair Syncthing folders and watch your servers."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
    ctx.obj = CliContext(home=Path(home).expanduser() if home else None)


# ---------------------------------------------------------------------------
# Register all commands from modular files
# ---------------------------------------------------------------------------

from .servers import register_server_commands
from .pair import register_pair_commands
from .monitor import register_monitor_commands
from .completions import register_completion_commands

register_server_commands(main)
register_pair_commands(main)
register_monitor_commands(main)
register_completion_commands(main)
