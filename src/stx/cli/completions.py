"""Shell completion command."""

from __future__ import annotations

import click

from ..completions import SUPPORTED_SHELLS, detect_shell, generate_script


def register_completion_commands(main: click.Group) -> None:
    """Register the completion command."""

    @main.command()
    @click.argument("shell", required=False, type=click.Choice(SUPPORTED_SHELLS))
    def completion(shell):
        """Print the completion script for bash or zsh."""
        click.echo(generate_script(shell or detect_shell() or "bash"))
