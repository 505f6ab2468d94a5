"""The pair command: share one folder between this machine and a server."""

from __future__ import annotations

import click
from rich.panel import Panel

from ._common import CliContext, console, handle_errors, pass_cli
from ..models import Target
from ..pairing import PairingOrchestrator, PairRequest
from ..ignores import TEMPLATES


def register_pair_commands(main: click.Group) -> None:
    """Register the pair command."""

    @main.command()
    @click.option("--server", "server_name", required=True, help="Registered server name.")
    @click.option("--folder-id", default=None, help="Syncthing folder ID (derived from label if omitted).")
    @click.option("--label", required=True, help="Folder label.")
    @click.option("--local-path", required=True, type=click.Path(), help="Folder path on this machine.")
    @click.option("--server-path", required=True, help="Folder path on the server.")
    @click.option("--local-url", default=None, help="Local Syncthing URL.")
    @click.option("--server-key", default=None, help="Override the registered server API key.")
    @click.option("--ssh", "ssh_host", default=None, help="SSH host used to create the server path.")
    @click.option("--ignore-git", is_flag=True, help="Also ignore .git.")
    @click.option("--ignore-template", default=None, type=click.Choice(sorted(TEMPLATES)),
                  help="Ignore template.")
    @pass_cli
    @handle_errors
    def pair(cli: CliContext, server_name, folder_id, label, local_path, server_path,
             local_url, server_key, ssh_host, ignore_git, ignore_template):
        """Pair a local folder (send-receive) with a server folder (receive-only)."""
        settings = cli.settings
        server = cli.registry.resolve(server_name)
        if server_key:
            server = server.model_copy(update={"api_key": server_key})

        req = PairRequest(
            server=server,
            local=Target(name="local", url=local_url or settings.local_url),
            folder_id=folder_id or "",
            label=label,
            local_path=local_path,
            server_path=server_path,
            ignore_git=ignore_git,
            ignore_template=ignore_template or settings.ignore_template,
            ssh_host=ssh_host,
        )

        result = PairingOrchestrator(settings=settings).run(req)

        lines = [
            f"[bold]Folder ID:[/] [cyan]{result.folder_id}[/]",
            f"[bold]Local:[/]     {result.local_path} [dim](Send & Receive)[/]",
            f"[bold]Server:[/]    {result.server_path} [dim](Receive Only)[/]",
        ]
        console.print()
        console.print(Panel("\n".join(lines), title=f"Paired with {server.name}", border_style="green"))
        for w in result.warnings:
            console.print(f"  [yellow]Warning:[/] {w.step} on {w.target}: {w.error}")
        console.print()
