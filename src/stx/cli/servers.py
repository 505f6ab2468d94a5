"""Server registry commands: add-server, list-servers, remove-server."""

from __future__ import annotations

import json
import sys

import click
from rich.table import Table

from ._common import CliContext, console, handle_errors, pass_cli
from ..registry import ServerEntry


def register_server_commands(main: click.Group) -> None:
    """Register the server registry commands."""

    @main.command("add-server")
    @click.argument("name")
    @click.argument("url")
    @click.option("--api-key", default=None, help="Server API key (prompted when omitted).")
    @pass_cli
    @handle_errors
    def add_server(cli: CliContext, name, url, api_key):
        """Register a Syncthing server (stores URL + API key locally)."""
        if not api_key:
            api_key = click.prompt("Server API key", hide_input=True).strip()

        cli.registry.upsert(name, ServerEntry(url=url, api_key=api_key))
        console.print(f"\n  [green]Saved server:[/] [cyan]{name}[/] {url}\n")

    @main.command("list-servers")
    @click.option("--json", "json_out", is_flag=True, help="Output as JSON.")
    @pass_cli
    @handle_errors
    def list_servers(cli: CliContext, json_out):
        """List registered servers."""
        servers = cli.registry.load().servers

        if json_out:
            click.echo(json.dumps(
                [{"name": n, "url": servers[n].url} for n in sorted(servers)], indent=2,
            ))
            return

        console.print()
        if not servers:
            console.print("  [dim]No servers registered.[/]")
            console.print("  Add one: stx add-server safe-101 http://100.64.0.7:8384")
            console.print()
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2),
                      title=f"Servers ({len(servers)})")
        table.add_column("Name", style="cyan")
        table.add_column("URL")
        table.add_column("Key", style="dim")
        for name in sorted(servers):
            entry = servers[name]
            has_key = "[green]yes[/]" if entry.api_key else "[yellow]no[/]"
            table.add_row(name, entry.url, has_key)

        console.print(table)
        console.print()

    @main.command("remove-server")
    @click.argument("name")
    @pass_cli
    @handle_errors
    def remove_server(cli: CliContext, name):
        """Remove a registered server."""
        if not cli.registry.remove(name):
            console.print(f"\n  [yellow]No such server:[/] {name}\n")
            sys.exit(1)
        console.print(f"\n  [green]Removed server:[/] {name}\n")
