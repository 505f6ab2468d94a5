"""Observability commands: status, errors, events."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

import click

from ._common import CliContext, console, handle_errors, pass_cli, split_csv
from ..fanout import default_client_factory
from ..models import Target
from ..events import fetch_server_events
from ..presenters import (
    format_clear_text,
    format_errors_text,
    format_events_text,
    format_status_text,
    to_json,
)
from ..status import fetch_all_servers_status
from ..system_errors import clear_all_servers_errors, fetch_all_servers_errors


def _select_targets(cli: CliContext, names: Sequence[str], all_servers: bool) -> list[Target]:
    """Named servers, or every registered server with --all or no --server."""
    if all_servers or not names:
        targets = cli.registry.resolve_many()
        if not targets:
            console.print("\n  [yellow]No servers registered.[/] Use: stx add-server ...\n")
            sys.exit(1)
        return targets
    return cli.registry.resolve_many(names)


def register_monitor_commands(main: click.Group) -> None:
    """Register status, errors, and events."""

    @main.command()
    @click.option("--server", "names", multiple=True, help="Server name (repeatable).")
    @click.option("--all", "all_servers", is_flag=True, help="Query all servers.")
    @click.option("--json", "json_out", is_flag=True, help="Output as JSON.")
    @pass_cli
    @handle_errors
    def status(cli: CliContext, names, all_servers, json_out):
        """Query Syncthing status across servers."""
        settings = cli.settings
        targets = _select_targets(cli, names, all_servers)
        result = fetch_all_servers_status(
            targets,
            client_factory=default_client_factory(settings.http_timeout),
            max_workers=settings.max_workers,
        )
        click.echo(to_json(result) if json_out else format_status_text(result))

    @main.command()
    @click.option("--server", "names", multiple=True, help="Server name (repeatable).")
    @click.option("--all", "all_servers", is_flag=True, help="Query all servers.")
    @click.option("--json", "json_out", is_flag=True, help="Output as JSON.")
    @click.option("--clear", is_flag=True, help="Clear the error log instead of showing it.")
    @pass_cli
    @handle_errors
    def errors(cli: CliContext, names, all_servers, json_out, clear):
        """View or clear Syncthing errors across servers."""
        settings = cli.settings
        targets = _select_targets(cli, names, all_servers)
        factory = default_client_factory(settings.http_timeout)

        if clear:
            cleared = clear_all_servers_errors(targets, factory, settings.max_workers)
            click.echo(to_json(cleared) if json_out else format_clear_text(cleared))
            return

        result = fetch_all_servers_errors(targets, factory, settings.max_workers)
        click.echo(to_json(result) if json_out else format_errors_text(result))

    @main.command()
    @click.option("--server", "name", required=True, help="Server name.")
    @click.option("--types", default=None, help="Comma-separated event types.")
    @click.option("--since", type=int, default=None, help="Only events after this ID.")
    @click.option("--limit", type=int, default=None, help="Max events.")
    @click.option("--json", "json_out", is_flag=True, help="Output as JSON.")
    @pass_cli
    @handle_errors
    def events(cli: CliContext, name, types: Optional[str], since, limit, json_out):
        """View recent Syncthing events of one server."""
        target = cli.registry.resolve(name)
        result = fetch_server_events(
            target,
            since=since,
            limit=limit,
            types=split_csv(types),
            client_factory=default_client_factory(cli.settings.http_timeout),
        )
        click.echo(to_json(result) if json_out else format_events_text(result))
