"""Read the event stream of a single server."""

from __future__ import annotations

from typing import Optional, Sequence

from .fanout import ClientFactory, fan_out
from .models import ServerEvents, Target

# Seconds the daemon may hold the long-poll open before answering.
EVENTS_POLL_TIMEOUT = 1


def fetch_server_events(
    target: Target,
    since: Optional[int] = None,
    limit: Optional[int] = None,
    types: Optional[Sequence[str]] = None,
    client_factory: Optional[ClientFactory] = None,
) -> ServerEvents:
    """Events of ``target`` newer than ``since``; failures are reported in ``error``.

    Args:
        target: Server to query.
        since: Exclusive lower bound on event ID.
        limit: Maximum number of events.
        types: Event types to keep, e.g. ``["FolderSummary", "StateChanged"]``.
        client_factory: Builds the client for ``target``.
    """
    result = fan_out(
        [target],
        lambda c: c.get_events(
            since=since, limit=limit, types=types, timeout=EVENTS_POLL_TIMEOUT
        ),
        client_factory=client_factory,
    )[0]
    if not result.ok:
        return ServerEvents(server=target.name, url=target.url, error=result.error)
    return ServerEvents(server=target.name, url=target.url, events=result.payload)
