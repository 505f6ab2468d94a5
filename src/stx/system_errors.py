"""Read or clear the system error log of one or many servers."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .fanout import ClientFactory, fan_out
from .models import AggregatedErrors, ClearResult, ServerErrors, Target

logger = logging.getLogger("stx.system_errors")


def fetch_all_servers_errors(
    targets: Sequence[Target],
    client_factory: Optional[ClientFactory] = None,
    max_workers: int = 8,
) -> AggregatedErrors:
    """Recorded errors of every target, one entry each."""
    results = fan_out(
        targets, lambda c: c.get_errors(), client_factory=client_factory, max_workers=max_workers
    )
    servers = []
    for r in results:
        if r.ok:
            servers.append(ServerErrors(server=r.target.name, url=r.target.url, errors=r.payload))
        else:
            servers.append(ServerErrors(server=r.target.name, url=r.target.url, error=r.error))
    return AggregatedErrors(servers=servers)


def fetch_server_errors(
    target: Target, client_factory: Optional[ClientFactory] = None
) -> ServerErrors:
    return fetch_all_servers_errors([target], client_factory).servers[0]


def clear_all_servers_errors(
    targets: Sequence[Target],
    client_factory: Optional[ClientFactory] = None,
    max_workers: int = 8,
) -> list[ClearResult]:
    """Clear the error log of every target; failures are reported per server."""
    results = fan_out(
        targets, lambda c: c.clear_errors(), client_factory=client_factory, max_workers=max_workers
    )
    cleared = [
        ClearResult(server=r.target.name, cleared=r.ok, error=r.error) for r in results
    ]
    logger.info("Cleared errors on %d/%d servers", sum(c.cleared for c in cleared), len(cleared))
    return cleared


def clear_server_errors(
    target: Target, client_factory: Optional[ClientFactory] = None
) -> ClearResult:
    return clear_all_servers_errors([target], client_factory)[0]
