"""
Status aggregation across servers.

For each server the system status, connections, and config are read in
parallel, then every configured folder's status is read in parallel.
A folder whose status cannot be read is logged and left out of the
report rather than failing the whole server.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from .api import SyncthingClient
from .exceptions import RemoteError
from .fanout import ClientFactory, TargetResult, fan_out, run_all
from .models import (
    AggregatedStatus,
    DeviceInfo,
    Folder,
    FolderInfo,
    ServerStatus,
    SystemInfo,
    Target,
)

logger = logging.getLogger("stx.status")


def _folder_info(client: SyncthingClient, folder: Folder) -> Optional[FolderInfo]:
    try:
        st = client.get_folder_status(folder.id)
    except (RemoteError, PydanticValidationError) as exc:
        logger.warning("Skipping folder %s on %s: %s", folder.id, client.base_url, exc)
        return None
    return FolderInfo(
        id=folder.id,
        label=folder.label,
        state=st.state,
        global_bytes=st.global_bytes,
        local_bytes=st.local_bytes,
        need_bytes=st.need_bytes,
        pull_errors=st.pull_errors,
    )


def collect_status(client: SyncthingClient, max_workers: int = 8) -> ServerStatus:
    """Build the status report of one server.

    ``server`` and ``url`` are left blank for the caller to fill in.

    Raises:
        RemoteError: If system status, connections, or config cannot be read.
    """
    system, connections, config = run_all(
        [client.get_system_status, client.get_connections, client.get_config],
        max_workers=3,
    )

    folder_infos = run_all(
        [lambda f=f: _folder_info(client, f) for f in config.folders],
        max_workers=max_workers,
    )
    folders = [f for f in folder_infos if f is not None]

    devices = []
    for d in config.devices:
        if d.device_id == system.my_id:
            continue
        conn = connections.connections.get(d.device_id)
        devices.append(
            DeviceInfo(
                device_id=d.device_id,
                name=d.name,
                connected=conn.connected if conn else False,
                address=conn.address if conn else None,
                client_version=conn.client_version if conn else None,
                in_bytes_total=conn.in_bytes_total if conn else None,
                out_bytes_total=conn.out_bytes_total if conn else None,
            )
        )

    return ServerStatus(
        server="",
        url=client.base_url,
        system=SystemInfo(
            device_id=system.my_id,
            uptime=system.uptime,
            start_time=system.start_time,
        ),
        folders=folders,
        devices=devices,
    )


def _to_server_status(result: TargetResult[ServerStatus]) -> ServerStatus:
    t = result.target
    if not result.ok:
        return ServerStatus(server=t.name, url=t.url, error=result.error)
    return result.payload.model_copy(update={"server": t.name, "url": t.url})


def fetch_server_status(
    target: Target,
    client_factory: Optional[ClientFactory] = None,
    max_workers: int = 8,
) -> ServerStatus:
    """Status of a single server; failures are reported in ``error``."""
    return fetch_all_servers_status([target], client_factory, max_workers).servers[0]


def fetch_all_servers_status(
    targets: Sequence[Target],
    client_factory: Optional[ClientFactory] = None,
    max_workers: int = 8,
) -> AggregatedStatus:
    """Status of every target, one entry each, queried concurrently."""
    results = fan_out(
        targets,
        lambda c: collect_status(c, max_workers=max_workers),
        client_factory=client_factory,
        max_workers=max_workers,
    )
    return AggregatedStatus(servers=[_to_server_status(r) for r in results])
