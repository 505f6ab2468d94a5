"""
Pydantic models for everything stx reads from or writes to a daemon.

The Syncthing config document is only partly known here. ``DaemonConfig``
names the two collections pairing touches (devices, folders) and keeps
every other key as an extra field so a read-modify-write never drops
daemon-managed settings. Dump it with ``dump_config`` rather than a bare
``model_dump`` so unset defaults are not injected into the document.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    """Base for daemon documents: camelCase on the wire, unknown keys kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class FolderDevice(_WireModel):
    """A device participating in a folder."""

    device_id: str = Field(alias="deviceID")


class Device(_WireModel):
    """A peer daemon as known to this daemon."""

    device_id: str = Field(alias="deviceID")
    name: str = ""
    addresses: list[str] = Field(default_factory=lambda: ["dynamic"])
    compression: str = "metadata"
    introduced_by: str = Field(default="", alias="introducedBy")


class Folder(_WireModel):
    """A shared folder entry of a daemon config."""

    id: str
    label: str = ""
    path: str = ""
    type: str = "sendreceive"
    devices: list[FolderDevice] = Field(default_factory=list)
    rescan_interval_s: int = Field(default=3600, alias="rescanIntervalS")
    fs_watcher_enabled: bool = Field(default=True, alias="fsWatcherEnabled")


class DaemonConfig(_WireModel):
    """The full ``/rest/system/config`` document."""

    devices: list[Device] = Field(default_factory=list)
    folders: list[Folder] = Field(default_factory=list)


def load_config(document: Optional[dict[str, Any]]) -> DaemonConfig:
    """Parse a raw config document returned by the daemon."""
    return DaemonConfig.model_validate(document or {})


def dump_config(cfg: DaemonConfig) -> dict[str, Any]:
    """Serialize a config back to the daemon's wire form.

    Only keys that were present in the original document or assigned
    since are emitted, so the daemon receives back exactly what it sent
    plus the pairing changes.
    """
    return cfg.model_dump(by_alias=True, exclude_unset=True)


class Target(BaseModel):
    """One registered daemon, resolved for a single operation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    url: str
    api_key: str = Field(default="", alias="apiKey")


# ---------------------------------------------------------------------------
# Read-only snapshots returned by the control API
# ---------------------------------------------------------------------------


class SystemStatus(_WireModel):
    """``/rest/system/status``."""

    my_id: str = Field(alias="myID")
    uptime: int = 0
    start_time: str = Field(default="", alias="startTime")


class ConnectionInfo(_WireModel):
    """One entry of ``/rest/system/connections``."""

    address: str = ""
    client_version: str = Field(default="", alias="clientVersion")
    connected: bool = False
    paused: bool = False
    in_bytes_total: int = Field(default=0, alias="inBytesTotal")
    out_bytes_total: int = Field(default=0, alias="outBytesTotal")
    type: str = ""


class Connections(_WireModel):
    """``/rest/system/connections``."""

    connections: dict[str, ConnectionInfo] = Field(default_factory=dict)


class FolderStatus(_WireModel):
    """``/rest/db/status``."""

    state: str = ""
    global_bytes: int = Field(default=0, alias="globalBytes")
    local_bytes: int = Field(default=0, alias="localBytes")
    need_bytes: int = Field(default=0, alias="needBytes")
    pull_errors: int = Field(default=0, alias="pullErrors")


class SystemErrorEntry(_WireModel):
    """One entry of ``/rest/system/error``."""

    when: str
    message: str


class Event(_WireModel):
    """One entry of ``/rest/events``."""

    id: int
    global_id: int = Field(default=0, alias="globalID")
    time: str = ""
    type: str = ""
    data: Any = None


# ---------------------------------------------------------------------------
# Aggregated per-target results
# ---------------------------------------------------------------------------


class _ReportModel(BaseModel):
    """Base for aggregated results: camelCase keys in JSON output."""

    model_config = ConfigDict(populate_by_name=True)


class SystemInfo(_ReportModel):
    """Identity and uptime of a queried server."""

    device_id: str = Field(alias="deviceID")
    uptime: int
    start_time: str = Field(alias="startTime")


class FolderInfo(_ReportModel):
    """Folder line of a status report."""

    id: str
    label: str
    state: str
    global_bytes: int = Field(alias="globalBytes")
    local_bytes: int = Field(alias="localBytes")
    need_bytes: int = Field(alias="needBytes")
    pull_errors: int = Field(alias="pullErrors")


class DeviceInfo(_ReportModel):
    """Peer device line of a status report."""

    device_id: str = Field(alias="deviceID")
    name: str
    connected: bool
    address: Optional[str] = None
    client_version: Optional[str] = Field(default=None, alias="clientVersion")
    in_bytes_total: Optional[int] = Field(default=None, alias="inBytesTotal")
    out_bytes_total: Optional[int] = Field(default=None, alias="outBytesTotal")


class ServerStatus(BaseModel):
    """Status of one server: either the payload fields or ``error``."""

    server: str
    url: str
    error: Optional[str] = None
    system: Optional[SystemInfo] = None
    folders: Optional[list[FolderInfo]] = None
    devices: Optional[list[DeviceInfo]] = None


class AggregatedStatus(BaseModel):
    servers: list[ServerStatus] = Field(default_factory=list)


class ServerErrors(BaseModel):
    """System errors of one server, or the reason they could not be read."""

    server: str
    url: str
    error: Optional[str] = None
    errors: Optional[list[SystemErrorEntry]] = None


class AggregatedErrors(BaseModel):
    servers: list[ServerErrors] = Field(default_factory=list)


class ClearResult(BaseModel):
    """Outcome of ``clear_errors`` on one server."""

    server: str
    cleared: bool
    error: Optional[str] = None


class ServerEvents(BaseModel):
    """Events of one server, or the reason they could not be read."""

    server: str
    url: str
    error: Optional[str] = None
    events: Optional[list[Event]] = None
