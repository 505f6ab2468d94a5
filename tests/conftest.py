"""Shared test fixtures for stx."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Optional

import pytest

from stx.exceptions import ApiError
from stx.models import (
    Connections,
    DaemonConfig,
    Event,
    FolderStatus,
    SystemErrorEntry,
    SystemStatus,
    Target,
    dump_config,
    load_config,
)


class FakeSyncthing:
    """In-memory stand-in for ``SyncthingClient``.

    ``fail`` maps a method name to the exception that method raises.
    Every config written with ``put_config`` is kept in ``put_configs``
    as wire-form dicts, exactly what the daemon would receive.
    """

    def __init__(
        self,
        base_url: str,
        device_id: str = "DEVICE",
        config: Optional[dict[str, Any]] = None,
        fail: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.base_url = base_url
        self.device_id = device_id
        self.config = config if config is not None else {"version": 37, "devices": [], "folders": []}
        self.fail = fail or {}
        self.put_configs: list[dict[str, Any]] = []
        self.ignores: dict[str, list[str]] = {}
        self.restarts = 0
        self.folder_status: dict[str, dict[str, Any]] = {}
        self.connections: dict[str, Any] = {"connections": {}}
        self.errors: list[dict[str, str]] = []
        self.events: list[dict[str, Any]] = []
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def _call(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)
        if name in self.fail:
            raise self.fail[name]

    def get_device_id(self) -> str:
        self._call("get_device_id")
        return self.device_id

    def get_config(self) -> DaemonConfig:
        self._call("get_config")
        return load_config(self.config)

    def put_config(self, cfg: DaemonConfig) -> None:
        self._call("put_config")
        self.config = dump_config(cfg)
        self.put_configs.append(self.config)

    def set_ignores(self, folder_id: str, lines: list[str]) -> None:
        self._call("set_ignores")
        self.ignores[folder_id] = list(lines)

    def restart(self) -> None:
        self._call("restart")
        self.restarts += 1

    def get_system_status(self) -> SystemStatus:
        self._call("get_system_status")
        return SystemStatus.model_validate(
            {"myID": self.device_id, "uptime": 3720, "startTime": "2024-01-01T00:00:00Z"}
        )

    def get_connections(self) -> Connections:
        self._call("get_connections")
        return Connections.model_validate(self.connections)

    def get_folder_status(self, folder_id: str) -> FolderStatus:
        self._call("get_folder_status")
        if folder_id not in self.folder_status:
            raise ApiError("GET", f"/rest/db/status?folder={folder_id}", 404, "no such folder")
        return FolderStatus.model_validate(self.folder_status[folder_id])

    def get_errors(self) -> list[SystemErrorEntry]:
        self._call("get_errors")
        return [SystemErrorEntry.model_validate(e) for e in self.errors]

    def clear_errors(self) -> None:
        self._call("clear_errors")
        self.errors = []

    def get_events(self, since=None, limit=None, types=None, timeout=None) -> list[Event]:
        self._call("get_events")
        events = [e for e in self.events if since is None or e["id"] > since]
        if types:
            events = [e for e in events if e["type"] in types]
        if limit is not None:
            events = events[-limit:]
        return [Event.model_validate(e) for e in events]


@pytest.fixture
def stx_home(tmp_path: Path) -> Path:
    """Provide a temporary stx config directory."""
    home = tmp_path / "stx"
    home.mkdir()
    return home


@pytest.fixture
def fakes() -> dict[str, FakeSyncthing]:
    """Fake daemons keyed by URL; register with ``fakes[url] = FakeSyncthing(url, ...)``."""
    return {}


@pytest.fixture
def factory(fakes):
    """Client factory that hands out the fake registered for a target's URL."""

    def make(target: Target) -> FakeSyncthing:
        return fakes[target.url]

    return make


@pytest.fixture
def fake_cls():
    return FakeSyncthing
