"""
Typed binding to one Syncthing daemon's REST control API.

Each method is a single request/response with no retry. Any transport
failure raises ``TransportError``; any non-2xx answer raises ``ApiError``.
``put_config`` replaces the whole document, so callers must always
read-modify-write through ``get_config`` first.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence
from urllib.parse import quote, urlencode

import requests

from .exceptions import ApiError, TransportError
from .models import (
    Connections,
    DaemonConfig,
    Event,
    FolderStatus,
    SystemErrorEntry,
    SystemStatus,
    dump_config,
    load_config,
)

logger = logging.getLogger("stx.api")

DEFAULT_TIMEOUT = 30.0


class SyncthingClient:
    """HTTP client for a single Syncthing instance.

    Args:
        base_url: Daemon GUI/API address, e.g. ``http://100.64.0.3:8384``.
        api_key: Value for the ``X-API-Key`` header. Omitted when empty.
        timeout: Client-side timeout in seconds for every call.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url[:-1] if base_url.endswith("/") else base_url
        self.api_key = api_key
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"SyncthingClient({self.base_url!r})"

    def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        auth: bool = True,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        if auth and self.api_key:
            headers["X-API-Key"] = self.api_key

        kwargs: dict[str, Any] = {"headers": headers, "timeout": timeout or self.timeout}
        if body is not None:
            kwargs["json"] = body

        logger.debug("%s %s", method, url)
        try:
            resp = requests.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(method, path, str(exc)) from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            raise ApiError(method, path, resp.status_code, resp.text)
        return resp

    def _json(self, method: str, path: str, body: Any = None, **kwargs: Any) -> Any:
        resp = self._request(method, path, body=body, **kwargs)
        if not resp.text:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(method, path, resp.status_code, resp.text) from exc

    # -- identity / config ---------------------------------------------------

    def get_device_id(self) -> str:
        """Return the daemon's device ID (unauthenticated endpoint)."""
        resp = self._request("GET", "/rest/noauth/deviceid", auth=False)
        return resp.text.strip()

    def get_config(self) -> DaemonConfig:
        return load_config(self._json("GET", "/rest/system/config"))

    def put_config(self, cfg: DaemonConfig) -> None:
        """Replace the daemon's full config document."""
        self._json("PUT", "/rest/system/config", dump_config(cfg))

    def restart(self) -> None:
        self._json("POST", "/rest/system/restart")

    def set_ignores(self, folder_id: str, lines: Sequence[str]) -> None:
        """Replace the ``.stignore`` patterns of a folder."""
        self._json(
            "POST",
            f"/rest/db/ignores?folder={quote(folder_id, safe='')}",
            {"ignore": list(lines)},
        )

    # -- read-only snapshots -------------------------------------------------

    def get_system_status(self) -> SystemStatus:
        return SystemStatus.model_validate(self._json("GET", "/rest/system/status"))

    def get_connections(self) -> Connections:
        return Connections.model_validate(
            self._json("GET", "/rest/system/connections") or {}
        )

    def get_folder_status(self, folder_id: str) -> FolderStatus:
        return FolderStatus.model_validate(
            self._json("GET", f"/rest/db/status?folder={quote(folder_id, safe='')}")
        )

    # -- errors / events -----------------------------------------------------

    def get_errors(self) -> list[SystemErrorEntry]:
        """Return the daemon's recorded system errors, oldest first."""
        data = self._json("GET", "/rest/system/error") or {}
        return [SystemErrorEntry.model_validate(e) for e in data.get("errors") or []]

    def clear_errors(self) -> None:
        self._json("POST", "/rest/system/error/clear")

    def get_events(
        self,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        types: Optional[Sequence[str]] = None,
        timeout: Optional[int] = None,
    ) -> list[Event]:
        """Fetch events with ``id`` greater than ``since``.

        Args:
            since: Exclusive lower bound on event ID.
            limit: Maximum number of events to return.
            types: Event type names to filter on.
            timeout: Seconds the daemon may hold the long-poll open.

        Returns:
            list[Event]: Events in ascending ``id`` order.
        """
        params: dict[str, Any] = {}
        if since is not None:
            params["since"] = since
        if limit is not None:
            params["limit"] = limit
        if types:
            params["events"] = ",".join(types)
        if timeout is not None:
            params["timeout"] = timeout

        path = "/rest/events"
        if params:
            path = f"{path}?{urlencode(params, safe=',')}"

        # The long-poll may legitimately hold the request for `timeout` seconds.
        client_timeout = self.timeout + (timeout or 0)
        data = self._json("GET", path, timeout=client_timeout) or []
        return [Event.model_validate(e) for e in data]
