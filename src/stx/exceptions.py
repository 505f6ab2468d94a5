"""Exception hierarchy shared by the client, orchestrator, and CLI."""

from __future__ import annotations

from typing import Optional


class StxError(Exception):
    """Base class for every error stx raises on purpose."""


class RemoteError(StxError):
    """A call to a Syncthing control API did not succeed."""


class TransportError(RemoteError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""

    def __init__(self, method: str, path: str, reason: str) -> None:
        self.method = method
        self.path = path
        self.reason = reason
        super().__init__(f"{method} {path} failed: {reason}")


class ApiError(RemoteError):
    """The daemon answered with a non-2xx status.

    Attributes:
        method: HTTP method of the failed call.
        path: Request path including the query string.
        status_code: HTTP status returned by the daemon.
        body: Raw response body, kept for diagnostics.
    """

    def __init__(
        self,
        method: str,
        path: str,
        status_code: Optional[int],
        body: str = "",
    ) -> None:
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body
        super().__init__(f"{method} {path} -> {status_code}: {body}")


class ConfigurationError(StxError):
    """Missing local credential, unknown server name, or unreadable settings."""


class ValidationError(StxError):
    """Input refused before any remote side effect."""
