"""
Pair a folder between this machine's Syncthing and a server's Syncthing.

The server is the receive-only mirror and is configured before the
local side, which is the edit origin. A run is not rolled back; re-running
with the same folder ID converges.

Steps:
    1. Resolve the local daemon's API key.
    2. Read both device IDs (concurrently).
    3. Create the local folder (and the server folder over SSH if asked).
    4. Server config: add the local device, add/extend the folder (receive-only).
    5. Local config: add the server device, add/extend the folder (send-receive).
    6. Push ignore patterns to both (best effort).
    7. Restart both (best effort).
"""

from __future__ import annotations

import logging
import posixpath
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel

from .api import SyncthingClient
from .config_merge import upsert_device, upsert_folder
from .exceptions import ConfigurationError, RemoteError, ValidationError
from .fanout import ClientFactory, default_client_factory, run_all
from .ignores import default_ignore
from .local import read_local_api_key
from .models import Folder, FolderDevice, Target
from .redact import redact
from .settings import Settings
from .slug import generate_folder_id

logger = logging.getLogger("stx.pairing")


class FolderRole(str, Enum):
    """Syncthing folder types used by pairing."""

    SEND_RECEIVE = "sendreceive"
    RECEIVE_ONLY = "receiveonly"


@dataclass(frozen=True)
class PairingPolicy:
    """Fixed topology: the server mirrors, the local machine originates edits."""

    server_role: FolderRole = FolderRole.RECEIVE_ONLY
    local_role: FolderRole = FolderRole.SEND_RECEIVE
    rescan_interval_s: int = 3600
    fs_watcher_enabled: bool = True


MIRROR_TOPOLOGY = PairingPolicy()

# System directories never accepted as a server path.
DANGEROUS_PATHS = frozenset(
    {
        "/",
        "/bin",
        "/boot",
        "/dev",
        "/etc",
        "/home",
        "/lib",
        "/lib64",
        "/opt",
        "/proc",
        "/root",
        "/run",
        "/sbin",
        "/srv",
        "/sys",
        "/tmp",
        "/usr",
        "/var",
    }
)


class PairRequest(BaseModel):
    """Everything one ``pair`` invocation needs.

    Attributes:
        server: Registered server target.
        local: Local daemon target. An empty ``api_key`` means "discover it".
        folder_id: Shared folder ID; derived from ``label`` when empty.
        label: Folder label shown in both GUIs.
        local_path: Folder path on this machine.
        server_path: Folder path on the server.
        ignore_git: Also ignore ``.git``.
        ignore_template: Name of the ignore template.
        ssh_host: When set, create ``server_path`` over SSH before pairing.
    """

    server: Target
    local: Target
    folder_id: str = ""
    label: str
    local_path: str
    server_path: str
    ignore_git: bool = False
    ignore_template: str = "nodepython"
    ssh_host: Optional[str] = None

    def resolved_folder_id(self) -> str:
        return self.folder_id or generate_folder_id(self.label)


@dataclass
class StepFailure:
    """A best-effort step that failed on one side."""

    step: str
    target: str
    error: str


@dataclass
class PairResult:
    folder_id: str
    local_device_id: str
    server_device_id: str
    local_path: str
    server_path: str
    warnings: list[StepFailure] = field(default_factory=list)


def validate_server_path(path: str) -> str:
    """Refuse relative paths and well-known system directories.

    Returns:
        str: The normalized path.

    Raises:
        ValidationError: If the path is unsafe to create remotely.
    """
    if not path or not path.startswith("/"):
        raise ValidationError(f"Server path must be absolute: {path!r}")
    normalized = posixpath.normpath(path)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    if normalized in DANGEROUS_PATHS:
        raise ValidationError(f"Refusing to use system directory as server path: {normalized}")
    return normalized


def prepare_server_path(ssh_host: str, path: str, timeout: float = 30.0) -> None:
    """Create ``path`` on ``ssh_host`` with ``mkdir -p``.

    Raises:
        ValidationError: If the path is unsafe.
        RemoteError: If ssh fails or times out.
    """
    normalized = validate_server_path(path)
    cmd = ["ssh", ssh_host, "mkdir", "-p", "--", normalized]
    logger.info("Preparing %s:%s", ssh_host, normalized)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)
    except (subprocess.TimeoutExpired, FileNotFoundError) as exc:
        raise RemoteError(f"ssh {ssh_host} failed: {exc}") from exc
    if result.returncode != 0:
        raise RemoteError(
            f"ssh {ssh_host} mkdir -p {normalized} exited {result.returncode}: "
            f"{result.stderr.strip()}"
        )


class PairingOrchestrator:
    """Runs the pairing sequence for one request.

    Args:
        settings: Device names and HTTP timeout.
        client_factory: Builds a ``SyncthingClient`` for a target.
        policy: Folder roles for each side.
        local_key_reader: Returns the local daemon's API key.
        ssh_preparer: Creates the server path over SSH.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
        policy: PairingPolicy = MIRROR_TOPOLOGY,
        local_key_reader: Callable[[], str] = read_local_api_key,
        ssh_preparer: Callable[[str, str], None] = prepare_server_path,
    ) -> None:
        self.settings = settings or Settings()
        self.client_factory = client_factory or default_client_factory(self.settings.http_timeout)
        self.policy = policy
        self.local_key_reader = local_key_reader
        self.ssh_preparer = ssh_preparer

    def _folder(self, req: PairRequest, folder_id: str, path: str,
                role: FolderRole, peer_id: str) -> Folder:
        return Folder(
            id=folder_id,
            label=req.label,
            path=path,
            type=role.value,
            devices=[FolderDevice(device_id=peer_id)],
            rescan_interval_s=self.policy.rescan_interval_s,
            fs_watcher_enabled=self.policy.fs_watcher_enabled,
        )

    def _apply(self, client: SyncthingClient, peer_id: str, peer_name: str,
               folder: Folder) -> None:
        cfg = client.get_config()
        cfg = upsert_device(cfg, peer_id, peer_name)
        cfg = upsert_folder(cfg, folder)
        client.put_config(cfg)
        logger.info("Configured folder %s (%s) on %s", folder.id, folder.type, client.base_url)

    def _best_effort(self, step: str,
                     calls: list[tuple[str, Callable[[], None]]]) -> list[StepFailure]:
        def guarded(name: str, call: Callable[[], None]) -> Optional[StepFailure]:
            try:
                call()
            except RemoteError as exc:
                logger.warning("%s failed on %s: %s", step, name, exc)
                return StepFailure(step=step, target=name, error=str(exc))
            return None

        outcomes = run_all([lambda n=n, c=c: guarded(n, c) for n, c in calls])
        return [o for o in outcomes if o is not None]

    def run(self, req: PairRequest) -> PairResult:
        """Pair ``req.local_path`` with ``req.server_path``.

        Returns:
            PairResult: IDs used and any best-effort warnings.

        Raises:
            ConfigurationError: If the local API key cannot be found.
            ValidationError: If a path is unsafe or uncreatable, or the template unknown.
            RemoteError: If reading device IDs or writing either config fails.
        """
        logger.debug("Pair request: %s", redact(req))
        folder_id = req.resolved_folder_id()
        ignores = default_ignore(req.ignore_template, ignore_git=req.ignore_git)

        # 1) local credential
        local_target = req.local
        if not local_target.api_key:
            local_target = local_target.model_copy(update={"api_key": self.local_key_reader()})
            if not local_target.api_key:
                raise ConfigurationError("Local Syncthing API key is empty")

        local = self.client_factory(local_target)
        server = self.client_factory(req.server)

        # 2) device IDs
        local_id, server_id = run_all([local.get_device_id, server.get_device_id])
        logger.info("Local device %s, server device %s", local_id[:7], server_id[:7])

        # 3) folders on disk
        local_dir = Path(req.local_path).expanduser()
        try:
            local_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ValidationError(f"Cannot create {local_dir}: {exc}") from exc
        if req.ssh_host:
            self.ssh_preparer(req.ssh_host, req.server_path)

        # 4) server first: receive-only mirror of the local device
        self._apply(
            server, local_id, self.settings.local_device_name,
            self._folder(req, folder_id, req.server_path, self.policy.server_role, local_id),
        )

        # 5) local: send-receive origin shared with the server
        self._apply(
            local, server_id, self.settings.server_device_name,
            self._folder(req, folder_id, req.local_path, self.policy.local_role, server_id),
        )

        # 6) + 7) best effort
        warnings = self._best_effort("set-ignores", [
            (req.server.name, lambda: server.set_ignores(folder_id, ignores)),
            (local_target.name, lambda: local.set_ignores(folder_id, ignores)),
        ])
        warnings += self._best_effort("restart", [
            (req.server.name, server.restart),
            (local_target.name, local.restart),
        ])

        return PairResult(
            folder_id=folder_id,
            local_device_id=local_id,
            server_device_id=server_id,
            local_path=req.local_path,
            server_path=req.server_path,
            warnings=warnings,
        )


def pair_folder(req: PairRequest, settings: Optional[Settings] = None) -> PairResult:
    """Pair a folder with the default clients and local key discovery."""
    return PairingOrchestrator(settings=settings).run(req)
