"""
Registry of named Syncthing servers and their API keys.

Stored at ``<config dir>/servers.json``:

    {
      "version": 1,
      "servers": {
        "safe-101": {"url": "http://100.64.0.7:8384", "apiKey": "..."}
      }
    }

The file holds secrets, so it is written with owner-only permissions.
Files from before the ``version`` field existed are migrated on read.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .models import Target
from .redact import redact
from .settings import config_dir

logger = logging.getLogger("stx.registry")

REGISTRY_FILE = "servers.json"
REGISTRY_VERSION = 1


class ServerEntry(BaseModel):
    """Connection details of one registered server."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    api_key: str = Field(default="", alias="apiKey")


class RegistryFile(BaseModel):
    version: int = REGISTRY_VERSION
    servers: dict[str, ServerEntry] = Field(default_factory=dict)


class ServerRegistry:
    """Read and write the server registry in a config directory.

    Args:
        home: Override the config directory (defaults to ``config_dir()``).
    """

    def __init__(self, home: Optional[Path] = None) -> None:
        self.home = Path(home) if home else config_dir()
        self.path = self.home / REGISTRY_FILE

    def load(self) -> RegistryFile:
        if not self.path.exists():
            return RegistryFile()

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid registry JSON in {self.path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigurationError(f"{self.path} must contain a JSON object")

        if not raw.get("version"):
            logger.info("Migrating legacy registry at %s", self.path)
            raw = {"version": REGISTRY_VERSION, "servers": raw.get("servers") or {}}
        try:
            return RegistryFile.model_validate(raw)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid registry in {self.path}: {exc}") from exc

    def save(self, data: RegistryFile) -> None:
        payload = json.dumps(data.model_dump(by_alias=True), indent=2)
        try:
            self.home.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            # Reason: O_CREAT mode is ignored when the file already existed
            os.chmod(self.path, 0o600)
        except OSError as exc:
            raise ConfigurationError(f"Cannot write {self.path}: {exc}") from exc

    def list_names(self) -> list[str]:
        return sorted(self.load().servers)

    def resolve(self, name: str) -> Target:
        """Return the target registered as ``name``.

        Raises:
            ConfigurationError: If no server has that name.
        """
        entry = self.load().servers.get(name)
        if entry is None:
            raise ConfigurationError(f"Unknown server: {name}. Use: stx add-server ...")
        return Target(name=name, url=entry.url, api_key=entry.api_key)

    def resolve_many(self, names: Optional[Iterable[str]] = None) -> list[Target]:
        """Resolve each of ``names`` once, in order; every server when ``names`` is None."""
        data = self.load()
        if names is None:
            names = sorted(data.servers)

        targets = []
        for name in dict.fromkeys(names):
            entry = data.servers.get(name)
            if entry is None:
                raise ConfigurationError(f"Unknown server: {name}. Use: stx add-server ...")
            targets.append(Target(name=name, url=entry.url, api_key=entry.api_key))
        return targets

    def upsert(self, name: str, entry: ServerEntry) -> None:
        data = self.load()
        data.servers[name] = entry
        self.save(data)
        logger.info("Saved server %s: %s", name, redact(entry))

    def remove(self, name: str) -> bool:
        """Remove ``name``. Returns False if it was not registered."""
        data = self.load()
        if name not in data.servers:
            return False
        del data.servers[name]
        self.save(data)
        logger.info("Removed server %s", name)
        return True
