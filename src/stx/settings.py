"""
User settings and the stx config directory.

The config directory holds ``servers.json`` (the credential registry)
and an optional ``config.yaml`` with defaults for the CLI:

    local_url: http://127.0.0.1:8384
    local_device_name: macbook
    ignore_template: python
    http_timeout: 15
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError as PydanticValidationError

from .exceptions import ConfigurationError

logger = logging.getLogger("stx.settings")

SETTINGS_FILE = "config.yaml"


class Settings(BaseModel):
    """Defaults applied when a CLI flag is not given.

    Attributes:
        local_url: Control API of the Syncthing running on this machine.
        local_device_name: Name the server gives this machine's device.
        server_device_name: Name this machine gives the server's device.
        ignore_template: Ignore template used by ``pair``.
        http_timeout: Client-side timeout in seconds for every API call.
        max_workers: Upper bound on concurrent requests during fan-out.
    """

    local_url: str = "http://127.0.0.1:8384"
    local_device_name: str = "local"
    server_device_name: str = "server"
    ignore_template: str = "nodepython"
    http_timeout: float = 30.0
    max_workers: int = 8


def config_dir() -> Path:
    """Resolve the stx config directory.

    ``STX_HOME`` wins, then ``$XDG_CONFIG_HOME/stx``, then ``~/.config/stx``.
    """
    home = os.environ.get("STX_HOME")
    if home:
        return Path(home).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "stx"
    return Path.home() / ".config" / "stx"


def load_settings(home: Optional[Path] = None) -> Settings:
    """Load ``config.yaml`` from the config directory.

    Args:
        home: Override the config directory.

    Returns:
        Settings: Parsed settings, or defaults when the file is absent.

    Raises:
        ConfigurationError: If the file is not valid YAML or has bad values.
    """
    path = (home or config_dir()) / SETTINGS_FILE
    if not path.exists():
        return Settings()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")

    try:
        settings = Settings.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {path}: {exc}") from exc

    logger.debug("Loaded settings from %s", path)
    return settings
