"""
Discovery of the local Syncthing daemon's API key.

Syncthing keeps its GUI API key in ``config.xml`` under ``<gui><apikey>``.
The file lives in a different place per platform; the first existing
candidate wins.
"""

from __future__ import annotations

import logging
import os
import platform
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError

logger = logging.getLogger("stx.local")


def candidate_config_files() -> list[Path]:
    """Return where the local Syncthing config.xml may live, most likely first."""
    home = Path.home()
    system = platform.system()
    if system == "Darwin":
        return [home / "Library" / "Application Support" / "Syncthing" / "config.xml"]
    if system == "Windows":
        local_app = os.environ.get("LOCALAPPDATA", str(home / "AppData" / "Local"))
        return [Path(local_app) / "Syncthing" / "config.xml"]

    # Syncthing >= 1.27 moved state to XDG_STATE_HOME; older installs use XDG_CONFIG_HOME.
    state = Path(os.environ.get("XDG_STATE_HOME", str(home / ".local" / "state")))
    config = Path(os.environ.get("XDG_CONFIG_HOME", str(home / ".config")))
    return [state / "syncthing" / "config.xml", config / "syncthing" / "config.xml"]


def read_local_api_key(config_file: Optional[Path] = None) -> str:
    """Read the API key of the Syncthing running on this machine.

    Args:
        config_file: Explicit config.xml path. Defaults to the platform location.

    Returns:
        str: The API key.

    Raises:
        ConfigurationError: If no config.xml is found or it has no API key.
    """
    if config_file is not None:
        candidates = [Path(config_file)]
    else:
        candidates = candidate_config_files()

    path = next((p for p in candidates if p.exists()), None)
    if path is None:
        searched = ", ".join(str(p) for p in candidates)
        raise ConfigurationError(f"Local Syncthing config.xml not found (searched: {searched})")

    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc

    api_key = (root.findtext("./gui/apikey") or root.findtext(".//apikey") or "").strip()
    if not api_key:
        raise ConfigurationError(f"Could not find <apikey> in {path}")

    logger.debug("Read local API key from %s", path)
    return api_key
