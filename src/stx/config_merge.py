"""
Non-destructive edits of a daemon config document.

Both upserts return a new ``DaemonConfig`` and leave their input alone.
Everything not owned by pairing (other devices, other folders, options,
gui, unknown keys) passes through untouched. Neither function validates
values; the daemon rejects bad ones on ``put_config``.
"""

from __future__ import annotations

from typing import Iterable

from .models import DaemonConfig, Device, Folder, FolderDevice

# Folder fields overwritten when pairing re-applies an existing folder.
PAIRING_OWNED_FIELDS = (
    "label",
    "path",
    "type",
    "rescan_interval_s",
    "fs_watcher_enabled",
)


def upsert_device(cfg: DaemonConfig, device_id: str, name: str) -> DaemonConfig:
    """Add a device entry unless one with ``device_id`` already exists.

    An existing entry is never renamed or re-addressed.

    Args:
        cfg: Config to start from.
        device_id: Opaque device ID reported by the peer daemon.
        name: Display name for a newly added device.

    Returns:
        DaemonConfig: The updated copy.
    """
    out = cfg.model_copy(deep=True)
    if any(d.device_id == device_id for d in out.devices):
        return out

    device = Device(
        device_id=device_id,
        name=name,
        addresses=["dynamic"],
        compression="metadata",
        introduced_by="",
    )
    # Reassign so the collection counts as set even if the daemon sent none.
    out.devices = [*out.devices, device]
    return out


def merge_devices(
    existing: Iterable[FolderDevice], incoming: Iterable[FolderDevice]
) -> list[FolderDevice]:
    """Union of two folder device lists keyed by device ID, first seen wins."""
    out = [d.model_copy(deep=True) for d in existing]
    seen = {d.device_id for d in out}
    for d in incoming:
        if d.device_id not in seen:
            out.append(d.model_copy(deep=True))
            seen.add(d.device_id)
    return out


def upsert_folder(cfg: DaemonConfig, folder: Folder) -> DaemonConfig:
    """Add ``folder`` or re-apply it over the existing entry with the same id.

    On an existing folder the pairing-owned scalars take the new values,
    the device list becomes the union of both, and every other key of
    the existing folder is kept.

    Args:
        cfg: Config to start from.
        folder: Desired folder entry.

    Returns:
        DaemonConfig: The updated copy.
    """
    out = cfg.model_copy(deep=True)

    for i, existing in enumerate(out.folders):
        if existing.id != folder.id:
            continue
        for field in PAIRING_OWNED_FIELDS:
            setattr(existing, field, getattr(folder, field))
        existing.devices = merge_devices(existing.devices, folder.devices)
        folders = list(out.folders)
        folders[i] = existing
        out.folders = folders
        return out

    out.folders = [*out.folders, folder.model_copy(deep=True)]
    return out
