"""
Render aggregated results as JSON or as the plain-text report.

Nothing here talks to a daemon or changes its input.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Iterable, Union

from pydantic import BaseModel

from .models import AggregatedErrors, AggregatedStatus, ClearResult, ServerEvents
from .redact import redact

MB = 1024 * 1024


def to_data(value: Union[BaseModel, Iterable[BaseModel]]) -> Any:
    """Plain JSON-able data, wire names kept, unset optionals dropped."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return [to_data(v) for v in value]


def to_json(value: Union[BaseModel, Iterable[BaseModel]]) -> str:
    return json.dumps(redact(to_data(value)), indent=2)


def short_id(device_id: str) -> str:
    return f"{device_id[:7]}..."


def format_uptime(seconds: int) -> str:
    """``3725`` -> ``"1h 2m"``."""
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def format_mb(num_bytes: int) -> str:
    return f"{num_bytes / MB:.1f} MB"


def format_time(stamp: str) -> str:
    """Daemon timestamps in local time; unparseable stamps are shown as-is."""
    try:
        parsed = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
    except ValueError:
        return stamp
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def _header(server: str, url: str) -> str:
    return f"=== {server} ({url}) ==="


def format_status_text(status: AggregatedStatus) -> str:
    lines: list[str] = []

    for s in status.servers:
        lines.append(_header(s.server, s.url))

        if s.error:
            lines.append(f"  ERROR: {s.error}")
            lines.append("")
            continue

        if s.system:
            lines.append(f"  Device ID: {short_id(s.system.device_id)}")
            lines.append(f"  Uptime: {format_uptime(s.system.uptime)}")

        if s.folders:
            lines.append("")
            lines.append("  Folders:")
            for f in s.folders:
                lines.append(f"    - {f.label} ({f.id}): {f.state}")
                lines.append(
                    f"      Global: {format_mb(f.global_bytes)}, Local: {format_mb(f.local_bytes)}"
                )
                if f.need_bytes > 0:
                    lines.append(f"      Need: {format_mb(f.need_bytes)}")
                if f.pull_errors > 0:
                    lines.append(f"      Pull Errors: {f.pull_errors}")

        if s.devices:
            lines.append("")
            lines.append("  Devices:")
            for d in s.devices:
                state = "connected" if d.connected else "disconnected"
                lines.append(f"    - {d.name} ({short_id(d.device_id)}): {state}")
                if d.connected and d.client_version:
                    lines.append(f"      Version: {d.client_version}")

        lines.append("")

    return "\n".join(lines)


def format_errors_text(data: AggregatedErrors) -> str:
    lines: list[str] = []

    for s in data.servers:
        lines.append(_header(s.server, s.url))

        if s.error:
            lines.append(f"  ERROR: {s.error}")
        elif not s.errors:
            lines.append("  No errors")
        else:
            for e in s.errors:
                lines.append(f"  [{format_time(e.when)}] {e.message}")
        lines.append("")

    return "\n".join(lines)


def format_clear_text(results: Iterable[ClearResult]) -> str:
    lines = []
    for r in results:
        if r.cleared:
            lines.append(f"{r.server}: errors cleared")
        else:
            lines.append(f"{r.server}: FAILED: {r.error}")
    return "\n".join(lines)


def format_events_text(data: ServerEvents) -> str:
    lines = [_header(data.server, data.url)]

    if data.error:
        lines.append(f"  ERROR: {data.error}")
        return "\n".join(lines)

    if not data.events:
        lines.append("  No events")
        return "\n".join(lines)

    for e in data.events:
        lines.append(f"  [{e.id}] {format_time(e.time)} - {e.type}")
        if e.data:
            lines.append(f"      {json.dumps(redact(e.data), sort_keys=True)}")

    return "\n".join(lines)
