"""Shared utilities for all CLI command modules.

Provides the Rich console, the per-invocation context object, and the
error handler that turns stx errors into a red message and exit code 1.
"""

from __future__ import annotations

import functools
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from ..exceptions import StxError
from ..registry import ServerRegistry
from ..settings import Settings, load_settings

console = Console()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class CliContext:
    """Per-invocation state, built once by the main group."""

    home: Optional[Path] = None
    _settings: Optional[Settings] = field(default=None, repr=False)

    @property
    def registry(self) -> ServerRegistry:
        return ServerRegistry(self.home)

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = load_settings(self.home)
        return self._settings


pass_cli = click.make_pass_decorator(CliContext, ensure=True)


def handle_errors(func):
    """Print ``StxError`` as a one-line message and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StxError as exc:
            console.print(f"\n  [red]Error:[/] {escape(str(exc))}\n", highlight=False)
            sys.exit(1)

    return wrapper


def split_csv(value: Optional[str]) -> Optional[list[str]]:
    """``"A, B,,C"`` -> ``["A", "B", "C"]``; empty input -> None."""
    if not value:
        return None
    items = [v.strip() for v in value.split(",") if v.strip()]
    return items or None
