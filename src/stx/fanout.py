"""
Run one read operation against many servers at once.

Every target gets exactly one ``TargetResult``: the operation's return
value, or the error it raised. One failing server never stops or alters
the others, and the call returns only after all of them are done.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

from .api import DEFAULT_TIMEOUT, SyncthingClient
from .models import Target

logger = logging.getLogger("stx.fanout")

T = TypeVar("T")

ClientFactory = Callable[[Target], SyncthingClient]


@dataclass
class TargetResult(Generic[T]):
    """Outcome of an operation on one target: ``payload`` or ``error``."""

    target: Target
    payload: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def default_client_factory(timeout: float = DEFAULT_TIMEOUT) -> ClientFactory:
    def make(target: Target) -> SyncthingClient:
        return SyncthingClient(target.url, target.api_key, timeout=timeout)

    return make


def run_all(calls: Sequence[Callable[[], T]], max_workers: int = 8) -> list[T]:
    """Run independent callables concurrently and return their results in order.

    Exceptions propagate from the first failing callable, after all of
    them have finished.
    """
    if not calls:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(calls)))) as pool:
        futures = [pool.submit(call) for call in calls]
        return [f.result() for f in futures]


def fan_out(
    targets: Sequence[Target],
    op: Callable[[SyncthingClient], T],
    client_factory: Optional[ClientFactory] = None,
    max_workers: int = 8,
) -> list[TargetResult[T]]:
    """Apply ``op`` to a client for every target concurrently.

    Args:
        targets: Servers to query. Names are expected to be unique.
        op: Per-target operation, called with that target's client.
        client_factory: Builds a client for a target.
        max_workers: Upper bound on concurrent requests.

    Returns:
        list[TargetResult]: One entry per target, in the order given.
    """
    make_client = client_factory or default_client_factory()

    def run_one(target: Target) -> TargetResult[T]:
        try:
            return TargetResult(target=target, payload=op(make_client(target)))
        except Exception as exc:
            logger.warning("%s: %s", target.name, exc)
            return TargetResult(target=target, error=str(exc))

    return run_all([lambda t=t: run_one(t) for t in targets], max_workers=max_workers)
