from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from dockshift.core.models import ApplyResult, DockSnapshot, TargetList
from dockshift.engine import ReconciliationEngine


class BackgroundEngine:
    """
    Runs engine calls off the caller's thread.

    A single worker means submitted calls run one after another, never
    concurrently against the Dock.
    """

    def __init__(self, engine: ReconciliationEngine):
        self._engine = engine
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dockshift")

    def submit_capture(self) -> "Future[DockSnapshot]":
        return self._pool.submit(self._engine.capture_current)

    def submit_apply(self, target: TargetList) -> "Future[ApplyResult]":
        # Queued applies see the list as it was at submit time.
        return self._pool.submit(self._engine.apply_profile, tuple(target))

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundEngine":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.shutdown(wait=True)
