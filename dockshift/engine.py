from __future__ import annotations

from typing import List, Optional

from dockshift.config import Settings
from dockshift.core.models import ApplyResult, DockSnapshot, TargetList
from dockshift.dock.locator import DockToolLocator
from dockshift.dock.parser import PINNED_SECTIONS
from dockshift.dock.reader import DockReader
from dockshift.dock.runner import CommandRunner, Runner
from dockshift.dock.writer import DockWriter
from dockshift.trace.trace_emitter import TraceEmitter


class ReconciliationEngine:
    """
    The two Dock operations the rest of the application needs.

    Holds no state between calls. The Dock has no locking of its own, so
    callers must not run apply_profile() concurrently.
    """

    def __init__(self, reader: DockReader, writer: DockWriter):
        self._reader = reader
        self._writer = writer

    def capture_current(self) -> DockSnapshot:
        return self._reader.read_current()

    def apply_profile(self, target: TargetList) -> ApplyResult:
        return self._writer.apply(target)

    def plan_profile(self, target: TargetList) -> List[List[str]]:
        return self._writer.plan(target)


def build_engine(
    settings: Settings,
    *,
    runner: Optional[Runner] = None,
    trace: Optional[TraceEmitter] = None,
) -> ReconciliationEngine:
    """
    Wire one engine per process from settings.
    """
    runner = runner if runner is not None else CommandRunner(timeout_s=settings.command_timeout_s)
    locator = DockToolLocator(runner, candidates=settings.candidate_paths, override=settings.dockutil_path)
    sections = PINNED_SECTIONS + (("persistentOthers",) if settings.include_others else ())
    reader = DockReader(runner, locator, sections=sections, trace=trace)
    writer = DockWriter(
        runner,
        locator,
        reader,
        add_delay_s=settings.add_delay_s,
        restart_policy=settings.restart_policy,
        trace=trace,
    )
    return ReconciliationEngine(reader, writer)
