from __future__ import annotations

from typing import Iterable, Optional, Tuple

from dockshift.core.models import DockSnapshot
from dockshift.trace.trace_emitter import TraceEmitter, emit

from . import commands
from .locator import DockToolLocator
from .parser import PINNED_SECTIONS, SECTION_MARKERS, parse_dock_list
from .runner import Runner


class DockReader:
    """
    locate -> `dockutil --list` -> parse.

    An empty snapshot is a valid answer; callers that need a non-empty
    baseline check for it themselves.
    """

    def __init__(
        self,
        runner: Runner,
        locator: DockToolLocator,
        *,
        sections: Iterable[str] = PINNED_SECTIONS,
        trace: Optional[TraceEmitter] = None,
    ):
        self._runner = runner
        self._locator = locator
        self._markers = tuple(sections)
        self._trace = trace

    @property
    def sections(self) -> Tuple[str, ...]:
        return tuple(SECTION_MARKERS[m] for m in self._markers if m in SECTION_MARKERS)

    def read_current(self) -> DockSnapshot:
        tool = self._locator.require()
        result = self._runner.run(tool, commands.list_args())
        snapshot = tuple(parse_dock_list(result.stdout, self._markers))
        emit(self._trace, "dock_read", data={"count": len(snapshot)})
        return snapshot
