from __future__ import annotations

import os
import time
from typing import Callable, List, Optional, Sequence, Tuple

from dockshift.core.errors import CommandFailed, DockshiftError
from dockshift.core.models import ApplyResult, DockEntry, EntryKind, TargetList
from dockshift.core.retry import RetryPolicy, poll_until
from dockshift.trace.trace_emitter import TraceEmitter, emit

from . import commands
from .locator import DockToolLocator
from .reader import DockReader
from .runner import Runner


def _path_exists(path: str) -> bool:
    return os.path.exists(os.path.expanduser(path))


def _error_text(e: Optional[Exception]) -> Optional[str]:
    if e is None:
        return None
    if isinstance(e, CommandFailed) and e.stderr.strip():
        return e.stderr.strip()
    if isinstance(e, DockshiftError):
        return e.message
    return str(e)


class DockWriter:
    """
    Converges the live Dock to a target list.

    Steps (strictly sequential, one process at a time):
    1. validate app/folder paths (missing ones are skipped, never added)
    2. clear all pinned items (the only failure that aborts after locate)
    3. add entries in caller order with a fixed delay between additions
    4. restart the Dock once, then poll `--list` until it answers
    5. re-read and compare counts (advisory only)

    The Dock offers no transaction, so the result is best-effort: per-entry
    problems land in ApplyResult.skipped_entries / warnings.
    """

    def __init__(
        self,
        runner: Runner,
        locator: DockToolLocator,
        reader: DockReader,
        *,
        add_delay_s: float = 0.05,
        restart_policy: RetryPolicy = RetryPolicy(),
        killall_path: str = commands.KILLALL_PATH,
        path_exists: Callable[[str], bool] = _path_exists,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        trace: Optional[TraceEmitter] = None,
    ):
        self._runner = runner
        self._locator = locator
        self._reader = reader
        self._add_delay_s = add_delay_s
        self._restart_policy = restart_policy
        self._killall_path = killall_path
        self._path_exists = path_exists
        self._sleep = sleep
        self._clock = clock
        self._trace = trace

    def validate(self, target: TargetList) -> Tuple[List[DockEntry], List[DockEntry]]:
        valid: List[DockEntry] = []
        skipped: List[DockEntry] = []
        for entry in target:
            if entry.kind in (EntryKind.APP, EntryKind.FOLDER) and not self._path_exists(entry.target):
                skipped.append(entry)
                continue
            valid.append(entry)
        return valid, skipped

    def plan(self, target: TargetList) -> List[List[str]]:
        """
        Dry-run: the argv sequence apply() would run, without running it.
        """
        tool = self._locator.require()
        valid, _ = self.validate(target)
        steps = [[tool] + commands.remove_all_args()]
        steps.extend([tool] + commands.add_args(e) for e in valid)
        steps.append([self._killall_path] + commands.restart_args())
        steps.append([tool] + commands.list_args())
        return steps

    def apply(self, target: TargetList) -> ApplyResult:
        tool = self._locator.require()
        entries = list(target)
        warnings: List[str] = []
        emit(self._trace, "apply_started", data={"requested_count": len(entries)})

        valid, skipped = self.validate(entries)
        for entry in skipped:
            emit(self._trace, "entry_skipped", message="Path does not exist", data=entry.to_dict())

        self._clear(tool, warnings)

        added = self._add_all(tool, valid, warnings)

        self._restart(tool, warnings)

        verified_count = self._verify(valid, warnings)

        result = ApplyResult(
            requested_count=len(entries),
            applied_count=len(added),
            skipped_entries=tuple(skipped),
            verified_count=verified_count,
            warnings=tuple(warnings),
        )
        emit(self._trace, "apply_finished", data=result.to_dict())
        return result

    def _clear(self, tool: str, warnings: List[str]) -> None:
        try:
            result = self._runner.run(tool, commands.remove_all_args())
        except CommandFailed as e:
            if not commands.is_benign(e.stderr):
                emit(self._trace, "error", message="Clearing the Dock failed", data={"error": str(e)})
                raise
            warnings.append(f"clear: {e.stderr.strip()}")
        else:
            if commands.is_benign(result.stderr):
                warnings.append(f"clear: {result.stderr.strip()}")
        emit(self._trace, "dock_cleared")

    def _add_all(self, tool: str, entries: Sequence[DockEntry], warnings: List[str]) -> List[DockEntry]:
        added: List[DockEntry] = []
        for i, entry in enumerate(entries):
            if i > 0 and self._add_delay_s > 0:
                self._sleep(self._add_delay_s)
            label = entry.name or entry.target or entry.kind.value
            try:
                result = self._runner.run(tool, commands.add_args(entry))
            except DockshiftError as e:
                detail = e.stderr.strip() if isinstance(e, CommandFailed) and e.stderr.strip() else e.message
                warnings.append(f"{label}: {detail}")
                emit(self._trace, "entry_add_failed", message=detail, data=entry.to_dict())
                continue
            if commands.is_benign(result.stderr):
                warnings.append(f"{label}: {result.stderr.strip()}")
            added.append(entry)
            emit(self._trace, "entry_added", data=entry.to_dict())
        return added

    def _restart(self, tool: str, warnings: List[str]) -> None:
        try:
            self._runner.run(self._killall_path, commands.restart_args())
        except DockshiftError as e:
            warnings.append(f"Dock restart failed: {e.message}")
        emit(self._trace, "dock_restarted")

        def dock_answers() -> bool:
            self._runner.run(tool, commands.list_args())
            return True

        outcome = poll_until(dock_answers, self._restart_policy, sleep=self._sleep, clock=self._clock)
        if outcome.ok:
            emit(self._trace, "dock_ready", data={"attempts": outcome.attempts})
        else:
            msg = f"Dock did not respond after restart within {outcome.attempts} attempt(s); verifying anyway"
            last = _error_text(outcome.last_error)
            if last:
                msg += f" (last error: {last})"
            warnings.append(msg)
            emit(
                self._trace,
                "dock_restart_slow",
                data={"attempts": outcome.attempts, "elapsed_s": round(outcome.elapsed_s, 3), "last_error": last},
            )

    def _verify(self, attempted: Sequence[DockEntry], warnings: List[str]) -> int:
        visible = set(self._reader.sections)
        expected = sum(1 for e in attempted if e.section in visible)
        try:
            snapshot = self._reader.read_current()
        except DockshiftError as e:
            warnings.append(f"Verification read failed: {e.message}")
            emit(self._trace, "verify_mismatch", message="Verification read failed", data={"expected": expected, "actual": 0})
            return 0
        actual = len(snapshot)
        if actual < expected:
            warnings.append(f"Verification shortfall: expected {expected} item(s), Dock shows {actual}")
            emit(self._trace, "verify_mismatch", data={"expected": expected, "actual": actual})
        return actual
