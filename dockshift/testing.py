from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from dockshift.core.errors import CommandFailed, ExecutableNotFound
from dockshift.core.retry import RetryPolicy
from dockshift.dock import commands
from dockshift.dock.locator import WHICH_PATH, DockToolLocator
from dockshift.dock.reader import DockReader
from dockshift.dock.runner import CommandResult
from dockshift.dock.writer import DockWriter
from dockshift.engine import ReconciliationEngine
from dockshift.trace.trace_emitter import TraceEmitter


FAKE_DOCKUTIL = "/usr/local/bin/dockutil"
_PLIST = "/Users/test/Library/Preferences/com.apple.dock.plist"


@dataclass
class FakeRow:
    name: str
    url: str
    marker: str = "persistentApps"

    def render(self) -> str:
        return "\t".join([self.name, self.url, self.marker, _PLIST])


class FakeDockRunner:
    """
    Deterministic in-memory stand-in for dockutil/killall/which.

    Used by tests to exercise the reader/writer without macOS. Every call is
    recorded in `calls` as (executable, args).

    Knobs:
    - which_result: stdout of `which dockutil` (None -> exit 1)
    - add_failures: target -> (exit_code, stderr) for `--add`
    - add_stderr: target -> stderr printed on an otherwise successful add
    - clear_failure: (exit_code, stderr) for `--remove all`
    - list_failures_after_restart: `--list` fails this many times after killall
    - drop_adds: targets accepted by `--add` but never shown (silent no-op)
    """

    def __init__(
        self,
        rows: Sequence[FakeRow] = (),
        *,
        tool_path: str = FAKE_DOCKUTIL,
        which_result: Optional[str] = None,
    ):
        self.rows: List[FakeRow] = list(rows)
        self.tool_path = tool_path
        self.which_result = which_result
        self.add_failures: Dict[str, Tuple[int, str]] = {}
        self.add_stderr: Dict[str, str] = {}
        self.clear_failure: Optional[Tuple[int, str]] = None
        self.list_failures_after_restart = 0
        self.drop_adds: List[str] = []
        self.calls: List[Tuple[str, List[str]]] = []
        self._pending_list_failures = 0

    def calls_with(self, flag: str) -> List[List[str]]:
        return [args for exe, args in self.calls if exe == self.tool_path and args[:1] == [flag]]

    def run(self, executable: str, args: Sequence[str], *, check: bool = True) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append((executable, argv))

        if executable == WHICH_PATH:
            if self.which_result:
                return CommandResult(stdout=self.which_result + "\n", stderr="", exit_code=0)
            return self._finish(1, "", "", check, executable, argv)
        if executable == commands.KILLALL_PATH:
            self._pending_list_failures = self.list_failures_after_restart
            return CommandResult(stdout="", stderr="", exit_code=0)
        if executable != self.tool_path:
            raise ExecutableNotFound(code="command.not_found", message=f"Executable does not exist: {executable}")

        if argv[:1] == ["--list"]:
            if self._pending_list_failures > 0:
                self._pending_list_failures -= 1
                return self._finish(1, "", "Dock connection error", check, executable, argv)
            return CommandResult(stdout="".join(r.render() + "\n" for r in self.rows), stderr="", exit_code=0)

        if argv[:2] == ["--remove", "all"]:
            if self.clear_failure is not None:
                code, err = self.clear_failure
                return self._finish(code, "", err, check, executable, argv)
            self.rows = []
            return CommandResult(stdout="", stderr="", exit_code=0)

        if argv[:1] == ["--add"]:
            return self._add(argv, check)

        return self._finish(1, "", f"unsupported arguments: {argv}", check, executable, argv)

    def _add(self, argv: List[str], check: bool) -> CommandResult:
        target = argv[1]
        if target in self.add_failures:
            code, err = self.add_failures[target]
            return self._finish(code, "", err, check, self.tool_path, argv)

        section = _opt(argv, "--section") or "apps"
        marker = "persistentOthers" if section == "others" else "persistentApps"
        if _opt(argv, "--type") == "spacer":
            row = FakeRow(name="", url="", marker=marker)
        elif target.startswith(("http://", "https://")):
            row = FakeRow(name=_opt(argv, "--label") or target, url=target, marker=marker)
        else:
            base = os.path.basename(target.rstrip("/"))
            name = base[:-4] if base.endswith(".app") else base
            row = FakeRow(name=name, url="file://" + quote(target) + "/", marker=marker)

        if target not in self.drop_adds:
            self.rows.append(row)
        return CommandResult(stdout="", stderr=self.add_stderr.get(target, ""), exit_code=0)

    def _finish(self, code: int, out: str, err: str, check: bool, executable: str, argv: List[str]) -> CommandResult:
        result = CommandResult(stdout=out, stderr=err, exit_code=code)
        if check and code != 0:
            raise CommandFailed(
                code="command.failed",
                message=err.strip() or f"{executable} exited with status {code}",
                data={"argv": [executable] + argv, "exit_code": code, "stderr": err, "stdout": out},
            )
        return result


def _opt(argv: List[str], flag: str) -> Optional[str]:
    if flag in argv:
        i = argv.index(flag)
        if i + 1 < len(argv):
            return argv[i + 1]
    return None


def build_fake_engine(
    runner: FakeDockRunner,
    *,
    existing_paths: Optional[Sequence[str]] = None,
    tool_found: bool = True,
    restart_attempts: int = 3,
    trace: Optional[TraceEmitter] = None,
) -> ReconciliationEngine:
    """
    Engine wired to a FakeDockRunner with no real sleeps.

    existing_paths: paths treated as present on disk (None -> every path exists).
    tool_found: when False, `which dockutil` fails and no candidate path matches.
    """
    if tool_found and runner.which_result is None:
        runner.which_result = runner.tool_path
    present = None if existing_paths is None else set(existing_paths)

    locator = DockToolLocator(runner, candidates=())
    reader = DockReader(runner, locator, trace=trace)
    writer = DockWriter(
        runner,
        locator,
        reader,
        add_delay_s=0.0,
        restart_policy=RetryPolicy.immediate(restart_attempts),
        path_exists=(lambda p: True) if present is None else (lambda p: p in present),
        sleep=lambda _s: None,
        trace=trace,
    )
    return ReconciliationEngine(reader, writer)
