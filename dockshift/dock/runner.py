from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from dockshift.core.errors import CommandFailed, ExecutableNotFound, SpawnFailed


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str
    exit_code: int


class Runner(Protocol):
    def run(self, executable: str, args: Sequence[str], *, check: bool = True) -> CommandResult: ...


class CommandRunner:
    """
    Runs one external program per call and captures its output.

    Hard rules:
    - argv is passed as a list; never through a shell.
    - a missing executable fails before anything is spawned.
    - non-zero exit raises CommandFailed when `check` is set; deciding which
      stderr text is harmless is left to the caller.
    """

    def __init__(self, *, timeout_s: Optional[float] = 30.0):
        self._timeout_s = timeout_s

    def run(self, executable: str, args: Sequence[str], *, check: bool = True) -> CommandResult:
        if not isinstance(executable, str) or not executable:
            raise ExecutableNotFound(code="command.not_found", message="Executable path must be a non-empty string")
        if not os.path.exists(executable):
            raise ExecutableNotFound(
                code="command.not_found",
                message=f"Executable does not exist: {executable}",
                data={"executable": executable},
            )

        argv: List[str] = [executable] + [str(a) for a in args]
        try:
            cp = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                check=False,
                timeout=self._timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandFailed(
                code="command.timeout",
                message=f"Command timed out after {self._timeout_s}s: {executable}",
                data={"argv": argv, "stderr": _as_text(e.stderr), "stdout": _as_text(e.stdout)},
            ) from e
        except OSError as e:
            raise SpawnFailed(
                code="command.spawn_failed",
                message=f"Failed to start {executable}: {e.strerror or e}",
                data={"argv": argv},
            ) from e

        result = CommandResult(stdout=cp.stdout or "", stderr=cp.stderr or "", exit_code=cp.returncode)
        if check and result.exit_code != 0:
            raise CommandFailed(
                code="command.failed",
                message=result.stderr.strip() or f"{executable} exited with status {result.exit_code}",
                data={"argv": argv, "exit_code": result.exit_code, "stderr": result.stderr, "stdout": result.stdout},
            )
        return result


def _as_text(v: object) -> str:
    if isinstance(v, bytes):
        return v.decode("utf-8", errors="replace")
    return v if isinstance(v, str) else ""
