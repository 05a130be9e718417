from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DockshiftError(Exception):
    code: str
    message: str
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(DockshiftError):
    pass


class ToolUnavailable(DockshiftError):
    pass


class ExecutableNotFound(DockshiftError):
    pass


class SpawnFailed(DockshiftError):
    pass


class CommandFailed(DockshiftError):
    @property
    def stderr(self) -> str:
        if isinstance(self.data, dict) and isinstance(self.data.get("stderr"), str):
            return self.data["stderr"]
        return ""


class EmptyDockSnapshot(DockshiftError):
    pass


class ProfileNotFound(DockshiftError):
    pass
