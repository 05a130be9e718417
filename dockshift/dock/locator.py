from __future__ import annotations

import os
from typing import Iterable, Optional, Tuple

from dockshift.core.errors import DockshiftError, ToolUnavailable

from .runner import Runner


DEFAULT_CANDIDATE_PATHS: Tuple[str, ...] = (
    "/opt/homebrew/bin/dockutil",
    "/usr/local/bin/dockutil",
    "/usr/bin/dockutil",
)
WHICH_PATH = "/usr/bin/which"
TOOL_NAME = "dockutil"


def _is_executable_file(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


class DockToolLocator:
    """
    Resolves the dockutil executable.

    Order: explicit override, well-known install paths, then `which dockutil`.
    The first hit is cached until invalidate(); a miss is not cached.
    """

    def __init__(
        self,
        runner: Runner,
        *,
        candidates: Iterable[str] = DEFAULT_CANDIDATE_PATHS,
        override: Optional[str] = None,
        which_path: str = WHICH_PATH,
    ):
        self._runner = runner
        self._candidates = tuple(candidates)
        self._override = override
        self._which_path = which_path
        self._cached: Optional[str] = None

    @property
    def cached_path(self) -> Optional[str]:
        return self._cached

    def invalidate(self) -> None:
        self._cached = None

    def locate(self) -> Optional[str]:
        if self._cached is not None:
            return self._cached

        found = self._search()
        if found is not None:
            self._cached = found
        return found

    def require(self) -> str:
        path = self.locate()
        if path is None:
            raise ToolUnavailable(
                code="dock.tool_unavailable",
                message=f"{TOOL_NAME} not found",
                data={"searched": self.searched_paths()},
            )
        return path

    def searched_paths(self) -> list[str]:
        out = [self._override] if self._override else []
        out.extend(self._candidates)
        out.append("PATH")
        return out

    def _search(self) -> Optional[str]:
        if self._override:
            override = os.path.expanduser(self._override)
            if _is_executable_file(override):
                return override

        for candidate in self._candidates:
            if _is_executable_file(candidate):
                return candidate

        return self._which()

    def _which(self) -> Optional[str]:
        try:
            result = self._runner.run(self._which_path, [TOOL_NAME])
        except DockshiftError:
            return None
        for line in result.stdout.splitlines():
            line = line.strip()
            if line and os.path.isabs(line):
                return line
        return None
