from __future__ import annotations

from typing import List

from dockshift.core.models import DockEntry, EntryKind


KILLALL_PATH = "/usr/bin/killall"
DOCK_PROCESS_NAME = "Dock"

# Case-insensitive stderr fragments dockutil prints while the Dock is settling.
BENIGN_STDERR = (
    "dock connection error",
    "connection interrupted",
)


def list_args() -> List[str]:
    return ["--list"]


def remove_all_args() -> List[str]:
    return ["--remove", "all", "--no-restart"]


def add_args(entry: DockEntry) -> List[str]:
    """
    dockutil argv for adding one entry without restarting the Dock.
    """
    if entry.kind is EntryKind.SPACER:
        return ["--add", "", "--type", "spacer", "--section", entry.section, "--no-restart"]

    args = ["--add", entry.target, "--section", entry.section]
    if entry.kind is EntryKind.FOLDER:
        args += ["--view", "auto", "--display", "folder"]
    elif entry.kind is EntryKind.URL and entry.name:
        args += ["--label", entry.name]
    args.append("--no-restart")
    return args


def restart_args() -> List[str]:
    return [DOCK_PROCESS_NAME]


def is_benign(stderr: str) -> bool:
    s = (stderr or "").lower()
    return any(token in s for token in BENIGN_STDERR)
