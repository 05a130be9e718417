from __future__ import annotations

import json
from typing import Dict, List

from .errors import DockshiftError
from .models import ApplyResult


_MESSAGES: Dict[str, str] = {
    "dock.tool_unavailable": (
        "dockutil was not found. Install it (e.g. `brew install dockutil`) "
        "or set dockutil_path in the dockshift config."
    ),
    "dock.empty_snapshot": "The Dock has no pinned items to capture yet.",
    "command.not_found": "A required system command could not be found.",
    "command.spawn_failed": "A system command could not be started.",
    "command.failed": "A Dock command failed.",
    "command.timeout": "A Dock command did not finish in time.",
    "profile.not_found": "No profile with that name exists.",
    "profile.exists": "A profile with that name already exists.",
    "profile.bad_index": "No item at that position; `profiles show` lists items in order starting at 0.",
}


def describe_error(e: Exception) -> str:
    """
    User-facing text for an error.

    Known codes get a fixed sentence; the structured code/message (and `data`,
    when present) are always appended so nothing is hidden from the user.
    """
    if not isinstance(e, DockshiftError):
        return str(e)
    lines: List[str] = []
    friendly = _MESSAGES.get(e.code)
    if friendly:
        lines.append(friendly)
    lines.append(str(e))
    if isinstance(e.data, dict) and e.data:
        data = dict(e.data)
        for k in ("stdout", "stderr"):
            if isinstance(data.get(k), str) and len(data[k]) > 2000:
                data[k] = data[k][:2000] + "...(truncated)"
        lines.append(json.dumps(data, ensure_ascii=False, indent=2))
    return "\n".join(lines)


def format_apply_report(result: ApplyResult) -> str:
    lines = [f"Applied {result.applied_count} of {result.requested_count} item(s); Dock now shows {result.verified_count}."]

    lines.append(f"Skipped ({len(result.skipped_entries)}):")
    if result.skipped_entries:
        for e in result.skipped_entries:
            lines.append(f"  - {e.name or '(unnamed)'} [{e.kind.value}] {e.target}: path does not exist")
    else:
        lines.append("  (none)")

    lines.append(f"Warnings ({len(result.warnings)}):")
    if result.warnings:
        for w in result.warnings:
            lines.append(f"  - {w}")
    else:
        lines.append("  (none)")
    return "\n".join(lines)
