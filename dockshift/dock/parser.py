from __future__ import annotations

from typing import Dict, Iterable, List, Tuple
from urllib.parse import unquote

from dockshift.core.models import DockEntry, EntryKind


MIN_COLUMNS = 3

# dockutil section marker -> normalized section name
SECTION_MARKERS: Dict[str, str] = {
    "persistentApps": "apps",
    "persistentOthers": "others",
}
PINNED_SECTIONS: Tuple[str, ...] = ("persistentApps",)

_FILE_SCHEME = "file://"
_WEB_SCHEMES = ("http://", "https://")


def normalize_target(raw: str) -> str:
    """
    file:// URLs become plain decoded paths without trailing slashes.
    Web URLs are returned unchanged.
    """
    s = raw.strip()
    if s.lower().startswith(_WEB_SCHEMES):
        return s
    if s.lower().startswith(_FILE_SCHEME):
        s = s[len(_FILE_SCHEME) :]
        # file://localhost/... form
        if s.startswith("localhost/"):
            s = s[len("localhost") :]
    s = unquote(s)
    while len(s) > 1 and s.endswith("/"):
        s = s[:-1]
    return s


def infer_kind(target: str) -> EntryKind:
    """
    Best-effort classification; `dockutil --list` has no type column.
    """
    if target.lower().endswith(".app"):
        return EntryKind.APP
    if target.lower().startswith(_WEB_SCHEMES):
        return EntryKind.URL
    if "spacer" in target.lower() or not target:
        return EntryKind.SPACER
    return EntryKind.FOLDER


def parse_dock_list(raw: str, sections: Iterable[str] = PINNED_SECTIONS) -> List[DockEntry]:
    """
    Parse `dockutil --list` output.

    Columns: label, url/path, section marker, then optional extras (plist
    path, bundle id). Short rows and rows outside `sections` are dropped
    without error since the format is not contractually stable.
    """
    wanted = set(sections)
    out: List[DockEntry] = []
    for line in (raw or "").splitlines():
        if not line.strip():
            continue
        cols = line.split("\t")
        if len(cols) < MIN_COLUMNS:
            continue
        name, raw_target, marker = cols[0].strip(), cols[1], cols[2].strip()
        if marker not in wanted or marker not in SECTION_MARKERS:
            continue

        target = normalize_target(raw_target)
        kind = infer_kind(target)
        out.append(DockEntry(kind=kind, name=name, target=target, section=SECTION_MARKERS[marker]))
    return out
