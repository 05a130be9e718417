from __future__ import annotations

import os
from typing import Callable, List, Optional, Sequence, Union

from dockshift.core.errors import EmptyDockSnapshot, ValidationError
from dockshift.core.models import ApplyResult, DockEntry, EntryKind
from dockshift.dock.parser import infer_kind
from dockshift.engine import ReconciliationEngine

from .models import Profile
from .store import ProfileStore


DEFAULT_PROFILE_NAME = "Default"
COPY_SUFFIX = "Copy"
_WEB_SCHEMES = ("http://", "https://")


def make_entry(
    target: str,
    *,
    kind: Optional[str] = None,
    name: Optional[str] = None,
    section: str = "apps",
) -> DockEntry:
    """
    Build a profile entry from a user-supplied path or URL.

    Kind is inferred like a parsed Dock row when not given. Local paths are
    made absolute; the default name is the file name without `.app`.
    """
    target = target.strip()
    if target and kind != EntryKind.URL.value and not target.lower().startswith(_WEB_SCHEMES):
        target = os.path.abspath(os.path.expanduser(target))
    k = EntryKind(kind) if kind else infer_kind(target)
    if k is EntryKind.SPACER:
        return DockEntry(EntryKind.SPACER, "", "", section=section)
    if name is None:
        if k is EntryKind.URL:
            name = target
        else:
            name = os.path.basename(target)
            if name.lower().endswith(".app"):
                name = name[:-4]
    return DockEntry(k, name, target, section=section)


def _check_index(index: int, size: int, *, allow_end: bool = False) -> None:
    upper = size if allow_end else size - 1
    if index < 0 or index > upper:
        raise ValidationError(
            code="profile.bad_index",
            message=f"Item index {index} is out of range (0..{upper})",
            data={"index": index, "size": size},
        )


class ProfileManager:
    """
    Glue between stored profiles and the live Dock.

    The engine never sees profile names; this layer turns a profile into a
    target list and records which profile was applied last.
    """

    def __init__(self, engine: ReconciliationEngine, store: ProfileStore):
        self._engine = engine
        self._store = store

    def create_default_profile(self, name: str = DEFAULT_PROFILE_NAME) -> Profile:
        """
        First-run capture. An empty Dock is rejected here (the reader accepts it).
        """
        snapshot = self._engine.capture_current()
        if not snapshot:
            raise EmptyDockSnapshot(code="dock.empty_snapshot", message="The Dock has no pinned items to capture")
        profile = Profile(name=name, items=snapshot, is_default=True, sort_order=0)
        self._store.save(profile)
        self._store.set_current_profile(profile.name)
        return profile

    def capture_profile(self, name: str, *, overwrite: bool = False) -> Profile:
        if self._store.exists(name) and not overwrite:
            raise ValidationError(
                code="profile.exists",
                message=f"Profile already exists: {name} (pass --force to replace its items)",
                data={"name": name},
            )
        snapshot = self._engine.capture_current()
        if self._store.exists(name):
            profile = self._store.load(name).with_items(snapshot)
        else:
            profile = Profile(name=name, items=snapshot, sort_order=self._store.next_sort_order())
        self._store.save(profile)
        return profile

    def refresh_profile(self, name: str) -> Profile:
        profile = self._store.load(name).with_items(self._engine.capture_current())
        self._store.save(profile)
        return profile

    def apply(self, name: str, *, dry_run: bool = False) -> Union[ApplyResult, List[List[str]]]:
        profile = self._store.load(name)
        if dry_run:
            return self._engine.plan_profile(profile.target_list())
        result = self._engine.apply_profile(profile.target_list())
        self._store.set_current_profile(profile.name)
        return result

    def current(self) -> Optional[Profile]:
        name = self._store.current_profile()
        if name is None or not self._store.exists(name):
            return None
        return self._store.load(name)

    def add_items(self, name: str, entries: Sequence[DockEntry], *, position: Optional[int] = None) -> Profile:
        """
        Insert entries at `position` (default: the end), keeping their order.
        """

        def edit(items: List[DockEntry]) -> None:
            at = len(items) if position is None else position
            _check_index(at, len(items), allow_end=True)
            items[at:at] = list(entries)

        return self._edit(name, edit)

    def add_spacer(self, name: str, *, position: Optional[int] = None, section: str = "apps") -> Profile:
        return self.add_items(name, [DockEntry(EntryKind.SPACER, "", "", section=section)], position=position)

    def remove_item(self, name: str, index: int) -> Profile:
        def edit(items: List[DockEntry]) -> None:
            _check_index(index, len(items))
            del items[index]

        return self._edit(name, edit)

    def move_item(self, name: str, from_index: int, to_index: int) -> Profile:
        def edit(items: List[DockEntry]) -> None:
            _check_index(from_index, len(items))
            _check_index(to_index, len(items))
            items.insert(to_index, items.pop(from_index))

        return self._edit(name, edit)

    def rename_profile(self, old: str, new: str) -> Profile:
        return self._store.rename(old, new)

    def duplicate_profile(self, name: str, new_name: Optional[str] = None) -> Profile:
        """
        Copy items into a new, non-default profile sorted after the others.

        Without `new_name` the copy is called "<name> Copy" (then "Copy 2", ...).
        """
        source = self._store.load(name)
        if new_name is None:
            new_name = f"{source.name} {COPY_SUFFIX}"
            n = 2
            while self._store.exists(new_name):
                new_name = f"{source.name} {COPY_SUFFIX} {n}"
                n += 1
        elif self._store.exists(new_name):
            raise ValidationError(code="profile.exists", message=f"Profile already exists: {new_name}", data={"name": new_name})
        copy = Profile(name=new_name.strip(), items=source.items, sort_order=self._store.next_sort_order())
        self._store.save(copy)
        return copy

    def _edit(self, name: str, edit: Callable[[List[DockEntry]], None]) -> Profile:
        profile = self._store.load(name)
        items = list(profile.items)
        edit(items)
        updated = profile.with_items(items)
        self._store.save(updated)
        return updated
