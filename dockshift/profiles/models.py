from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Sequence, Tuple

from dockshift.core.models import DockEntry


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Profile:
    """
    A named, ordered list of Dock entries owned by the caller.

    Item order is position order; positions are re-derived from it on save.
    """

    name: str
    items: Tuple[DockEntry, ...] = ()
    is_default: bool = False
    sort_order: int = 0
    created_at: str = field(default_factory=_now_iso)

    def target_list(self) -> Tuple[DockEntry, ...]:
        return self.items

    def with_items(self, items: Sequence[DockEntry]) -> "Profile":
        return Profile(
            name=self.name,
            items=tuple(items),
            is_default=self.is_default,
            sort_order=self.sort_order,
            created_at=self.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": "1",
            "name": self.name,
            "created_at": self.created_at,
            "is_default": self.is_default,
            "sort_order": self.sort_order,
            "items": [e.to_dict() for e in self.items],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Profile":
        return cls(
            name=str(raw["name"]),
            items=tuple(DockEntry.from_dict(i) for i in raw.get("items") or []),
            is_default=bool(raw.get("is_default", False)),
            sort_order=int(raw.get("sort_order", 0)),
            created_at=str(raw.get("created_at") or _now_iso()),
        )
