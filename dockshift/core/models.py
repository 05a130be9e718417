from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from .errors import ValidationError


class EntryKind(str, Enum):
    APP = "app"
    FOLDER = "folder"
    URL = "url"
    SPACER = "spacer"


SECTIONS = ("apps", "others")


@dataclass(frozen=True)
class DockEntry:
    """
    One pinned Dock item.

    Identity for matching is (kind, target); spacers have no stable identity
    and only match by position.
    """

    kind: EntryKind
    name: str
    target: str
    section: str = "apps"

    def __post_init__(self) -> None:
        if not isinstance(self.kind, EntryKind):
            try:
                object.__setattr__(self, "kind", EntryKind(self.kind))
            except ValueError as e:
                raise ValidationError(code="entry.invalid", message=f"Unknown entry kind: {self.kind!r}") from e
        if self.section not in SECTIONS:
            raise ValidationError(code="entry.invalid", message=f"Unknown dock section: {self.section!r}")
        if self.kind is not EntryKind.SPACER and not self.target:
            raise ValidationError(
                code="entry.invalid",
                message=f"{self.kind.value} entry requires a non-empty target",
                data={"name": self.name},
            )

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.kind.value, self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "name": self.name, "target": self.target, "section": self.section}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DockEntry":
        return cls(
            kind=raw.get("kind", ""),
            name=str(raw.get("name") or ""),
            target=str(raw.get("target") or ""),
            section=str(raw.get("section") or "apps"),
        )


# Ordered by intended position; the caller re-derives positions before apply.
TargetList = Sequence[DockEntry]

# Observed live state at one point in time. Never cached across reads.
DockSnapshot = Tuple[DockEntry, ...]


@dataclass(frozen=True)
class ApplyResult:
    requested_count: int
    applied_count: int
    skipped_entries: Tuple[DockEntry, ...] = ()
    verified_count: int = 0
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requested_count": self.requested_count,
            "applied_count": self.applied_count,
            "skipped_entries": [e.to_dict() for e in self.skipped_entries],
            "verified_count": self.verified_count,
            "warnings": list(self.warnings),
        }


def snapshot_to_dicts(snapshot: Sequence[DockEntry]) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in snapshot]
