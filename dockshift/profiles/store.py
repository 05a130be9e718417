from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional

import yaml

from dockshift.contract_store import ContractStore, default_contracts
from dockshift.core.errors import ProfileNotFound, ValidationError

from .models import Profile


_SLUG_RE = re.compile(r"[^a-z0-9]+")
STATE_FILE = ".state.yml"


def profile_slug(name: str) -> str:
    slug = _SLUG_RE.sub("-", name.strip().lower()).strip("-")
    if not slug:
        raise ValidationError(code="profile.invalid", message="Profile name must contain a letter or digit", data={"name": name})
    return slug


class ProfileStore:
    """
    One YAML file per profile under `directory`, plus `.state.yml` holding the
    caller-owned "current profile" pointer. No profile name can slug to that
    file name.

    Every file read or written is validated against profile.schema.json.
    """

    def __init__(self, directory: Path, *, contracts: Optional[ContractStore] = None):
        self._dir = directory
        self._contracts = contracts

    @property
    def directory(self) -> Path:
        return self._dir

    def _store(self) -> ContractStore:
        if self._contracts is None:
            self._contracts = default_contracts()
        return self._contracts

    def path_for(self, name: str) -> Path:
        return self._dir / f"{profile_slug(name)}.yml"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def list(self) -> List[Profile]:
        if not self._dir.exists():
            return []
        profiles = [self._read(p) for p in sorted(self._dir.glob("*.yml")) if p.name != STATE_FILE]
        return sorted(profiles, key=lambda p: (p.sort_order, p.name.lower()))

    def load(self, name: str) -> Profile:
        p = self.path_for(name)
        if not p.exists():
            raise ProfileNotFound(code="profile.not_found", message=f"Unknown profile: {name}", data={"name": name})
        return self._read(p)

    def save(self, profile: Profile) -> Path:
        raw = profile.to_dict()
        self._check(raw, source=profile.name)
        p = self.path_for(profile.name)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(".yml.tmp")
        tmp.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
        tmp.replace(p)
        return p

    def delete(self, name: str) -> None:
        p = self.path_for(name)
        if not p.exists():
            raise ProfileNotFound(code="profile.not_found", message=f"Unknown profile: {name}", data={"name": name})
        was_current = self.is_current(name)
        p.unlink()
        if was_current:
            self.set_current_profile(None)

    def rename(self, old: str, new: str) -> Profile:
        """
        Rename keeps items and metadata. Renaming to a name with the same
        slug (e.g. a case change) rewrites the file in place.
        """
        profile = self.load(old)
        new = new.strip()
        same_file = profile_slug(old) == profile_slug(new)
        if not same_file and self.exists(new):
            raise ValidationError(code="profile.exists", message=f"Profile already exists: {new}", data={"name": new})
        was_current = self.is_current(old)
        renamed = replace(profile, name=new)
        self.save(renamed)
        if not same_file:
            self.path_for(old).unlink()
        if was_current:
            self.set_current_profile(renamed.name)
        return renamed

    def is_current(self, name: str) -> bool:
        current = self.current_profile()
        return current is not None and profile_slug(current) == profile_slug(name)

    def next_sort_order(self) -> int:
        profiles = self.list()
        return max((p.sort_order for p in profiles), default=-1) + 1

    def current_profile(self) -> Optional[str]:
        p = self._dir / STATE_FILE
        if not p.exists():
            return None
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        v = raw.get("current_profile") if isinstance(raw, dict) else None
        return v if isinstance(v, str) and v else None

    def set_current_profile(self, name: Optional[str]) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        (self._dir / STATE_FILE).write_text(yaml.safe_dump({"current_profile": name}), encoding="utf-8")

    def _read(self, path: Path) -> Profile:
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValidationError(code="profile.invalid", message=f"Profile is not valid YAML: {path}", data={"error": str(e)}) from e
        self._check(raw, source=str(path))
        return Profile.from_dict(raw)

    def _check(self, raw: Any, *, source: str) -> None:
        errors = self._store().validate("profile.schema.json", raw)
        if errors:
            raise ValidationError(
                code="profile.invalid",
                message=f"Profile validation failed: {source}",
                data={"errors": errors},
            )
