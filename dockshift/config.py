from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from dockshift.contract_store import default_contracts
from dockshift.core.errors import ValidationError
from dockshift.core.retry import RetryPolicy
from dockshift.dock.locator import DEFAULT_CANDIDATE_PATHS
from dockshift.resources import default_config_path


@dataclass(frozen=True)
class Settings:
    """
    Engine configuration. Every field has a working default, so a missing
    config file is not an error.
    """

    dockutil_path: Optional[str] = None
    candidate_paths: Tuple[str, ...] = DEFAULT_CANDIDATE_PATHS
    include_others: bool = False
    add_delay_s: float = 0.05
    command_timeout_s: Optional[float] = 30.0
    restart_policy: RetryPolicy = field(default_factory=RetryPolicy)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Settings":
        errors = default_contracts().validate("settings.schema.json", raw)
        if errors:
            raise ValidationError(code="config.invalid", message="Settings validation failed", data={"errors": errors})

        defaults = cls()
        poll = raw.get("restart_poll") or {}
        policy = RetryPolicy(
            max_attempts=int(poll.get("max_attempts", defaults.restart_policy.max_attempts)),
            interval_s=float(poll.get("interval_s", defaults.restart_policy.interval_s)),
            timeout_s=float(poll.get("timeout_s", defaults.restart_policy.timeout_s)),
        )
        candidates = raw.get("candidate_paths")
        return cls(
            dockutil_path=raw.get("dockutil_path") or None,
            candidate_paths=tuple(candidates) if candidates is not None else defaults.candidate_paths,
            include_others=bool(raw.get("include_others", defaults.include_others)),
            add_delay_s=float(raw.get("add_delay_s", defaults.add_delay_s)),
            command_timeout_s=raw.get("command_timeout_s", defaults.command_timeout_s),
            restart_policy=policy,
        )


def load_settings(path: Optional[Path] = None) -> Settings:
    p = (path or default_config_path()).expanduser()
    if not p.exists():
        return Settings()
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValidationError(code="config.invalid", message=f"Config is not valid YAML: {p}", data={"error": str(e)}) from e
    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        raise ValidationError(code="config.invalid", message=f"Config top level must be a mapping: {p}")
    return Settings.from_dict(raw)


def render_default_config() -> str:
    s = Settings()
    doc = {
        "dockutil_path": None,
        "candidate_paths": list(s.candidate_paths),
        "include_others": s.include_others,
        "add_delay_s": s.add_delay_s,
        "command_timeout_s": s.command_timeout_s,
        "restart_poll": {
            "max_attempts": s.restart_policy.max_attempts,
            "interval_s": s.restart_policy.interval_s,
            "timeout_s": s.restart_policy.timeout_s,
        },
    }
    return yaml.safe_dump(doc, sort_keys=False)
