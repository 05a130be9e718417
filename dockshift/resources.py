from __future__ import annotations

import os
from pathlib import Path


def _package_dir(package_name: str) -> Path:
    """
    Return the on-disk directory for an imported package.

    Note:
    This assumes the package is installed in a filesystem-backed environment
    (typical for pip/wheel installs and editable installs).
    """
    module = __import__(package_name, fromlist=["__file__"])
    p = getattr(module, "__file__", None)
    if not isinstance(p, str) or not p:
        raise RuntimeError(f"Cannot resolve package directory for: {package_name}")
    return Path(p).resolve().parent


def contracts_dir() -> Path:
    """
    Directory that contains shipped JSON Schemas (profile and settings files).
    """
    return _package_dir("dockshift") / "contracts"


def config_home() -> Path:
    """
    Per-user config directory.

    - If XDG_CONFIG_HOME is set, use it.
    - Else use ~/.config
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if isinstance(base, str) and base.strip():
        return Path(base).expanduser() / "dockshift"
    return Path("~/.config").expanduser() / "dockshift"


def default_config_path() -> Path:
    override = os.environ.get("DOCKSHIFT_CONFIG")
    if isinstance(override, str) and override.strip():
        return Path(override).expanduser()
    return config_home() / "config.yml"


def data_home() -> Path:
    override = os.environ.get("DOCKSHIFT_HOME")
    if isinstance(override, str) and override.strip():
        return Path(override).expanduser()
    return config_home()


def default_profiles_dir() -> Path:
    return data_home() / "profiles"


def default_trace_path() -> Path:
    return data_home() / "trace.jsonl"
