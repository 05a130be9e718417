from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Optional

from dockshift.config import Settings, load_settings, render_default_config
from dockshift.core.errors import ValidationError
from dockshift.core.messages import describe_error, format_apply_report
from dockshift.core.models import SECTIONS, ApplyResult, snapshot_to_dicts
from dockshift.dock.locator import DockToolLocator
from dockshift.dock.runner import CommandRunner, Runner
from dockshift.engine import ReconciliationEngine, build_engine
from dockshift.profiles.manager import DEFAULT_PROFILE_NAME, ProfileManager, make_entry
from dockshift.profiles.models import Profile
from dockshift.profiles.store import ProfileStore
from dockshift.resources import default_config_path, default_profiles_dir, default_trace_path
from dockshift.trace.replay import Replay
from dockshift.trace.trace_emitter import TraceEmitter
from dockshift.trace.trace_store_jsonl import TraceStoreJSONL


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def _make_runner(settings: Settings) -> Runner:
    return CommandRunner(timeout_s=settings.command_timeout_s)


def _settings(args: argparse.Namespace) -> Settings:
    return load_settings(Path(args.config) if getattr(args, "config", None) else None)


def _trace(args: argparse.Namespace) -> TraceEmitter:
    path = Path(args.trace) if getattr(args, "trace", None) else default_trace_path()
    return TraceEmitter(store=TraceStoreJSONL(path), run_id=args.run_id)


def _engine(args: argparse.Namespace, settings: Settings) -> ReconciliationEngine:
    return build_engine(settings, runner=_make_runner(settings), trace=_trace(args))


def _store(args: argparse.Namespace) -> ProfileStore:
    d = getattr(args, "profiles_dir", None)
    return ProfileStore(Path(d).expanduser() if d else default_profiles_dir())


def _manager(args: argparse.Namespace) -> ProfileManager:
    settings = _settings(args)
    return ProfileManager(_engine(args, settings), _store(args))


def _profile_summary(p: Profile, current: Optional[str]) -> Dict[str, Any]:
    return {
        "name": p.name,
        "items": len(p.items),
        "is_default": p.is_default,
        "sort_order": p.sort_order,
        "created_at": p.created_at,
        "current": p.name == current,
    }


def cmd_doctor(args: argparse.Namespace) -> int:
    settings = _settings(args)
    locator = DockToolLocator(_make_runner(settings), candidates=settings.candidate_paths, override=settings.dockutil_path)
    path = locator.locate()
    _print_json(
        {
            "dockutil": path,
            "searched": locator.searched_paths(),
            "config_path": str(Path(args.config) if args.config else default_config_path()),
            "profiles_dir": str(_store(args).directory),
        }
    )
    return 0 if path else 1


def cmd_config(args: argparse.Namespace) -> int:
    text = render_default_config()
    if args.output:
        out = Path(args.output).expanduser()
        if out.exists() and not args.force:
            print(f"Refusing to overwrite existing file: {out} (pass --force)")
            return 1
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
        print(str(out))
    else:
        print(text, end="")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    engine = _engine(args, _settings(args))
    _print_json(snapshot_to_dicts(engine.capture_current()))
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    store = _store(args)
    if store.list() and not args.force:
        print("Profiles already exist; nothing to do (pass --force to capture a default profile anyway)")
        return 0
    profile = _manager(args).create_default_profile(args.name)
    _print_json(_profile_summary(profile, profile.name))
    return 0


def cmd_profiles_list(args: argparse.Namespace) -> int:
    store = _store(args)
    current = store.current_profile()
    profiles = store.list()
    if args.json:
        _print_json([_profile_summary(p, current) for p in profiles])
    else:
        for p in profiles:
            marker = "*" if p.name == current else " "
            print("{m} {name} ({n} items)".format(m=marker, name=p.name, n=len(p.items)))
    return 0


def cmd_profiles_show(args: argparse.Namespace) -> int:
    _print_json(_store(args).load(args.name).to_dict())
    return 0


def cmd_profiles_capture(args: argparse.Namespace) -> int:
    profile = _manager(args).capture_profile(args.name, overwrite=bool(args.force))
    _print_json(_profile_summary(profile, _store(args).current_profile()))
    return 0


def cmd_profiles_refresh(args: argparse.Namespace) -> int:
    profile = _manager(args).refresh_profile(args.name)
    _print_json(_profile_summary(profile, _store(args).current_profile()))
    return 0


def cmd_profiles_delete(args: argparse.Namespace) -> int:
    _store(args).delete(args.name)
    print(f"Deleted profile: {args.name}")
    return 0


def cmd_profiles_add(args: argparse.Namespace) -> int:
    if args.label is not None and len(args.targets) > 1:
        raise ValidationError(code="cli.invalid", message="--label needs exactly one target")
    entries = [make_entry(t, kind=args.kind, name=args.label, section=args.section) for t in args.targets]
    profile = _manager(args).add_items(args.name, entries, position=args.position)
    _print_json(profile.to_dict())
    return 0


def cmd_profiles_add_spacer(args: argparse.Namespace) -> int:
    profile = _manager(args).add_spacer(args.name, position=args.position, section=args.section)
    _print_json(profile.to_dict())
    return 0


def cmd_profiles_remove(args: argparse.Namespace) -> int:
    profile = _manager(args).remove_item(args.name, args.index)
    _print_json(profile.to_dict())
    return 0


def cmd_profiles_move(args: argparse.Namespace) -> int:
    profile = _manager(args).move_item(args.name, args.from_index, args.to_index)
    _print_json(profile.to_dict())
    return 0


def cmd_profiles_rename(args: argparse.Namespace) -> int:
    profile = _manager(args).rename_profile(args.name, args.new_name)
    _print_json(_profile_summary(profile, _store(args).current_profile()))
    return 0


def cmd_profiles_duplicate(args: argparse.Namespace) -> int:
    profile = _manager(args).duplicate_profile(args.name, args.new_name)
    _print_json(_profile_summary(profile, _store(args).current_profile()))
    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    out = _manager(args).apply(args.name, dry_run=bool(args.dry_run))
    if not isinstance(out, ApplyResult):
        _print_json({"dry_run": True, "commands": out})
        return 0
    if args.json:
        _print_json(out.to_dict())
    else:
        print(format_apply_report(out))
    return 0


def cmd_current(args: argparse.Namespace) -> int:
    _print_json({"current_profile": _store(args).current_profile()})
    return 0


def cmd_show_trace(args: argparse.Namespace) -> int:
    path = Path(args.trace) if args.trace else default_trace_path()
    replay = Replay(path)
    if args.last_apply:
        events = replay.last_apply(run_id=args.filter_run_id)
        if args.event_type:
            events = [e for e in events if e.get("event_type") == args.event_type]
    else:
        types = [args.event_type] if args.event_type else None
        events = list(replay.iter_events(run_id=args.filter_run_id, event_types=types))

    if args.tail is not None and args.tail >= 0:
        events = events[-args.tail :] if args.tail else []

    for e in events:
        print(json.dumps(e, ensure_ascii=False, indent=2 if args.pretty else None))
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", help="Settings YAML path (default: $DOCKSHIFT_CONFIG or XDG config)")
    p.add_argument("--profiles-dir", help="Profiles directory (default: $DOCKSHIFT_HOME/profiles)")
    p.add_argument("--trace", help="Trace output path (jsonl)")
    p.add_argument("--run-id", default="run_cli", help="Run ID for trace correlation")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="dockshift", description="Switch the macOS Dock between saved profiles")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_doctor = sub.add_parser("doctor", help="Locate dockutil and show resolved paths")
    _add_common(p_doctor)
    p_doctor.set_defaults(func=cmd_doctor)

    p_config = sub.add_parser("config", help="Print or write a default settings file")
    p_config.add_argument("--output", help="Write config to file instead of stdout")
    p_config.add_argument("--force", action="store_true", help="Overwrite an existing file")
    p_config.set_defaults(func=cmd_config)

    p_show = sub.add_parser("show", help="Print the live Dock's pinned items as JSON")
    _add_common(p_show)
    p_show.set_defaults(func=cmd_show)

    p_init = sub.add_parser("init", help="Capture the live Dock as the default profile (first run)")
    _add_common(p_init)
    p_init.add_argument("--name", default=DEFAULT_PROFILE_NAME, help="Default profile name")
    p_init.add_argument("--force", action="store_true", help="Capture even if profiles already exist")
    p_init.set_defaults(func=cmd_init)

    p_profiles = sub.add_parser("profiles", help="Manage saved profiles")
    profiles_sub = p_profiles.add_subparsers(dest="profiles_cmd", required=True)

    p_pl = profiles_sub.add_parser("list", help="List saved profiles")
    _add_common(p_pl)
    p_pl.add_argument("--json", action="store_true", help="Output JSON")
    p_pl.set_defaults(func=cmd_profiles_list)

    p_ps = profiles_sub.add_parser("show", help="Print one profile")
    _add_common(p_ps)
    p_ps.add_argument("name")
    p_ps.set_defaults(func=cmd_profiles_show)

    p_pc = profiles_sub.add_parser("capture", help="Save the live Dock as a new profile")
    _add_common(p_pc)
    p_pc.add_argument("name")
    p_pc.add_argument("--force", action="store_true", help="Replace an existing profile's items")
    p_pc.set_defaults(func=cmd_profiles_capture)

    p_pr = profiles_sub.add_parser("refresh", help="Replace a profile's items with the live Dock")
    _add_common(p_pr)
    p_pr.add_argument("name")
    p_pr.set_defaults(func=cmd_profiles_refresh)

    p_pd = profiles_sub.add_parser("delete", help="Delete a profile")
    _add_common(p_pd)
    p_pd.add_argument("name")
    p_pd.set_defaults(func=cmd_profiles_delete)

    p_pa = profiles_sub.add_parser("add", help="Add apps, folders or URLs to a profile")
    _add_common(p_pa)
    p_pa.add_argument("name")
    p_pa.add_argument("targets", nargs="+", help="Paths or URLs, added in the given order")
    p_pa.add_argument("--kind", choices=["app", "folder", "url"], help="Entry kind (default: inferred from the target)")
    p_pa.add_argument("--label", help="Display name (single target only)")
    p_pa.add_argument("--section", choices=list(SECTIONS), default="apps", help="Dock section")
    p_pa.add_argument("--position", type=int, help="Insert before this 0-based index (default: append)")
    p_pa.set_defaults(func=cmd_profiles_add)

    p_psp = profiles_sub.add_parser("add-spacer", help="Add a spacer to a profile")
    _add_common(p_psp)
    p_psp.add_argument("name")
    p_psp.add_argument("--section", choices=list(SECTIONS), default="apps", help="Dock section")
    p_psp.add_argument("--position", type=int, help="Insert before this 0-based index (default: append)")
    p_psp.set_defaults(func=cmd_profiles_add_spacer)

    p_prm = profiles_sub.add_parser("remove", help="Remove one item from a profile")
    _add_common(p_prm)
    p_prm.add_argument("name")
    p_prm.add_argument("index", type=int, help="0-based item index")
    p_prm.set_defaults(func=cmd_profiles_remove)

    p_pmv = profiles_sub.add_parser("move", help="Move one item within a profile")
    _add_common(p_pmv)
    p_pmv.add_argument("name")
    p_pmv.add_argument("from_index", type=int, help="0-based index of the item to move")
    p_pmv.add_argument("to_index", type=int, help="0-based index it ends up at")
    p_pmv.set_defaults(func=cmd_profiles_move)

    p_prn = profiles_sub.add_parser("rename", help="Rename a profile")
    _add_common(p_prn)
    p_prn.add_argument("name")
    p_prn.add_argument("new_name")
    p_prn.set_defaults(func=cmd_profiles_rename)

    p_pdu = profiles_sub.add_parser("duplicate", help="Copy a profile under a new name")
    _add_common(p_pdu)
    p_pdu.add_argument("name")
    p_pdu.add_argument("--as", dest="new_name", help="Name of the copy (default: '<name> Copy')")
    p_pdu.set_defaults(func=cmd_profiles_duplicate)

    p_apply = sub.add_parser("apply", help="Make the live Dock match a profile")
    _add_common(p_apply)
    p_apply.add_argument("name")
    p_apply.add_argument("--dry-run", action="store_true", help="Print the dockutil commands without running them")
    p_apply.add_argument("--json", action="store_true", help="Output the result as JSON")
    p_apply.set_defaults(func=cmd_apply)

    p_current = sub.add_parser("current", help="Show the last applied profile")
    _add_common(p_current)
    p_current.set_defaults(func=cmd_current)

    p_trace = sub.add_parser("show-trace", help="Show trace events from a JSONL file")
    p_trace.add_argument("--trace", help="Trace path (jsonl)")
    p_trace.add_argument("--filter-run-id", help="Only events from this run_id")
    p_trace.add_argument("--event-type", help="Filter by event_type")
    p_trace.add_argument("--last-apply", action="store_true", help="Only events from the most recent apply")
    p_trace.add_argument("--tail", type=int, help="Show only last N events")
    p_trace.add_argument("--pretty", action="store_true", help="Pretty-print each event as JSON")
    p_trace.set_defaults(func=cmd_show_trace)

    ns = parser.parse_args(argv)
    try:
        return int(ns.func(ns))
    except Exception as e:  # noqa: BLE001
        print(describe_error(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
