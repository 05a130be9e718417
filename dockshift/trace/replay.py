from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Collection, Dict, Iterator, List, Optional


class Replay:
    """
    Reads a trace file back, oldest event first.

    Only the live file is read; a rotated `.1` backup is ignored.
    """

    def __init__(self, path: Path):
        self._path = path

    def iter_events(
        self,
        *,
        run_id: Optional[str] = None,
        event_types: Optional[Collection[str]] = None,
    ) -> Iterator[Dict[str, Any]]:
        if not self._path.exists():
            return
        with self._path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                event = json.loads(line)
                if run_id is not None and event.get("run_id") != run_id:
                    continue
                if event_types and event.get("event_type") not in event_types:
                    continue
                yield event

    def last_apply(self, *, run_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Events of the most recent apply: from its `apply_started` through the
        end of the file, limited to that apply's run_id.
        """
        events = list(self.iter_events(run_id=run_id))
        start = None
        for i, event in enumerate(events):
            if event.get("event_type") == "apply_started":
                start = i
        if start is None:
            return []
        rid = events[start].get("run_id")
        return [e for e in events[start:] if e.get("run_id") == rid]
