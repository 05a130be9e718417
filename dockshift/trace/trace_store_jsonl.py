from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Optional

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


class TraceStoreJSONL:
    """
    Append-only JSONL file shared by every engine built in this process.

    Appends are serialized with a lock (BackgroundEngine emits from its worker
    thread). Once the file reaches `max_bytes` it is moved to `<name>.1`,
    replacing any older backup; `max_bytes=None` disables rotation.
    """

    def __init__(self, path: Path, *, max_bytes: Optional[int] = DEFAULT_MAX_BYTES):
        self._path = path
        self._max_bytes = max_bytes
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return self._path.with_name(self._path.name + ".1")

    def append(self, event: dict[str, Any]) -> None:
        line = json.dumps(event, ensure_ascii=False) + "\n"
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._rotate_if_full()
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)

    def _rotate_if_full(self) -> None:
        if self._max_bytes is None or not self._path.exists():
            return
        if self._path.stat().st_size >= self._max_bytes:
            self._path.replace(self.backup_path)
