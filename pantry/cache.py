"""
Disk cache (cross-run) for TheMealDB responses.

Features:
- JSON file per namespace: {"version": 1, "data": {key: {"value": ..., "ts": int}}}
- TTL per cache; expired entries are still readable with allow_stale=True
  (used when the recipe source is unreachable, and by "offline" mode).
- Atomic writes (tmp file + replace) and a lock, so concurrent term lookups
  can write back safely.

Two shared instances:
    FILTER_CACHE  — ingredient term -> filter hits (24 hours)
    DETAIL_CACHE  — recipe id -> recipe detail (7 days)

Location: $PANTRY_CACHE_DIR, default pantry/cache/.
"""

from __future__ import annotations

import json
import os
import threading
import time
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()

MODULE_DIR = Path(__file__).resolve().parent
CACHE_DIR = Path(os.getenv("PANTRY_CACHE_DIR") or (MODULE_DIR / "cache"))

FILTER_CACHE_TTL = 24 * 3600       # 24 hours
DETAIL_CACHE_TTL = 7 * 24 * 3600   # 7 days
_CACHE_VERSION = 1


def _now() -> int:
    return int(time.time())


class DiskCache:
    """Key-value JSON cache with a TTL, stored in a single file."""

    def __init__(self, path: Path, ttl_seconds: int):
        self.path = Path(path)
        self.ttl = int(ttl_seconds)
        self._lock = threading.Lock()

    # --- raw file access ---------------------------------------------------
    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text("utf-8"))
        except (OSError, ValueError):
            return {}
        data = raw.get("data") if isinstance(raw, dict) else None
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = {"version": _CACHE_VERSION, "data": data}
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    # --- public API ----------------------------------------------------------
    def get(self, key: str, allow_stale: bool = False) -> Optional[Any]:
        """Return the cached value, or None on a miss / expired / malformed entry."""
        entry = self._read().get(key)
        if not isinstance(entry, dict) or "value" not in entry:
            return None
        try:
            ts = int(entry.get("ts", 0))
        except (TypeError, ValueError):
            return None
        if allow_stale or (_now() - ts) <= self.ttl:
            return entry["value"]
        return None

    def set(self, key: str, value: Any):
        with self._lock:
            data = self._read()
            data[key] = {"value": value, "ts": _now()}
            self._write(data)

    def delete(self, key: str) -> bool:
        with self._lock:
            data = self._read()
            if key not in data:
                return False
            del data[key]
            self._write(data)
            return True

    def clear(self):
        with self._lock:
            self._write({})

    def __len__(self) -> int:
        return len(self._read())


FILTER_CACHE = DiskCache(CACHE_DIR / ".cache_filter.json", FILTER_CACHE_TTL)
DETAIL_CACHE = DiskCache(CACHE_DIR / ".cache_detail.json", DETAIL_CACHE_TTL)


def clear_all():
    FILTER_CACHE.clear()
    DETAIL_CACHE.clear()
