from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from .models import Settings, SettingsUpdate, Stats

logger = logging.getLogger(__name__)

SETTINGS_KEY = "urlguard_settings"
STATS_KEY = "urlguard_stats"
API_KEY_KEY = "virustotal_api_key"

STATE_FILENAME = "urlguard_state.json"


class JsonStore:
    """Small key/value store persisted as one JSON document.

    Every write rewrites the whole file (via a temp file + rename). Reads go
    to disk each time so several processes sharing a data dir stay roughly
    in sync; a missing or unreadable file just means "empty".
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)
        self._lock = threading.Lock()

    @classmethod
    def in_dir(cls, data_dir: str | os.PathLike[str]) -> "JsonStore":
        return cls(Path(data_dir) / STATE_FILENAME)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp, self.path)

    # generic access

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove(self, *keys: str) -> None:
        with self._lock:
            data = self._load()
            changed = False
            for k in keys:
                if k in data:
                    del data[k]
                    changed = True
            if changed:
                self._save(data)

    # settings

    def get_settings(self) -> Settings:
        raw = self.get(SETTINGS_KEY)
        if not isinstance(raw, dict):
            return Settings()
        try:
            return Settings.model_validate(raw)
        except ValueError:
            return Settings()

    def update_settings(self, update: SettingsUpdate) -> Settings:
        with self._lock:
            data = self._load()
            current = data.get(SETTINGS_KEY) if isinstance(data.get(SETTINGS_KEY), dict) else {}
            merged = Settings.model_validate({**current, **update.model_dump(exclude_none=True)})
            data[SETTINGS_KEY] = merged.model_dump()
            self._save(data)
        return merged

    # stats

    def get_stats(self) -> Stats:
        raw = self.get(STATS_KEY)
        if not isinstance(raw, dict):
            return Stats()
        try:
            return Stats.model_validate(raw)
        except ValueError:
            return Stats()

    def record_scan(self, suspicious: bool) -> Stats:
        with self._lock:
            data = self._load()
            try:
                stats = Stats.model_validate(data.get(STATS_KEY) or {})
            except ValueError:
                stats = Stats()
            stats = Stats(
                urls_scanned=stats.urls_scanned + 1,
                threats_found=stats.threats_found + (1 if suspicious else 0),
            )
            data[STATS_KEY] = stats.model_dump()
            self._save(data)
        return stats

    def reset_stats(self) -> Stats:
        stats = Stats()
        self.set(STATS_KEY, stats.model_dump())
        return stats

    # reputation api key

    def get_api_key(self) -> str | None:
        key = self.get(API_KEY_KEY)
        return key if isinstance(key, str) and key else None

    def set_api_key(self, api_key: str) -> None:
        self.set(API_KEY_KEY, api_key.strip())
