"""
File-backed session storage for the Supabase auth client.

The auth client reads and writes its session through SyncSupportedStorage
(get_item / set_item / remove_item). Only the auth client touches this
store; application code never reads the persisted session directly.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from supabase_auth import SyncSupportedStorage

logger = logging.getLogger(__name__)


class FileSessionStorage(SyncSupportedStorage):
    """
    Persists the auth client's items as one JSON object on disk.

    Writes go to a sibling temp file that is then renamed over the target,
    so a crash mid-write leaves the previous session intact.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session storage {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session storage {self._path}")
            return {}
        return data

    def _save(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items), encoding="utf-8")
        tmp_path.replace(self._path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)
