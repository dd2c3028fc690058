from __future__ import annotations

import hashlib
import threading
from pathlib import Path

from app.application.ports.draft_storage import DraftStoragePort


class JsonDraftStorage(DraftStoragePort):
    """One JSON file per draft key under data_dir, written atomically."""

    def __init__(self, data_dir: str = "./data/drafts") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _get_file_path(self, key: str) -> Path:
        """File name is a hash of the key."""
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
        return self._data_dir / f"{digest}.json"

    def get_item(self, key: str) -> str | None:
        file_path = self._get_file_path(key)
        if not file_path.exists():
            return None
        with open(file_path, "r", encoding="utf-8") as f:
            return f.read()

    def set_item(self, key: str, value: str) -> None:
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")
        with self._lock:
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    f.write(value)
                temp_path.replace(file_path)
            except Exception:
                if temp_path.exists():
                    temp_path.unlink(missing_ok=True)
                raise

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._get_file_path(key).unlink(missing_ok=True)
