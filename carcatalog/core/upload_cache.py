"""Persist and load the content-hash -> photo URL table (JSON)."""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from carcatalog.config import UPLOAD_CACHE_PATH

logger = logging.getLogger(__name__)


class UploadCacheStore:
    """String-keyed string map on disk. Entries only go away through clear()."""

    def __init__(self, path: Path = UPLOAD_CACHE_PATH) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._entries: Optional[Dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if self._entries is not None:
            return self._entries
        entries: Dict[str, str] = {}
        if self._path.exists():
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
                raw = data.get("entries", {}) if isinstance(data, dict) else {}
                entries = {str(k): str(v) for k, v in raw.items()}
            except (ValueError, OSError, AttributeError) as e:
                logger.warning("Upload cache %s unreadable, starting empty: %s", self._path, e)
        self._entries = entries
        return entries

    def _save(self, entries: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".uploads-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"entries": entries}, f, indent=2)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def put(self, key: str, value: str) -> None:
        """Write-through; raises OSError if the file cannot be written."""
        with self._lock:
            entries = dict(self._load())
            entries[key] = value
            self._save(entries)
            self._entries = entries

    def clear(self) -> None:
        with self._lock:
            self._save({})
            self._entries = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._load())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
