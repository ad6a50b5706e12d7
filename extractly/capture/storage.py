from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from extractly.logger import get_logger

logger = get_logger(__name__)

HISTORY_KEY = "extractionHistory"
MAX_HISTORY_ITEMS = 50
DEFAULT_STORAGE_PATH = Path.home() / ".extractly" / "storage.json"


class CaptureSettings(BaseModel):
    api_base_url: str = Field("http://localhost:3000/api", alias="apiBaseUrl")
    max_retries: int = Field(3, alias="maxRetries")
    timeout: int = Field(30000, alias="timeout", description="Request timeout in milliseconds")

    model_config = {"populate_by_name": True}


class LocalStorage:
    """Small JSON-file key-value store, the counterpart of extension local storage."""

    def __init__(self, path: Path | str = DEFAULT_STORAGE_PATH):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8") or "{}")

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def get(self, keys: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        with self._lock:
            data = self._read()
        if keys is None:
            return data
        return {k: data[k] for k in keys if k in data}

    def set(self, items: Dict[str, Any]) -> None:
        with self._lock:
            data = self._read()
            data.update(items)
            self._write(data)


def install_defaults(storage: LocalStorage) -> CaptureSettings:
    """Write default settings for any key not yet present."""
    defaults = CaptureSettings().model_dump(by_alias=True)
    existing = storage.get(defaults.keys())
    missing = {k: v for k, v in defaults.items() if k not in existing}
    if missing:
        storage.set(missing)
        logger.info("Default settings configured: %s", ", ".join(missing))
    return get_settings(storage)


def get_settings(storage: LocalStorage) -> CaptureSettings:
    stored = storage.get(["apiBaseUrl", "maxRetries", "timeout"])
    # falsy values fall back to defaults
    return CaptureSettings(**{k: v for k, v in stored.items() if v})


def store_extraction_result(storage: LocalStorage, result: Dict[str, Any]) -> List[Dict[str, Any]]:
    history = storage.get([HISTORY_KEY]).get(HISTORY_KEY, [])
    item = {**result, "timestamp": int(time.time() * 1000), "id": result.get("record_id")}
    updated = [item, *history][:MAX_HISTORY_ITEMS]
    storage.set({HISTORY_KEY: updated})
    logger.info("Extraction result stored in history")
    return updated


def get_history(storage: LocalStorage) -> List[Dict[str, Any]]:
    return storage.get([HISTORY_KEY]).get(HISTORY_KEY, [])
