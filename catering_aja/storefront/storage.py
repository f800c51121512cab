"""Key/value stores holding storefront state between runs (the browser's localStorage)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from ..common.services.logging import log_event


class MemoryStorage:
    """Process-local storage, used by tests and short-lived sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Stores every key in one JSON object on disk."""

    def __init__(self, data_file: Path) -> None:
        self._data_file = data_file

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._write(data)

    def _load(self) -> Dict[str, str]:
        if not self._data_file.exists():
            return {}
        text = self._data_file.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            # an unreadable file behaves like empty storage
            log_event("warning", "storage.discarded", file=str(self._data_file), error=str(exc))
            return {}
        if not isinstance(payload, dict):
            log_event("warning", "storage.discarded", file=str(self._data_file), error="not an object")
            return {}
        return {str(k): str(v) for k, v in payload.items() if v is not None}

    def _write(self, data: Dict[str, str]) -> None:
        self._data_file.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, ensure_ascii=False, indent=2)
        self._data_file.write_text(content + "\n", encoding="utf-8")
