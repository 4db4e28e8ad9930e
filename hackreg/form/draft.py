# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Draft persistence for the registration form.

The form only needs a string key/value port (``get``/``put``/``delete``),
the same surface a browser's local storage offers. ``MemoryStorage`` backs
tests and single-process use; ``JSONFileStorage`` survives restarts.
"""
import json
import os
from typing import Any, Dict, Optional

from hackreg.core.logging import get_logger

logger = get_logger(__name__)

DRAFT_KEY = "hackreg_form_progress"
STEP_KEY = "currentStep"
SIZE_KEY = "teamSize"


class MemoryStorage:
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JSONFileStorage:
    """Whole store kept in one JSON object on disk."""

    def __init__(self, path: str):
        self._path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self._path):
            return {}
        with open(self._path, encoding="utf-8") as fh:
            return json.load(fh)

    def _write(self, data: Dict[str, str]) -> None:
        tmp = self._path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self._path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def put(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


class DraftStore:
    def __init__(self, storage, key: str = DRAFT_KEY):
        self._storage = storage
        self._key = key

    def save(self, values: Dict[str, str], current_step: int, team_size: int) -> None:
        payload: Dict[str, Any] = {k: v for k, v in values.items() if v}
        payload[STEP_KEY] = current_step
        payload[SIZE_KEY] = team_size
        self._storage.put(self._key, json.dumps(payload))

    def load(self) -> Optional[Dict[str, Any]]:
        raw = self._storage.get(self._key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.warning("Discarding unreadable form draft: %s", exc)
            return None
        return data if isinstance(data, dict) else None

    def clear(self) -> None:
        self._storage.delete(self._key)
