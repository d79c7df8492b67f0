"""
Preference stores for UI choices that outlive a tool instance (selected units).
The measurement tool reads and writes through BasePreferenceStore only.
"""
import json
from pathlib import Path
from typing import Any

from .logger import get_logger

logger = get_logger("preferences")


class BasePreferenceStore:
    """Abstract key/value store for UI preferences."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryPreferenceStore(BasePreferenceStore):
    """Process-local store; nothing is written to disk."""

    def __init__(self, initial: dict | None = None):
        self._data = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonPreferenceStore(BasePreferenceStore):
    """
    Store preferences in a JSON file. Reads on every get so external edits are picked up;
    a missing or corrupt file reads as empty.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("Ignoring unreadable preferences file %s: %s", self.path, e)
        return {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def reset(self) -> None:
        if self.path.exists():
            self.path.unlink()
