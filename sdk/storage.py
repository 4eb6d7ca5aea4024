# sdk/storage.py
import json
import os
from pathlib import Path
from typing import Any, Optional


def default_storage_path() -> Path:
    return Path(os.getenv("STORE_LOCAL_STORAGE", str(Path.home() / ".clothify" / "storage.json")))


class LocalStorage:
    """
    Small JSON-file key/value store playing the part of browser localStorage.
    Every write rewrites the whole file, so the last writer wins.
    """

    def __init__(self, path: Optional[os.PathLike] = None):
        self.path = Path(path) if path is not None else default_storage_path()

    def _load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            # unreadable file is treated like an empty storage
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def get_item(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set_item(self, key: str, value: Any):
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)
