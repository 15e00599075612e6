from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from foryou_runtime.application.errors import StorageReadError, StorageWriteError
from foryou_runtime.ports.key_value_store import KeyValueStore
from foryou_runtime.settings import get_settings

logger = logging.getLogger(__name__)


class FileKeyValueStore(KeyValueStore):
    """One JSON document per key under ``base_dir``; writes replace the file atomically."""

    def __init__(self, base_dir: str | None = None) -> None:
        self.base_dir = Path(base_dir or get_settings().storage_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.base_dir / f"{quote(key, safe='')}.json"

    def read(self, key: str) -> Optional[dict]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Invalid JSON in {path}: {e}", key=key) from e
        except OSError as e:
            raise StorageReadError(f"Failed to read {path}: {e}", key=key) from e
        if not isinstance(data, dict):
            logger.warning(f"Ignoring non-object document in {path}")
            return None
        return data

    def write(self, key: str, payload: dict) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, separators=(",", ":"))
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageWriteError(f"Failed to write {path}: {e}", key=key) from e

    def delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to delete {key}: {e}", key=key) from e
