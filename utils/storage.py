import json
import os
import platform
import re
from pathlib import Path
from typing import Dict, Optional

from oauth.errors import StorageUnavailable
from settings import STORAGE_DIR


def origin_slug(origin: str) -> str:
    """File-name safe form of an origin (http://localhost:8080 -> http_localhost_8080)"""
    return re.sub(r"[^A-Za-z0-9]+", "_", origin).strip("_")


class OriginStorage:
    """Key-value storage for one origin, kept in a JSON file with owner-only permissions

    Every failure to read or write the file is raised as StorageUnavailable.
    """

    def __init__(self, origin: str, storage_dir: Optional[str] = None):
        self.origin = origin
        base = Path(storage_dir if storage_dir else STORAGE_DIR)
        self.storage_path = base / "local_storage" / f"{origin_slug(origin)}.json"

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.storage_path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def _read(self) -> Dict[str, str]:
        try:
            if not self.storage_path.exists():
                return {}
            data = json.loads(self.storage_path.read_text(encoding="utf-8"))
        # JSONDecodeError and UnicodeDecodeError are both ValueError
        except (ValueError, OSError) as e:
            raise StorageUnavailable(f"Cannot read {self.storage_path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageUnavailable(f"Unexpected content in {self.storage_path}")
        return data

    def _write(self, data: Dict[str, str]):
        try:
            self._ensure_secure_directory()
            self.storage_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            if platform.system() != "Windows":
                os.chmod(self.storage_path, 0o600)
        except OSError as e:
            raise StorageUnavailable(f"Cannot write {self.storage_path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str):
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str):
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

