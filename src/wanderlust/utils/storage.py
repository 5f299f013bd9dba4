"""
Durable key-value storage used to persist saved trips.
"""

import errno
import logging
import os
import tempfile
from typing import Dict, Optional

from ..config.settings import STORAGE_QUOTA_BYTES


class TripStoreError(Exception):
    """Base error for saved-trip persistence."""


class StorageFullError(TripStoreError):
    """Raised when a write would exceed the storage capacity ceiling."""


class TripStoreCorruptError(TripStoreError):
    """Raised when persisted trips cannot be decoded."""


class KeyValueStorage:
    """String key-value storage with a total capacity ceiling."""

    def __init__(self, quota_bytes: int = STORAGE_QUOTA_BYTES):
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError

    def _sizes(self) -> Dict[str, int]:
        raise NotImplementedError

    def _check_quota(self, key: str, value: str) -> None:
        sizes = self._sizes()
        sizes[key] = len(value.encode("utf-8"))
        total = sum(sizes.values())
        if total > self.quota_bytes:
            logging.error(f"Storage quota exceeded writing '{key}': {total} > {self.quota_bytes} bytes")
            raise StorageFullError(
                f"Storage is full ({total} of {self.quota_bytes} bytes). Delete some saved trips and try again."
            )


class MemoryKeyValueStorage(KeyValueStorage):
    """In-process storage, for tests and ephemeral sessions."""

    def __init__(self, quota_bytes: int = STORAGE_QUOTA_BYTES, initial: Optional[Dict[str, str]] = None):
        super().__init__(quota_bytes)
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        self._data[key] = value

    def _sizes(self) -> Dict[str, int]:
        return {k: len(v.encode("utf-8")) for k, v in self._data.items()}


class FileKeyValueStorage(KeyValueStorage):
    """One file per key under a directory, replaced atomically on write."""

    SUFFIX = ".json"

    def __init__(self, directory: str, quota_bytes: int = STORAGE_QUOTA_BYTES):
        super().__init__(quota_bytes)
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, key + self.SUFFIX)

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def put(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            if e.errno == errno.ENOSPC:
                raise StorageFullError("No space left on device for saved trips.") from e
            raise

    def _sizes(self) -> Dict[str, int]:
        if not os.path.isdir(self.directory):
            return {}
        sizes = {}
        for name in os.listdir(self.directory):
            if name.endswith(self.SUFFIX):
                sizes[name[:-len(self.SUFFIX)]] = os.path.getsize(os.path.join(self.directory, name))
        return sizes
