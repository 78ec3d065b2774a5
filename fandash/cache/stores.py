"""
Fandash — Key-Value Stores
───────────────────────────
The byte store behind KeyedCache. Stores only know strings:
get / set / remove / clear, last write wins, no transactions.

  MemoryStore    — process-local dict, optional byte quota
  JsonFileStore  — one JSON object on disk, survives restarts
  RedisStore     — shared Redis instance

open_store() picks one from a FANDASH_STORE style URL.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

import redis

log = logging.getLogger("fandash.cache.stores")


class StorageError(Exception):
    """Raised when a store cannot persist a write (quota, I/O, backend down)."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...
    def clear(self) -> None: ...


class MemoryStore:
    """Dict-backed store. `quota` caps the total stored characters."""

    def __init__(self, quota: Optional[int] = None):
        self.quota = quota
        self._data: Dict[str, str] = {}

    def _used(self, excluding: str = "") -> int:
        return sum(len(k) + len(v) for k, v in self._data.items() if k != excluding)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota is not None and self._used(key) + len(key) + len(value) > self.quota:
            raise StorageError(f"quota exceeded writing {key}")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStore:
    """All keys in one JSON object file, rewritten on every change."""

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            log.warning(f"Store file {self.path} unreadable ({e}) — starting empty")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"cannot write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def clear(self) -> None:
        self._save({})


class RedisStore:
    """Keys namespaced under `prefix` so clear() never touches foreign data."""

    def __init__(self, client: redis.Redis, prefix: str = "fandash:"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "fandash:") -> "RedisStore":
        return cls(redis.Redis.from_url(url, decode_responses=True, socket_timeout=2), prefix)

    def get(self, key: str) -> Optional[str]:
        return self.client.get(self.prefix + key)

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(self.prefix + key, value)
        except redis.RedisError as e:
            raise StorageError(f"redis write failed for {key}: {e}") from e

    def remove(self, key: str) -> None:
        self.client.delete(self.prefix + key)

    def clear(self) -> None:
        keys = list(self.client.scan_iter(match=self.prefix + "*"))
        if keys:
            self.client.delete(*keys)


def open_store(url: str) -> KeyValueStore:
    """memory | file:<path> | redis://host:port/db"""
    if url.startswith(("redis://", "rediss://", "unix://")):
        log.info(f"Using Redis store at {url}")
        return RedisStore.from_url(url)
    if url.startswith("file:"):
        path = url[len("file:"):]
        log.info(f"Using file store at {path}")
        return JsonFileStore(path)
    if url != "memory":
        log.warning(f"Unknown store '{url}' — using in-memory store")
    return MemoryStore()
