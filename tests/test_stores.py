"""Tests for the key-value store backends."""

import pytest
import redis

from fandash.cache import JsonFileStore, MemoryStore, RedisStore, StorageError, open_store


class FakeRedis:
    def __init__(self, fail_writes: bool = False):
        self.data = {}
        self.fail_writes = fail_writes

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise redis.ConnectionError("connection refused")
        self.data[key] = value

    def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)

    def scan_iter(self, match):
        prefix = match.rstrip("*")
        return [k for k in list(self.data) if k.startswith(prefix)]


class TestOpenStore:

    def test_memory(self) -> None:
        assert isinstance(open_store("memory"), MemoryStore)

    def test_file(self, tmp_path) -> None:
        store = open_store(f"file:{tmp_path / 'fandash.json'}")
        assert isinstance(store, JsonFileStore)

    def test_redis_url(self) -> None:
        assert isinstance(open_store("redis://localhost:6379/0"), RedisStore)

    def test_unknown_falls_back_to_memory(self) -> None:
        assert isinstance(open_store("sqlite:///nope"), MemoryStore)


class TestMemoryStore:

    def test_quota(self) -> None:
        store = MemoryStore(quota=20)
        store.set("a", "x" * 10)
        with pytest.raises(StorageError):
            store.set("b", "y" * 10)
        store.set("a", "z" * 15)
        assert store.get("a") == "z" * 15


class TestRedisStore:

    def test_prefix_and_clear(self) -> None:
        client = FakeRedis()
        client.data["other:key"] = "keep"
        store = RedisStore(client, prefix="fandash:")

        store.set("tweets", "{}")
        assert client.data["fandash:tweets"] == "{}"
        assert store.get("tweets") == "{}"

        store.clear()
        assert client.data == {"other:key": "keep"}

    def test_write_failure_becomes_storage_error(self) -> None:
        with pytest.raises(StorageError):
            RedisStore(FakeRedis(fail_writes=True)).set("tweets", "{}")
