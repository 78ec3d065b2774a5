from .keyed_cache import KeyedCache, LegacyMerchRecord, StandardRecord, record_payload
from .stores import JsonFileStore, KeyValueStore, MemoryStore, RedisStore, StorageError, open_store

__all__ = [
    "KeyedCache", "LegacyMerchRecord", "StandardRecord", "record_payload",
    "JsonFileStore", "KeyValueStore", "MemoryStore", "RedisStore", "StorageError", "open_store",
]
