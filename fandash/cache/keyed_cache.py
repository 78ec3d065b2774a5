"""
Fandash — Keyed Cache
──────────────────────
Expiry semantics on top of a KeyValueStore.

Two persisted record shapes, decoded at one read site:
  StandardRecord     {"value": ..., "timestamp": ms}   every category
  LegacyMerchRecord  {"data": [...], "timestamp": ms}  merchandise only

The cache is an optimisation, never a source of truth: every storage or
decoding failure reads as a miss and every write failure is swallowed
after one clear-and-retry.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .stores import KeyValueStore
from .ttl_config import (
    CACHE_DURATION,
    CATEGORY_LABELS,
    MERCH_LEGACY_DURATION,
    PREFERENCES_KEY,
    TALENT_MERCH_KEY,
)

log = logging.getLogger("fandash.cache")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class StandardRecord:
    value:     Any
    timestamp: int


@dataclass(frozen=True)
class LegacyMerchRecord:
    data:      List[dict]
    timestamp: int


CacheRecord = Union[StandardRecord, LegacyMerchRecord]


def decode_record(raw: str) -> Optional[CacheRecord]:
    """Parse a stored string. Raises ValueError on malformed JSON;
    returns None for JSON that matches neither record shape."""
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        return None
    timestamp = parsed.get("timestamp") or 0
    if not isinstance(timestamp, (int, float)):
        timestamp = 0
    if "value" in parsed and parsed["value"] is not None:
        return StandardRecord(parsed["value"], int(timestamp))
    if isinstance(parsed.get("data"), list):
        return LegacyMerchRecord(parsed["data"], int(timestamp))
    return None


def encode_record(record: CacheRecord) -> str:
    if isinstance(record, StandardRecord):
        return json.dumps({"value": record.value, "timestamp": record.timestamp}, ensure_ascii=False)
    return json.dumps({"data": record.data, "timestamp": record.timestamp}, ensure_ascii=False)


def record_payload(record: CacheRecord) -> Any:
    return record.value if isinstance(record, StandardRecord) else record.data


class KeyedCache:
    """
    get(key)  → value or None. Stale standard records are removed.
    set(key)  → fire-and-forget; clears the store once on failure.

    `legacy_keys` are the keys allowed to answer from a LegacyMerchRecord.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], int] = now_ms,
        duration: int = CACHE_DURATION,
        legacy_duration: int = MERCH_LEGACY_DURATION,
        legacy_keys: Iterable[str] = (TALENT_MERCH_KEY,),
    ):
        self.store           = store
        self.clock           = clock
        self.duration        = duration
        self.legacy_duration = legacy_duration
        self.legacy_keys     = frozenset(legacy_keys)

    # ── Reads ──────────────────────────────────────────────────
    def _read(self, key: str) -> Optional[CacheRecord]:
        try:
            raw = self.store.get(key)
        except Exception as e:
            log.warning(f"Cache read error for {key}: {e}")
            return None
        if not raw:
            return None
        try:
            return decode_record(raw)
        except ValueError as e:
            log.error(f"Error parsing cache for {key}: {e}")
            return None

    def get(self, key: str) -> Any:
        record = self._read(key)
        if record is None:
            return None

        age = self.clock() - record.timestamp
        if isinstance(record, StandardRecord):
            if record.timestamp and age <= self.duration:
                return record.value
            log.debug(f"Cache expired for {key}")
            self._remove_quietly(key)
            return None

        if isinstance(record, LegacyMerchRecord) and key in self.legacy_keys:
            # Legacy records are kept past expiry as a fallback source
            if record.timestamp and age <= self.legacy_duration:
                log.debug(f"Using legacy merchandise cache ({age // 60000} minutes old)")
                return record.data
            log.debug("Legacy merchandise cache expired")
        return None

    def peek(self, key: str) -> Optional[CacheRecord]:
        """The stored record regardless of age. Never evicts."""
        return self._read(key)

    def age(self, key: str) -> Optional[int]:
        record = self.peek(key)
        if record is None or not record.timestamp:
            return None
        return self.clock() - record.timestamp

    # ── Writes ─────────────────────────────────────────────────
    def _write(self, key: str, record: CacheRecord) -> bool:
        try:
            encoded = encode_record(record)
        except (TypeError, ValueError) as e:
            log.error(f"Cache value for {key} is not serialisable: {e}")
            return False
        try:
            self.store.set(key, encoded)
            return True
        except Exception as e:
            log.warning(f"Cache write error for {key}: {e}")
        try:
            self.store.clear()
            self.store.set(key, encoded)
            return True
        except Exception as e:
            log.error(f"Cache write failed after clear for {key}: {e}")
            return False

    def set(self, key: str, value: Any) -> bool:
        return self._write(key, StandardRecord(value, self.clock()))

    def set_legacy(self, key: str, data: List[dict]) -> bool:
        return self._write(key, LegacyMerchRecord(list(data), self.clock()))

    def _remove_quietly(self, key: str) -> None:
        try:
            self.store.remove(key)
        except Exception as e:
            log.warning(f"Cache remove error for {key}: {e}")

    def remove(self, key: str) -> None:
        self._remove_quietly(key)

    # ── Status ─────────────────────────────────────────────────
    def status(self, keys: Iterable[str]) -> List[Dict[str, Any]]:
        """Per-key last update time and item count, for the cache panel."""
        report = []
        for key in keys:
            record = self.peek(key)
            entry = {
                "key":        key,
                "label":      CATEGORY_LABELS.get(key, key),
                "updated_ms": None,
                "age_ms":     None,
                "count":      0,
            }
            if record is not None and record.timestamp:
                payload = record_payload(record)
                entry["updated_ms"] = record.timestamp
                entry["age_ms"]     = self.clock() - record.timestamp
                entry["count"]      = _count(payload)
            report.append(entry)
        return report

    # ── Preferences ────────────────────────────────────────────
    def get_preferences(self) -> Dict[str, Any]:
        try:
            raw = self.store.get(PREFERENCES_KEY)
            prefs = json.loads(raw) if raw else {}
        except Exception as e:
            log.warning(f"Preferences unreadable: {e}")
            prefs = {}
        if not isinstance(prefs, dict):
            prefs = {}
        return {"isMuted": bool(prefs.get("isMuted", False))}

    def set_preferences(self, is_muted: bool) -> None:
        try:
            self.store.set(PREFERENCES_KEY, json.dumps({"isMuted": bool(is_muted)}))
        except Exception as e:
            log.warning(f"Preferences write failed: {e}")


def _count(payload: Any) -> int:
    if isinstance(payload, list):
        return len(payload)
    if isinstance(payload, dict):
        tweets = payload.get("tweets")
        if isinstance(tweets, list):
            return len(tweets)
        return len(payload)
    return 1
