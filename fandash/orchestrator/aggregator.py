"""
Fandash — Aggregation Orchestrator
───────────────────────────────────
Runs every dashboard category concurrently and merges them into one
AggregationPass that the renderer (or the CLI) can serve.

Per category (get_or_fetch):
    cache hit → return it
    miss      → fetch, normalise video records, cache, return
    failure   → empty list, reason recorded in pass.errors
The tweets category may answer with {"error": true, "message"}; that payload
is cached and returned untouched.

Merchandise adds a race against a short ceiling (3 s by default). If the
ceiling wins, the caller gets whatever storage still holds and the pipeline
keeps running as the single in-flight background task. A later request
joins that task instead of starting another; when it finishes, listeners
registered with on_merch_update() receive the fresh list.

Usage:
    async with open_session(settings) as orchestrator:
        result = await orchestrator.run_pass()
        return result.to_dict()
"""

import asyncio
import inspect
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

import httpx

from ..cache.keyed_cache import KeyedCache, record_payload
from ..cache.stores import KeyValueStore, open_store
from ..cache.ttl_config import CATEGORY_KEYS, TALENT_MERCH_KEY
from ..config import Settings
from ..fetchers.holodex import HolodexClient
from ..fetchers.transport import SourceUnavailableError
from ..models.items import is_error_payload
from .categories import CATEGORY_FETCHERS, VIDEO_CATEGORIES, CategoryFetch, Sources, normalise

log = logging.getLogger("fandash.orchestrator")

MerchListener = Callable[[List[dict]], Any]


@dataclass
class AggregationPass:
    categories: Dict[str, Any]
    errors:     Dict[str, str] = field(default_factory=dict)
    cached:     List[str] = field(default_factory=list)
    timestamp:  float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "categories": self.categories,
            "errors":     self.errors,
            "cached":     self.cached,
            "timestamp":  int(self.timestamp),
        }


@dataclass
class _MerchAttempt:
    task:    Optional[asyncio.Task] = None
    waiting: int = 0                 # callers still inside their ceiling


def _log_background_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        log.warning(f"Merchandise refresh failed: {task.exception()}")


class AggregationOrchestrator:

    def __init__(
        self,
        sources: Sources,
        fetchers: Optional[Dict[str, CategoryFetch]] = None,
        merch_ceiling: Optional[float] = None,
    ):
        self.sources       = sources
        self.cache         = sources.cache
        self.fetchers      = dict(CATEGORY_FETCHERS if fetchers is None else fetchers)
        self.merch_ceiling = sources.settings.merch_overall_timeout if merch_ceiling is None else merch_ceiling
        self._merch_attempt: Optional[_MerchAttempt] = None
        self._listeners: List[MerchListener] = []

    # ── Per category ───────────────────────────────────────────
    async def _fetch(self, key: str, fetch_fn: CategoryFetch, persist: bool = True) -> Any:
        log.debug(f"Fetching fresh data for {key}")
        value = await fetch_fn(self.sources)

        if is_error_payload(value):
            self.cache.set(key, value)
            return value

        if value is None:
            raise ValueError(f"No data returned for {key}")

        if key in VIDEO_CATEGORIES:
            value = normalise(value)
        if persist:
            self.cache.set(key, value)
        return value

    async def _lookup(self, key: str, fetch_fn: CategoryFetch) -> Tuple[Any, bool]:
        """Value for key plus whether storage answered it."""
        cached = self.cache.get(key)
        if cached is not None:
            log.debug(f"Cache hit for {key}")
            return cached, True
        return await self._fetch(key, fetch_fn), False

    async def get_or_fetch(self, key: str, fetch_fn: CategoryFetch) -> Any:
        value, _ = await self._lookup(key, fetch_fn)
        return value

    # ── Merchandise ────────────────────────────────────────────
    def on_merch_update(self, callback: MerchListener) -> None:
        self._listeners.append(callback)

    @property
    def merch_in_flight(self) -> bool:
        return self._merch_attempt is not None and not self._merch_attempt.task.done()

    def _stale_merch(self) -> List[dict]:
        record = self.cache.peek(TALENT_MERCH_KEY)
        if record is None:
            return []
        payload = record_payload(record)
        return payload if isinstance(payload, list) else []

    async def _notify(self, items: List[dict]) -> None:
        for callback in list(self._listeners):
            try:
                outcome = callback(items)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                log.error(f"Merchandise listener failed: {e}")

    async def _merch_pipeline(self, fetch_fn: CategoryFetch, attempt: _MerchAttempt) -> List[dict]:
        try:
            # Persisted in the legacy shape by the merch fetcher itself
            items = await self._fetch(TALENT_MERCH_KEY, fetch_fn, persist=False)
            if attempt.waiting == 0:
                log.info(f"Background merchandise refresh completed with {len(items)} items")
                await self._notify(items)
            return items
        finally:
            if self._merch_attempt is attempt:
                self._merch_attempt = None

    async def _lookup_merch(self) -> Tuple[List[dict], bool]:
        cached = self.cache.get(TALENT_MERCH_KEY)
        if cached:
            return cached, True

        if self.merch_in_flight:
            log.debug("Background merchandise fetch already in progress, joining it")
            attempt = self._merch_attempt
        else:
            attempt = _MerchAttempt()
            attempt.task = asyncio.create_task(
                self._merch_pipeline(self.fetchers[TALENT_MERCH_KEY], attempt))
            attempt.task.add_done_callback(_log_background_failure)
            self._merch_attempt = attempt

        attempt.waiting += 1
        try:
            return await asyncio.wait_for(asyncio.shield(attempt.task), self.merch_ceiling), False
        except asyncio.TimeoutError:
            stale = self._stale_merch()
            log.warning(f"Merchandise fetch exceeded {self.merch_ceiling}s, using stored data ({len(stale)} items)")
            return stale, False
        except SourceUnavailableError as e:
            stale = self._stale_merch()
            log.warning(f"Merchandise unavailable ({e.resource}), using stored data ({len(stale)} items)")
            return stale, False
        finally:
            attempt.waiting -= 1

    async def get_merch(self) -> List[dict]:
        items, _ = await self._lookup_merch()
        return items

    async def wait_for_background(self) -> None:
        attempt = self._merch_attempt
        if attempt is not None:
            await asyncio.gather(attempt.task, return_exceptions=True)

    # ── Passes ─────────────────────────────────────────────────
    async def _run_category(self, key: str, result: AggregationPass) -> None:
        try:
            if key == TALENT_MERCH_KEY:
                value, was_cached = await self._lookup_merch()
            else:
                value, was_cached = await self._lookup(key, self.fetchers[key])
        except Exception as e:
            log.error(f"Error fetching {key}: {e}")
            result.errors[key] = f"{type(e).__name__}: {e}"
            value, was_cached = [], False
        if was_cached:
            result.cached.append(key)
        result.categories[key] = value

    async def run_pass(self, keys: Optional[List[str]] = None) -> AggregationPass:
        """Every category concurrently; one failing never blocks the rest."""
        keys = [k for k in (keys or CATEGORY_KEYS) if k in self.fetchers]
        result = AggregationPass(categories={})
        await asyncio.gather(*(self._run_category(key, result) for key in keys))
        result.categories = {key: result.categories[key] for key in keys}
        if result.errors:
            log.warning(f"Pass finished with {len(result.errors)} failed categories: {sorted(result.errors)}")
        else:
            log.info(f"Pass finished: {len(keys)} categories, {len(result.cached)} from cache")
        return result

    async def force_refresh(self) -> AggregationPass:
        """Drop every cached category, then fetch everything again."""
        for key in CATEGORY_KEYS:
            self.cache.remove(key)
        log.info("Cache cleared, refreshing all categories")
        return await self.run_pass()

    def cache_status(self) -> List[Dict[str, Any]]:
        return self.cache.status(CATEGORY_KEYS)


@asynccontextmanager
async def open_session(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    http: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[AggregationOrchestrator]:
    """One HTTP client, video client and cache per session."""
    settings = settings or Settings()
    own_client = http is None
    client = http or httpx.AsyncClient(follow_redirects=True, timeout=15.0)
    cache = KeyedCache(store if store is not None else open_store(settings.store_url))
    sources = Sources(
        settings=settings,
        http=client,
        holodex=HolodexClient(client, settings.holodex_api_key, settings.holodex_api_url),
        cache=cache,
    )
    orchestrator = AggregationOrchestrator(sources)
    try:
        yield orchestrator
    finally:
        await orchestrator.wait_for_background()
        if own_client:
            await client.aclose()
