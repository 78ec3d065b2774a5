"""
Fandash — Merchandise Pipeline
───────────────────────────────
  1. A legacy {data, timestamp} record under 12 hours old is served as-is.
  2. Otherwise the shop page is fetched through proxy A → proxy B → direct
     (10 s per attempt) and parsed with MERCH_STRATEGIES.
  3. A non-empty result is persisted in the legacy shape, which is also
     what the orchestrator falls back to when the shop is unreachable.

Raises SourceUnavailableError("MERCH_UNAVAILABLE") when every transport
fails or no strategy finds an item.
"""

import logging
from typing import List, Optional

import httpx

from ..cache.keyed_cache import KeyedCache, LegacyMerchRecord
from ..cache.ttl_config import MERCH_FRESH_DURATION, TALENT_MERCH_KEY
from ..config import Settings
from .extractors import MERCH_STRATEGIES, ExtractContext, extract, parse_html
from .transport import Resource, SourceFetcher, proxy_chain

log = logging.getLogger("fandash.fetchers.merch")

MERCH_RESOURCE = "MERCH_UNAVAILABLE"


def fresh_legacy(cache: KeyedCache, max_age: int = MERCH_FRESH_DURATION) -> Optional[List[dict]]:
    record = cache.peek(TALENT_MERCH_KEY)
    if not isinstance(record, LegacyMerchRecord) or not record.data or not record.timestamp:
        return None
    age = cache.clock() - record.timestamp
    if age >= max_age:
        log.debug("Stored merchandise older than 12 hours, fetching fresh data")
        return None
    log.info(f"Using stored merchandise ({age / 3600000:.2f} hours old)")
    return record.data


async def get_talent_merch(cache: KeyedCache, client: httpx.AsyncClient, settings: Settings) -> List[dict]:
    stored = fresh_legacy(cache)
    if stored:
        return stored

    fetcher = SourceFetcher(
        client,
        proxy_chain(settings.cors_proxies, settings.browser_headers),
        timeout=settings.merch_fetch_timeout,
    )
    context = ExtractContext(
        base_url=settings.merch_shop_url,
        keywords=settings.merch_keywords,
        default_title="Moona Merch Item",
    )

    def parse(host: str, bodies: List[str]):
        return extract(parse_html(bodies[0]), MERCH_STRATEGIES, context)

    result = await fetcher.fetch(Resource(MERCH_RESOURCE, paths=(settings.merch_shop_url,)), parse)
    items = [item.to_dict() for item in result.value]
    log.info(f"Found {len(items)} merchandise items via {result.transport}")
    cache.set_legacy(TALENT_MERCH_KEY, items)
    return items
