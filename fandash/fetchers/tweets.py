"""
Fandash — Social Posts
───────────────────────
Two independent feeds for one account, both served by mirror instances:

  scrape_timeline()  HTML timeline + with_replies pages   → NITTER_UNAVAILABLE
  get_rss_posts()    RSS feed + with_replies feed          → RSS_FETCH_FAILED

get_tweets() runs both concurrently and merges them (timeline first, so a
timeline record wins over the RSS rendering of the same post). When neither
feed yields anything the result is an explicit FetchError, never an empty
list, so the renderer can tell "no posts" from "could not fetch".
"""

import asyncio
import logging
from typing import List, Union

import httpx

from ..config import Settings
from ..dedupe import dedupe_posts
from ..models.items import FetchError, SocialPost, TweetsPayload
from .extractors import TIMELINE_STRATEGIES, ExtractContext, extract, parse_html, parse_rss_posts
from .transport import Resource, SourceFetcher, SourceUnavailableError, proxy_chain

log = logging.getLogger("fandash.fetchers.tweets")

TIMELINE_RESOURCE = "NITTER_UNAVAILABLE"
RSS_RESOURCE      = "RSS_FETCH_FAILED"
RSS_LIMIT         = 6

NO_POSTS_MESSAGE  = "Unable to fetch tweets at the moment, please try again later."
ERROR_MESSAGE     = "An error occurred while fetching tweets."


def _newest_first(posts: List[SocialPost]) -> List[SocialPost]:
    return sorted(posts, key=lambda p: p.timestamp, reverse=True)


def _social_fetcher(client: httpx.AsyncClient, settings: Settings) -> SourceFetcher:
    return SourceFetcher(client, proxy_chain(settings.social_proxies))


async def scrape_timeline(client: httpx.AsyncClient, settings: Settings) -> TweetsPayload:
    user = settings.twitter_username
    resource = Resource(
        TIMELINE_RESOURCE,
        paths=(f"/{user}", f"/{user}/with_replies"),
        hosts=tuple(settings.nitter_instances),
    )

    def parse(host: str, bodies: List[str]) -> List[SocialPost]:
        context = ExtractContext(base_url=host)
        pages = [extract(parse_html(body), TIMELINE_STRATEGIES, context) for body in bodies]
        return _newest_first(dedupe_posts(*pages))

    result = await _social_fetcher(client, settings).fetch(resource, parse)
    log.info(f"Scraped {len(result.value)} tweets from {result.host}")
    return TweetsPayload(tweets=result.value, source=result.host)


async def get_rss_posts(client: httpx.AsyncClient, settings: Settings) -> List[SocialPost]:
    user = settings.twitter_username
    resource = Resource(
        RSS_RESOURCE,
        paths=(f"/{user}/rss", f"/{user}/with_replies/rss"),
        hosts=tuple(settings.nitter_instances),
    )

    def parse(host: str, bodies: List[str]) -> List[SocialPost]:
        # Unparsable XML raises and fails the tier
        feeds = [parse_rss_posts(body, f"@{user}") for body in bodies]
        return _newest_first(dedupe_posts(*feeds))[:RSS_LIMIT]

    result = await _social_fetcher(client, settings).fetch(resource, parse)
    log.info(f"Got {len(result.value)} RSS tweets from {result.host}")
    return result.value


async def get_tweets(client: httpx.AsyncClient, settings: Settings) -> Union[TweetsPayload, FetchError]:
    async def scraped() -> TweetsPayload:
        try:
            return await scrape_timeline(client, settings)
        except SourceUnavailableError as e:
            log.warning(f"Nitter scraping failed: {e.resource}")
            return TweetsPayload(tweets=[], source=None)

    async def from_rss() -> List[SocialPost]:
        try:
            return await get_rss_posts(client, settings)
        except Exception as e:
            log.warning(f"RSS fetch failed: {e}")
            return []

    try:
        timeline, rss = await asyncio.gather(scraped(), from_rss())
    except Exception as e:
        log.error(f"Error fetching tweets: {e}")
        return FetchError(ERROR_MESSAGE)

    log.debug(f"Got {len(timeline.tweets)} scraped tweets from {timeline.source} and {len(rss)} RSS tweets")
    if not timeline.tweets and not rss:
        return FetchError(NO_POSTS_MESSAGE)

    return TweetsPayload(tweets=_newest_first(dedupe_posts(timeline.tweets, rss)), source=timeline.source)
