"""
Fandash — Category Fetchers
────────────────────────────
One coroutine per dashboard category. Each takes the session's Sources and
returns raw upstream records (videos) or a finished payload (tweets, merch).
The aggregator normalises video records with normalise() before caching.

Video categories:
  live      live + upcoming streams
  recent    latest uploads (15)
  collabs   collab appearances (15)
  clips     fan clips (15)
  originals original songs, own channel + mentions, grouped by title
  covers    cover songs, own channel + mentions + off-platform collabs
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List

import httpx

from ..cache.keyed_cache import KeyedCache
from ..cache.ttl_config import (
    CLIPS_CACHE_KEY,
    COLLABS_CACHE_KEY,
    COVER_SONGS_KEY,
    LIVE_VIDEOS_KEY,
    ORIGINAL_SONGS_KEY,
    RECENT_VIDEOS_KEY,
    TALENT_MERCH_KEY,
    TWEETS_KEY,
)
from ..config import Settings
from ..dedupe import dedupe_songs
from ..fetchers.holodex import HolodexClient
from ..fetchers.merch import get_talent_merch
from ..fetchers.tweets import get_tweets
from ..models.items import ContentItem
from ..timestamps import parse_instant, resolve

log = logging.getLogger("fandash.orchestrator.categories")

CHANNEL_VIDEO_LIMIT = 15

# Uploads tagged as originals that are not
EXCLUDED_ORIGINAL_IDS = ("opaixR7ZpIE", "Lbv8E-rzVW8")

EXCLUDED_COVER_TITLES = ("Amaya Miyu", "Rora Meeza", "AREA15 Original Song Medley")

# Covers with creators outside the video platform's index
NON_VTUBER_COVER_COLLABS = [
    {
        "videoId":      "W0_iSvXdM6c",
        "title":        "Synchronicity III: Requiem of the Endless World || Aoi Sora × @MoonaHoshinova",
        "channel_name": "Aoi Sora Channel",
        "published_at": "2020-06-08T05:00:14Z",
    },
]


@dataclass
class Sources:
    """Everything a category fetch needs for one session."""
    settings: Settings
    http:     httpx.AsyncClient
    holodex:  HolodexClient
    cache:    KeyedCache


CategoryFetch = Callable[[Sources], Awaitable[Any]]


def to_content_item(record: Dict[str, Any]) -> ContentItem:
    raw = record.get("raw") or {}
    channel = record.get("channel") or raw.get("channel") or {}
    status = record.get("status") or raw.get("status") or ""
    scheduled = None
    if status == "upcoming":
        scheduled = parse_instant(raw.get("start_scheduled") or record.get("scheduledStart"))
    return ContentItem(
        id=record.get("videoId") or raw.get("id", ""),
        title=record.get("title") or raw.get("title", ""),
        status=status,
        published_at=resolve(record),
        scheduled_start=scheduled,
        channel_name=channel.get("name") or "",
        raw=raw,
    )


def normalise(records: List[Dict[str, Any]]) -> List[dict]:
    return [to_content_item(r).to_dict() for r in records]


def _present(videos: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [v for v in videos if v.get("status") != "missing"]


# ── Channel feeds ──────────────────────────────────────────────

async def fetch_live(src: Sources) -> List[dict]:
    videos = await src.holodex.live_videos(src.settings.channel_id)
    return _present(videos)


async def _channel(src: Sources, video_type: str) -> List[dict]:
    videos = await src.holodex.channel_videos(src.settings.channel_id, video_type, limit=CHANNEL_VIDEO_LIMIT)
    return _present(videos)


async def fetch_recent(src: Sources) -> List[dict]:
    return await _channel(src, "videos")


async def fetch_collabs(src: Sources) -> List[dict]:
    return await _channel(src, "collabs")


async def fetch_clips(src: Sources) -> List[dict]:
    return await _channel(src, "clips")


# ── Songs ──────────────────────────────────────────────────────

async def fetch_original_songs(src: Sources) -> List[dict]:
    channel_id = src.settings.channel_id
    own = await src.holodex.channel_videos(channel_id, "videos", limit=50, topic="Original_Song")
    mentioned = await src.holodex.videos(
        mentioned_channel_id=channel_id, topic="Original_Song",
        limit=25, sort="available_at", order="desc",
    )
    candidates = [
        v for v in own + mentioned
        if v.get("status") != "missing" and v.get("videoId") not in EXCLUDED_ORIGINAL_IDS
    ]
    songs = dedupe_songs(candidates)
    log.debug(f"Original songs: {len(candidates)} candidates → {len(songs)} after grouping")
    return songs


def _off_platform_covers() -> List[Dict[str, Any]]:
    return [
        {
            "videoId": c["videoId"],
            "title":   c["title"],
            "status":  "available",
            "channel": {"name": c["channel_name"]},
            "raw": {
                "id":           c["videoId"],
                "title":        c["title"],
                "status":       "available",
                "channel":      {"name": c["channel_name"]},
                "published_at": c["published_at"],
                "available_at": c["published_at"],
            },
        }
        for c in NON_VTUBER_COVER_COLLABS
    ]


async def fetch_cover_songs(src: Sources) -> List[dict]:
    channel_id = src.settings.channel_id
    own = await src.holodex.videos(
        channel_id=channel_id, topic="Music_Cover", limit=25, sort="available_at", order="desc")
    mentioned = await src.holodex.videos(
        mentioned_channel_id=channel_id, topic="Music_Cover", limit=25, sort="available_at", order="desc")
    covers = [
        v for v in own + mentioned
        if v.get("status") != "missing"
        and not any(excluded in (v.get("title") or "") for excluded in EXCLUDED_COVER_TITLES)
    ]
    covers += _off_platform_covers()
    return sorted(covers, key=resolve, reverse=True)


# ── Scraped feeds ──────────────────────────────────────────────

async def fetch_tweets(src: Sources) -> dict:
    return (await get_tweets(src.http, src.settings)).to_dict()


async def fetch_merch(src: Sources) -> List[dict]:
    return await get_talent_merch(src.cache, src.http, src.settings)


# Categories whose records are normalised into ContentItem before caching
VIDEO_CATEGORIES = frozenset({
    LIVE_VIDEOS_KEY, RECENT_VIDEOS_KEY, COLLABS_CACHE_KEY,
    CLIPS_CACHE_KEY, ORIGINAL_SONGS_KEY, COVER_SONGS_KEY,
})

CATEGORY_FETCHERS: Dict[str, CategoryFetch] = {
    LIVE_VIDEOS_KEY:    fetch_live,
    RECENT_VIDEOS_KEY:  fetch_recent,
    COLLABS_CACHE_KEY:  fetch_collabs,
    CLIPS_CACHE_KEY:    fetch_clips,
    ORIGINAL_SONGS_KEY: fetch_original_songs,
    COVER_SONGS_KEY:    fetch_cover_songs,
    TWEETS_KEY:         fetch_tweets,
    TALENT_MERCH_KEY:   fetch_merch,
}
