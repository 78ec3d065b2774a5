"""
Fandash — Dashboard Summary
────────────────────────────
Derived views over one aggregation pass, computed after the fact so the
cached payloads stay exactly what the upstream sources returned.

  recent / collabs   finished uploads only (live and upcoming removed), first 6
  upcoming           scheduled streams, soonest first, first 5
  latest_activity    newest of: latest upload, latest collab, latest post
  platform_down      every video category failed in this pass
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..cache.ttl_config import COLLABS_CACHE_KEY, LIVE_VIDEOS_KEY, RECENT_VIDEOS_KEY, TWEETS_KEY
from ..models.items import is_error_payload
from ..timestamps import EPOCH, parse_instant, resolve
from .aggregator import AggregationPass
from .categories import VIDEO_CATEGORIES

CARD_LIMIT     = 6
UPCOMING_LIMIT = 5

_ACTIVE = ("live", "upcoming")


def _status(item: Dict[str, Any]) -> str:
    return item.get("status") or (item.get("raw") or {}).get("status") or ""


def finished_only(items: List[Dict[str, Any]], limit: int = CARD_LIMIT) -> List[Dict[str, Any]]:
    return [item for item in items if _status(item) not in _ACTIVE][:limit]


def _scheduled(item: Dict[str, Any]) -> datetime:
    return (parse_instant(item.get("scheduled_start"))
            or parse_instant((item.get("raw") or {}).get("start_scheduled"))
            or EPOCH)


def upcoming_streams(live: List[Dict[str, Any]], limit: int = UPCOMING_LIMIT) -> List[Dict[str, Any]]:
    upcoming = [item for item in live if _status(item) == "upcoming"]
    return sorted(upcoming, key=_scheduled)[:limit]


def _posts(tweets: Any) -> List[Dict[str, Any]]:
    if not isinstance(tweets, dict) or is_error_payload(tweets):
        return []
    return tweets.get("tweets") or []


def latest_activity(recent: List[dict], collabs: List[dict], tweets: Any) -> Optional[datetime]:
    candidates = []
    if recent:
        candidates.append(resolve(recent[0]))
    if collabs:
        candidates.append(resolve(collabs[0]))
    posts = _posts(tweets)
    if posts:
        newest = max(p.get("timestamp") or 0 for p in posts)
        candidates.append(datetime.fromtimestamp(newest, tz=timezone.utc))
    candidates = [c for c in candidates if c > EPOCH]
    return max(candidates) if candidates else None


def build_summary(result: AggregationPass) -> Dict[str, Any]:
    categories = result.categories
    recent  = categories.get(RECENT_VIDEOS_KEY) or []
    collabs = categories.get(COLLABS_CACHE_KEY) or []
    tweets  = categories.get(TWEETS_KEY)
    latest  = latest_activity(recent, collabs, tweets)
    video_keys = [k for k in categories if k in VIDEO_CATEGORIES]

    return {
        "recent":          finished_only(recent),
        "collabs":         finished_only(collabs),
        "upcoming":        upcoming_streams(categories.get(LIVE_VIDEOS_KEY) or []),
        "latest_activity": latest.isoformat().replace("+00:00", "Z") if latest else None,
        "tweets_error":    tweets.get("message") if is_error_payload(tweets) else None,
        "platform_down":   bool(video_keys) and all(k in result.errors for k in video_keys),
    }
