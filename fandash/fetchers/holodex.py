"""
Fandash — Video Platform Client
────────────────────────────────
Thin async client for the Holodex v2 REST API.

  live_videos(channel_id)                    GET /users/live?channels=
  channel_videos(channel_id, type, **flt)    GET /channels/{id}/{type}
  videos(**flt)                              GET /videos

Every method returns plain video records:
    {"videoId", "title", "status", "scheduledStart", "channel", "raw"}
where `raw` is the untouched API object. Failures raise VideoClientError.
One client per session; the caller owns the httpx.AsyncClient.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from .. import config

log = logging.getLogger("fandash.fetchers.holodex")

REQUEST_TIMEOUT = 12
RETRY_ATTEMPTS  = 3
RETRY_DELAY     = 2.0

VIDEO_TYPES = ("videos", "clips", "collabs")


class VideoClientError(Exception):
    """The video platform could not be reached or answered with an error."""


def to_record(raw: Dict[str, Any]) -> Dict[str, Any]:
    channel = raw.get("channel") or {}
    return {
        "videoId":        raw.get("id", ""),
        "title":          raw.get("title", ""),
        "status":         raw.get("status", ""),
        "scheduledStart": raw.get("start_scheduled"),
        "channel":        {"id": channel.get("id"), "name": channel.get("name") or channel.get("english_name")},
        "raw":            raw,
    }


class HolodexClient:

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str = config.HOLODEX_API_KEY,
        base_url: str = config.HOLODEX_API_URL,
        retry_delay: float = RETRY_DELAY,
    ):
        self.client      = client
        self.base_url    = base_url.rstrip("/")
        self.headers     = {"X-APIKEY": api_key, "Accept": "application/json"} if api_key else {"Accept": "application/json"}
        self.retry_delay = retry_delay

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        params = {k: v for k, v in (params or {}).items() if v is not None}
        last_error = ""
        for attempt in range(RETRY_ATTEMPTS):
            try:
                r = await self.client.get(url, params=params, headers=self.headers, timeout=REQUEST_TIMEOUT)
                if r.status_code == 200:
                    return r.json()
                if r.status_code == 429:
                    wait = self.retry_delay * (attempt + 1) * 2
                    log.warning(f"Rate limited — waiting {wait}s")
                    await asyncio.sleep(wait)
                    last_error = "HTTP 429"
                    continue
                if r.status_code in (401, 403, 404):
                    raise VideoClientError(f"HTTP {r.status_code} from {path}")
                last_error = f"HTTP {r.status_code}"
                log.warning(f"HTTP {r.status_code} from {path}")
            except httpx.TimeoutException:
                last_error = "timeout"
                log.warning(f"Timeout (attempt {attempt+1}): {path}")
            except (httpx.HTTPError, ValueError) as e:
                last_error = str(e)
                log.warning(f"Error (attempt {attempt+1}): {e}")
            if attempt < RETRY_ATTEMPTS - 1:
                await asyncio.sleep(self.retry_delay)
        raise VideoClientError(f"{path} failed after {RETRY_ATTEMPTS} attempts: {last_error}")

    @staticmethod
    def _records(payload: Any) -> List[Dict[str, Any]]:
        # /videos answers with {"total", "items"} when paginated
        if isinstance(payload, dict):
            payload = payload.get("items", [])
        if not isinstance(payload, list):
            raise VideoClientError(f"Unexpected response shape: {type(payload).__name__}")
        return [to_record(v) for v in payload if isinstance(v, dict)]

    async def live_videos(self, channel_id: str) -> List[Dict[str, Any]]:
        return self._records(await self._get("/users/live", {"channels": channel_id}))

    async def channel_videos(self, channel_id: str, video_type: str = "videos", **filters) -> List[Dict[str, Any]]:
        if video_type not in VIDEO_TYPES:
            raise ValueError(f"Unknown video type: {video_type}")
        return self._records(await self._get(f"/channels/{channel_id}/{video_type}", filters))

    async def videos(self, **filters) -> List[Dict[str, Any]]:
        return self._records(await self._get("/videos", filters))
