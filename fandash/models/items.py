"""
Fandash — Item Models
──────────────────────
Canonical shapes for everything a category can return.
Each model serialises to plain JSON via to_dict(); that dict is what the
cache stores and what the orchestrator hands to the renderer.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat().replace("+00:00", "Z") if value else None


@dataclass
class ContentItem:
    """A video, song, collab or clip."""
    id:              str
    title:           str
    status:          str
    published_at:    Optional[datetime] = None   # always resolved, never copied
    scheduled_start: Optional[datetime] = None
    channel_name:    str = ""
    raw:             Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id":              self.id,
            "title":           self.title,
            "status":          self.status,
            "published_at":    _iso(self.published_at),
            "scheduled_start": _iso(self.scheduled_start),
            "channel_name":    self.channel_name,
            "raw":             self.raw,
        }


@dataclass
class MediaAttachment:
    type: str    # "image" | "video"
    url:  str


@dataclass
class SocialPost:
    id:              str
    text:            str
    timestamp:       float                      # epoch seconds
    is_reply:        bool = False
    is_retweet:      bool = False
    is_quote:        bool = False
    is_space:        bool = False
    reply_to:        str = ""
    retweeted_from:  str = ""
    quoted_from:     str = ""
    quoted_post_id:  str = ""
    original_author: str = ""
    space_url:       str = ""
    stats:           Dict[str, int] = field(default_factory=dict)
    media:           List[MediaAttachment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)



@dataclass
class MerchItem:
    title:               str
    price:               str = ""
    image_url:           str = ""
    secondary_image_url: str = ""
    item_url:            str = ""
    image_alt:           str = ""

    def to_dict(self) -> dict:
        return asdict(self)


# ── Category payloads ─────────────────────────────────────────

@dataclass
class TweetsPayload:
    tweets: List[SocialPost]
    source: Optional[str] = None

    def to_dict(self) -> dict:
        return {"tweets": [t.to_dict() for t in self.tweets], "source": self.source}


@dataclass
class FetchError:
    """Explicit failure sentinel. Lets the renderer tell "no posts" from "could not fetch"."""
    message: str

    def to_dict(self) -> dict:
        return {"error": True, "message": self.message}


def is_error_payload(value: Any) -> bool:
    return isinstance(value, dict) and value.get("error") is True
