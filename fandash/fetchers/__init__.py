from .holodex import HolodexClient, VideoClientError
from .merch import get_talent_merch
from .transport import Resource, SourceFetcher, SourceUnavailableError, TierResult, Transport, proxy_chain
from .tweets import get_rss_posts, get_tweets, scrape_timeline

__all__ = [
    "HolodexClient", "VideoClientError", "get_talent_merch",
    "Resource", "SourceFetcher", "SourceUnavailableError", "TierResult", "Transport", "proxy_chain",
    "get_rss_posts", "get_tweets", "scrape_timeline",
]
