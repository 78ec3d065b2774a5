"""
Fandash — Configuration
────────────────────────
Every knob is read from the environment (or a local .env file) once at
import time. Settings bundles them so callers and tests can build variants
without touching os.environ.

Environment variables:
  HOLODEX_API_KEY        — video platform API key
  HOLODEX_API_URL        — https://holodex.net/api/v2
  TALENT_CHANNEL_ID      — channel the dashboard follows
  TWITTER_USERNAME       — account mirrored through Nitter
  NITTER_INSTANCES       — comma list of mirror hosts, tried in order
  CORS_PROXIES           — comma list of proxy prefixes for the shop page
  SOCIAL_PROXIES         — comma list of proxy prefixes for Nitter
  MERCH_SHOP_URL         — shop collection page
  MERCH_FETCH_TIMEOUT    — seconds per merch transport attempt (10)
  MERCH_OVERALL_TIMEOUT  — seconds before merch falls back to storage (3)
  UPDATE_INTERVAL        — seconds between watch-mode passes (600)
  FANDASH_STORE          — memory | file:<path> | redis://...
  REDIS_URL              — store used when FANDASH_STORE is unset
  LOG_LEVEL              — root log level (INFO)
  VERBOSE                — true → DEBUG logging
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


# ── Config ─────────────────────────────────────────────────────
HOLODEX_API_KEY       = os.getenv("HOLODEX_API_KEY", "")
HOLODEX_API_URL       = os.getenv("HOLODEX_API_URL", "https://holodex.net/api/v2").rstrip("/")
TALENT_CHANNEL_ID     = os.getenv("TALENT_CHANNEL_ID", "UCP0BspO_AMEe3aQqqpo89Dg")
TWITTER_USERNAME      = os.getenv("TWITTER_USERNAME", "moonahoshinova")
NITTER_INSTANCES      = _csv(os.getenv(
    "NITTER_INSTANCES", "https://nitter.moonaroh.com,https://nitter.privacydev.net"))
CORS_PROXIES          = _csv(os.getenv(
    "CORS_PROXIES", "https://api.codetabs.com/v1/proxy?quest=,https://corsproxy.io/?"))
SOCIAL_PROXIES        = _csv(os.getenv("SOCIAL_PROXIES", "https://api.codetabs.com/v1/proxy?quest="))
MERCH_SHOP_URL        = os.getenv("MERCH_SHOP_URL", "https://shop.hololivepro.com/en/collections/moonahoshinova")
MERCH_FETCH_TIMEOUT   = float(os.getenv("MERCH_FETCH_TIMEOUT", "10"))
MERCH_OVERALL_TIMEOUT = float(os.getenv("MERCH_OVERALL_TIMEOUT", "3"))
UPDATE_INTERVAL       = int(os.getenv("UPDATE_INTERVAL", "600"))
FANDASH_STORE         = os.getenv("FANDASH_STORE") or os.getenv("REDIS_URL") or "memory"
LOG_LEVEL             = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE               = os.getenv("VERBOSE", "false").lower() == "true"

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml",
    "Accept-Language": "en-US,en;q=0.9",
}

# Keywords a generic shop link must contain to belong to the talent
MERCH_KEYWORDS = ("moona", "hoshinova", "moonahoshinova")


@dataclass
class Settings:
    holodex_api_key:       str             = HOLODEX_API_KEY
    holodex_api_url:       str             = HOLODEX_API_URL
    channel_id:            str             = TALENT_CHANNEL_ID
    twitter_username:      str             = TWITTER_USERNAME
    nitter_instances:      Tuple[str, ...] = NITTER_INSTANCES
    cors_proxies:          Tuple[str, ...] = CORS_PROXIES
    social_proxies:        Tuple[str, ...] = SOCIAL_PROXIES
    merch_shop_url:        str             = MERCH_SHOP_URL
    merch_fetch_timeout:   float           = MERCH_FETCH_TIMEOUT
    merch_overall_timeout: float           = MERCH_OVERALL_TIMEOUT
    merch_keywords:        Tuple[str, ...] = MERCH_KEYWORDS
    update_interval:       int             = UPDATE_INTERVAL
    store_url:             str             = FANDASH_STORE
    browser_headers:       dict            = field(default_factory=lambda: dict(BROWSER_HEADERS))
