"""
Fandash — TTL Configuration
────────────────────────────
Single source of truth for cache durations and storage keys.
All durations are milliseconds; record timestamps are epoch milliseconds
so entries written by one session stay readable by the next.
"""

# ── Durations (ms) ─────────────────────────────────────────────

CACHE_DURATION        = 5 * 60 * 1000          # standard {value, timestamp} records
MERCH_LEGACY_DURATION = 4 * 3600 * 1000        # legacy {data, timestamp} via the standard read path
MERCH_FRESH_DURATION  = 12 * 3600 * 1000       # legacy record still good enough to skip the shop

# ── Storage keys ───────────────────────────────────────────────

LIVE_VIDEOS_KEY       = "liveVideos"
RECENT_VIDEOS_KEY     = "recentVideos"
TWEETS_KEY            = "tweets"
COLLABS_CACHE_KEY     = "collabVideos"
CLIPS_CACHE_KEY       = "clipVideos"
ORIGINAL_SONGS_KEY    = "originalSongs"
COVER_SONGS_KEY       = "coverSongs"
TALENT_MERCH_KEY      = "moonaMerch"
PREFERENCES_KEY       = "moonaPreferences"

# Categories fetched by one aggregation pass, in display order
CATEGORY_KEYS = (
    LIVE_VIDEOS_KEY,
    RECENT_VIDEOS_KEY,
    COLLABS_CACHE_KEY,
    CLIPS_CACHE_KEY,
    ORIGINAL_SONGS_KEY,
    COVER_SONGS_KEY,
    TWEETS_KEY,
    TALENT_MERCH_KEY,
)

CATEGORY_LABELS = {
    LIVE_VIDEOS_KEY:    "Live videos",
    RECENT_VIDEOS_KEY:  "Recent videos",
    TWEETS_KEY:         "Tweets",
    CLIPS_CACHE_KEY:    "Clips",
    COLLABS_CACHE_KEY:  "Collabs",
    ORIGINAL_SONGS_KEY: "Original songs",
    COVER_SONGS_KEY:    "Cover songs",
    TALENT_MERCH_KEY:   "Merchandise",
}
