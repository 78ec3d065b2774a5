"""
Fandash — Deduplicator / Ranker
────────────────────────────────
Platforms publish one creative work several times (original, remaster,
instrumental, a collab reupload). dedupe_songs() keeps one card per work;
dedupe_posts() merges post feeds by id.
"""

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, TypeVar

from .timestamps import resolve

log = logging.getLogger("fandash.dedupe")

T = TypeVar("T")

# Hiragana, katakana, CJK punctuation, half/full-width forms, kanji
_CJK = "[\u3000-\u303f\u3040-\u309f\u30a0-\u30ff\uff00-\uff9f\u4e00-\u9faf\u3400-\u4dbf]"
_CJK_RE = re.compile(_CJK)

# Applied in order; later patterns assume earlier ones already ran
_TITLE_RULES = [
    (r"[\[【].*?[\]】]", ""),                                   # bracketed annotations
    (r"(MV|Official|Music Video|Video|Music|Animated)", ""),    # release markers
    (r"\(.*?(remastered|ver|version).*?\)", ""),
    (r"（.*?(remastered|ver|version).*?）", ""),
    (r"\(.*?\)", ""),
    (r"（.*?）", ""),
    (r"feat\.|ft\.", ""),
    (r"\s+feat(?:\.|ur(?:ing)?)?\s+.*$", ""),
    (r"moona\s+hoshinova\s*[-–]\s*", ""),
    (r"\s*[-–]\s*moona\s+hoshinova", ""),
    (r"moona\s+hoshinova", ""),
    (r"\s*[-–]\s*", " "),
    (r"\s*\|\|\s*", " - "),
    (r"\s+", " "),
    (r"instrumental", ""),
    (r"remastered(\s+ver(sion)?)?", ""),
    (r"^['\"]", ""),
    (r"['\"]$", ""),
    (r"\s*\[Original Song\]", ""),
    (r"\s*\[.*?\]", ""),
    (r"\s*\(.*?\)", ""),
    (r"\s*（.*?）", ""),
    (r"\s*hololive\s+id", ""),
]
_COMPILED_RULES = [(re.compile(p, re.IGNORECASE), r) for p, r in _TITLE_RULES]

_ORIGINAL_MARKER = re.compile(r"Original Song|Official|MV", re.IGNORECASE)
_REMASTER_MARKER = re.compile(r"remastered|remaster\s+ver")


def normalize_title(title: str) -> str:
    """Grouping key for a song title."""
    clean = title or ""
    for pattern, repl in _COMPILED_RULES:
        clean = pattern.sub(repl, clean)
    clean = clean.strip().lower()

    # "日本語タイトル - Romanized Title" → keep the Japanese part
    if _CJK_RE.search(clean):
        parts = re.split(r"\s-\s", clean)
        if len(parts) > 1:
            for part in parts:
                if _CJK_RE.search(part):
                    clean = part.strip()
                    break
    return clean


def _title(item: Any) -> str:
    if isinstance(item, dict):
        return item.get("title") or ""
    return getattr(item, "title", "") or ""


def song_priority(item: Any) -> tuple:
    """Sort key: lower is better."""
    title = _title(item)
    lowered = title.lower()
    return (
        "】" not in title,
        _ORIGINAL_MARKER.search(title) is None,
        "instrumental" in lowered,
        _REMASTER_MARKER.search(lowered) is not None,
        -resolve(item).timestamp(),
    )


def group_songs(items: Iterable[T], key: Callable[[str], str] = normalize_title) -> Dict[str, List[T]]:
    groups: Dict[str, List[T]] = {}
    for item in items:
        group_key = key(_title(item))
        log.debug(f"Title cleaning: {_title(item)!r} -> {group_key!r}")
        groups.setdefault(group_key, []).append(item)
    return groups


def dedupe_songs(items: Iterable[T]) -> List[T]:
    """One representative per normalised title, newest first."""
    winners = [min(group, key=song_priority) for group in group_songs(items).values()]
    return sorted(winners, key=lambda item: resolve(item), reverse=True)


def _post_id(post: Any) -> Any:
    if isinstance(post, dict):
        return post.get("id")
    return getattr(post, "id", None)


def dedupe_posts(*feeds: Iterable[T]) -> List[T]:
    """Exact-id merge across feeds. First seen wins, so feed order decides."""
    seen = set()
    unique: List[T] = []
    for feed in feeds:
        for post in feed:
            post_id = _post_id(post)
            if post_id in seen:
                continue
            seen.add(post_id)
            unique.append(post)
    return unique
