"""
Fandash — Timestamp Resolver
─────────────────────────────
Upstream records carry up to four date fields, at the top level and again
inside the nested `raw` record, and populate them inconsistently. The
canonical instant of an item is the latest of whichever parse.

Items with no usable date resolve to the epoch so they sort last.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterator, List, Mapping, Optional

log = logging.getLogger("fandash.timestamps")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DATE_FIELDS = ("published_at", "available_at", "start_scheduled", "start_actual")


def parse_instant(value: Any) -> Optional[datetime]:
    """ISO string, datetime or epoch-milliseconds number → aware UTC datetime."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, (int, float)):
            dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        else:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _field(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def _candidates(item: Any) -> Iterator[Any]:
    raw = _field(item, "raw")
    for source in (item, raw):
        for name in DATE_FIELDS:
            value = _field(source, name)
            if value:
                yield value


def resolve(item: Any) -> datetime:
    instants: List[datetime] = []
    for value in _candidates(item):
        parsed = parse_instant(value)
        if parsed is not None:
            instants.append(parsed)
    if not instants:
        log.debug(f"No valid date found for {_field(item, 'title')!r}")
        return EPOCH
    return max(instants)
