"""
Fandash — HTML Extractors
──────────────────────────
Scraped pages change without notice, so each record type has a prioritised
list of independent strategies: `(document, context) -> list[record]`.
extract() returns the first non-empty result.

  MERCH_STRATEGIES     shop item cards → product cards → any product link
  TIMELINE_STRATEGIES  mirror timeline items → loose items → bare tweet bodies

Every strategy skips sold-out (`.thumb_disable`) or pinned (`.pinned`)
elements, and a record whose markup is missing a required child is skipped
on its own without aborting the rest.

RSS feeds have one stable shape and are parsed by parse_rss_posts().
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from ..models.items import MediaAttachment, MerchItem, SocialPost

log = logging.getLogger("fandash.fetchers.extractors")

SOLD_OUT_MARKER = ".thumb_disable"
PINNED_MARKER   = ".pinned"
SPACE_TEXT      = "🎙️ Started a Twitter Space"


@dataclass(frozen=True)
class ExtractContext:
    base_url:      str = ""
    keywords:      Tuple[str, ...] = ()
    default_title: str = "Merch Item"


Strategy = Callable[[BeautifulSoup, ExtractContext], List[Any]]


def parse_html(text: str) -> BeautifulSoup:
    return BeautifulSoup(text or "", "lxml")


def extract(document: BeautifulSoup, strategies: Sequence[Strategy], context: ExtractContext) -> List[Any]:
    for strategy in strategies:
        records = strategy(document, context)
        if records:
            log.debug(f"{strategy.__name__} found {len(records)} records")
            return records
        log.debug(f"{strategy.__name__} found nothing, trying next strategy")
    return []


def _collect(elements: Iterable[Tag], build: Callable[[Tag], Optional[Any]], label: str) -> List[Any]:
    records = []
    for element in elements:
        try:
            record = build(element)
        except Exception as e:
            log.debug(f"Error processing {label}: {e}")
            continue
        if record is not None:
            records.append(record)
    return records


def _text(element: Optional[Tag]) -> str:
    return element.get_text().strip() if element is not None else ""


def _attr(element: Optional[Tag], name: str) -> str:
    if element is None:
        return ""
    return element.get(name) or ""


def _absolute(url: str, base_url: str) -> str:
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("/") and base_url:
        return urljoin(base_url, url)
    return url


# ══════════════════════════════════════════════════════════════
# MERCHANDISE
# ══════════════════════════════════════════════════════════════

def merch_item_cards(doc: BeautifulSoup, ctx: ExtractContext) -> List[MerchItem]:
    def build(item: Tag) -> Optional[MerchItem]:
        if item.select_one(SOLD_OUT_MARKER):
            log.debug("Skipping sold out item")
            return None
        images = item.select_one(".Item_images")
        primary = images.select_one(".primary-image") if images else None
        secondary = images.select_one(".secondary-image") if images else None
        secondary_url = _attr(secondary, "src")
        return MerchItem(
            title=_text(item.select_one(".Item_body")),
            price=_text(item.select_one(".Item_info_price")),
            image_url=_absolute(_attr(primary, "src"), ctx.base_url),
            secondary_image_url=_absolute(secondary_url, ctx.base_url) if secondary_url else "",
            item_url=_absolute(item["href"], ctx.base_url),
            image_alt=_attr(primary, "alt"),
        )

    return _collect(doc.select(".Item_inner"), build, "merchandise item")


def merch_product_cards(doc: BeautifulSoup, ctx: ExtractContext) -> List[MerchItem]:
    def build(card: Tag) -> Optional[MerchItem]:
        if card.select_one(SOLD_OUT_MARKER):
            log.debug("Skipping sold out product card")
            return None
        image = card.select_one(".product-card__image img")
        return MerchItem(
            title=_text(card.select_one(".product-card__title")),
            price=_text(card.select_one(".product-card__price")),
            image_url=_absolute(_attr(image, "src"), ctx.base_url),
            item_url=_absolute(_attr(card.select_one("a"), "href"), ctx.base_url),
            image_alt=_attr(image, "alt"),
        )

    return _collect(doc.select(".product-card"), build, "product card")


def merch_product_links(doc: BeautifulSoup, ctx: ExtractContext) -> List[MerchItem]:
    """Last resort: any product link mentioning the talent."""
    def build(link: Tag) -> Optional[MerchItem]:
        href = link.get("href") or ""
        if not any(keyword in href for keyword in ctx.keywords):
            return None
        if link.select_one(SOLD_OUT_MARKER):
            log.debug("Skipping sold out product link")
            return None
        image = link.select_one("img")
        return MerchItem(
            title=_text(link.select_one("h3, .title, .name")) or ctx.default_title,
            price=_text(link.select_one(".price")),
            image_url=_absolute(_attr(image, "src"), ctx.base_url),
            item_url=_absolute(href, ctx.base_url),
            image_alt=_attr(image, "alt"),
        )

    return _collect(doc.select('a[href*="product"]'), build, "product link")


MERCH_STRATEGIES: List[Strategy] = [merch_item_cards, merch_product_cards, merch_product_links]


# ══════════════════════════════════════════════════════════════
# MIRROR TIMELINE
# ══════════════════════════════════════════════════════════════

def status_id(href: str) -> str:
    """'/user/status/123#m' → '123'"""
    if "/status/" not in (href or ""):
        return ""
    return re.split(r"[#?/]", href.split("/status/", 1)[1])[0]


def parse_mirror_date(value: str) -> Optional[datetime]:
    """'Jan 5, 2024 · 3:04 PM UTC' → aware UTC datetime."""
    if not value:
        return None
    cleaned = value.replace(" UTC", "").replace("·", " ")
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    try:
        return datetime.strptime(cleaned, "%b %d, %Y %I:%M %p").replace(tzinfo=timezone.utc)
    except ValueError:
        log.warning(f"Error parsing date: {value!r}")
        return None


def _stat(item: Tag, icon: str) -> int:
    icon_el = item.select_one(icon)
    stat = icon_el.find_parent(class_="tweet-stat") if icon_el is not None else None
    digits = re.sub(r"[^\d]", "", _text(stat))
    return int(digits) if digits else 0


def _timeline_post(item: Tag, ctx: ExtractContext) -> Optional[SocialPost]:
    if item.select_one(PINNED_MARKER):
        log.debug("Skipping pinned tweet")
        return None

    content = item.select_one(".tweet-content")
    if content is None:
        log.debug("No content element found")
        return None

    post_id = status_id(_attr(item.select_one("a.tweet-link"), "href")
                        or _attr(item.select_one(".tweet-date a"), "href"))
    if not post_id:
        log.debug("No tweet ID found")
        return None

    posted = parse_mirror_date(_attr(item.select_one(".tweet-date a"), "title"))
    if posted is None:
        log.debug(f"No usable date for tweet {post_id}")
        return None

    reply_header = item.select_one(".replying-to")
    retweet_header = item.select_one(".retweet-header")
    quote = item.select_one(".quote")

    post = SocialPost(
        id=post_id,
        text=content.get_text().strip(),
        timestamp=int(posted.timestamp()),
        is_reply=reply_header is not None,
        is_retweet=retweet_header is not None,
        is_quote=quote is not None,
    )
    if reply_header is not None:
        post.reply_to = _text(reply_header.select_one("a"))
    if retweet_header is not None:
        post.retweeted_from = _text(item.select_one(".username"))
    if quote is not None:
        post.quoted_from = _text(quote.select_one(".username"))
        if post.quoted_from:
            post.quoted_post_id = status_id(_attr(quote.select_one("a.quote-link"), "href"))

    post.stats = {
        "replies":  _stat(item, ".icon-comment"),
        "retweets": _stat(item, ".icon-retweet"),
        "likes":    _stat(item, ".icon-heart"),
    }

    for img in item.select(".attachments .attachment.image img, .gallery-row img"):
        url = _attr(img, "src")
        if url:
            post.media.append(MediaAttachment("image", _absolute(url, ctx.base_url)))
    for source in item.select(".attachments .gallery-video video source, .gallery-video video source"):
        url = _attr(source, "src")
        if url:
            post.media.append(MediaAttachment("video", _absolute(url, ctx.base_url)))
    return post


def timeline_items(doc: BeautifulSoup, ctx: ExtractContext) -> List[SocialPost]:
    return _collect(doc.select(".timeline .timeline-item"), lambda el: _timeline_post(el, ctx), "tweet")


def loose_timeline_items(doc: BeautifulSoup, ctx: ExtractContext) -> List[SocialPost]:
    """Timeline items outside the usual container."""
    return _collect(doc.select(".timeline-item"), lambda el: _timeline_post(el, ctx), "tweet")


def tweet_bodies(doc: BeautifulSoup, ctx: ExtractContext) -> List[SocialPost]:
    """Bare tweet bodies; the id comes from the date link."""
    return _collect(doc.select(".tweet-body"), lambda el: _timeline_post(el, ctx), "tweet body")


TIMELINE_STRATEGIES: List[Strategy] = [timeline_items, loose_timeline_items, tweet_bodies]


# ══════════════════════════════════════════════════════════════
# RSS
# ══════════════════════════════════════════════════════════════

_VIDEO_RE = re.compile(r"video\.twimg\.com%2Ftweet_video%2F([^.]+\.mp4)")
_IMAGE_RE = re.compile(r"/media%2F([^.]+\.[^?]+)")


def parse_rss(text: str) -> List[Tag]:
    """<item> elements of an RSS document. Raises ValueError if it is not RSS."""
    doc = BeautifulSoup(text or "", "xml")
    if doc.find("channel") is None:
        raise ValueError("not an RSS document")
    return doc.find_all("item")


def _rss_media(description: BeautifulSoup) -> List[MediaAttachment]:
    media = []
    for element in description.find_all(["img", "video"]):
        if element.name == "video":
            match = _VIDEO_RE.search(_attr(element.find("source"), "src"))
            if match:
                media.append(MediaAttachment("video", f"https://video.twimg.com/tweet_video/{match.group(1)}"))
        else:
            match = _IMAGE_RE.search(_attr(element, "src"))
            if match:
                media.append(MediaAttachment("image", f"https://pbs.twimg.com/media/{match.group(1)}"))
    return media


def rss_post(item: Tag, default_author: str) -> Optional[SocialPost]:
    link = _text(item.find("link"))
    post_id = status_id(link)
    pub_date = _text(item.find("pubDate"))
    if not post_id or not pub_date:
        return None

    title = _text(item.find("title"))
    creator = _text(item.find("creator")) or default_author
    description = BeautifulSoup(_text(item.find("description")), "lxml")
    paragraphs = description.find_all("p")
    first_link = _attr(description.find("a"), "href")

    post = SocialPost(
        id=post_id,
        text="",
        timestamp=parsedate_to_datetime(pub_date).timestamp(),
        is_retweet=title.startswith("RT by"),
        is_reply=title.startswith("R to"),
        original_author=creator,
        media=_rss_media(description),
    )

    if "/spaces/" in first_link or "/spaces/" in title:
        space_source = first_link if "/spaces/" in first_link else title
        space_id = re.split(r"[/#]", space_source.split("/spaces/", 1)[1])[0]
        post.is_space = True
        post.space_url = f"https://twitter.com/i/spaces/{space_id}"
        post.text = SPACE_TEXT
    else:
        post.text = paragraphs[0].get_text() if paragraphs else ""
        if len(paragraphs) > 1:
            quote_link = _attr(paragraphs[1].find("a"), "href")
            if quote_link and "/spaces/" not in quote_link:
                post.is_quote = True
                post.quoted_post_id = status_id(quote_link)
                parts = quote_link.split("/")
                post.quoted_from = parts[3] if len(parts) > 3 else ""

    if post.is_reply:
        post.reply_to = title.split("R to ", 1)[1].split(":")[0].strip()
    return post


def parse_rss_posts(text: str, default_author: str) -> List[SocialPost]:
    return _collect(parse_rss(text), lambda item: rss_post(item, default_author), "RSS item")
