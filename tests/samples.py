"""Markup captured from the shop and mirror pages, trimmed to what parsers read."""

SHOP_ITEM_CARDS = """
<html><body><div class="collection">
  <a class="Item_inner" href="/products/moona-acrylic-stand">
    <span class="Item_images">
      <img class="primary-image" src="//cdn.shop.test/acrylic.jpg" alt="Acrylic stand">
      <img class="secondary-image" src="//cdn.shop.test/acrylic-back.jpg">
    </span>
    <span class="Item_body"> Moona Acrylic Stand </span>
    <span class="Item_info_price">$20.00</span>
  </a>
  <a class="Item_inner" href="/products/moona-sold-out">
    <span class="thumb_disable"></span>
    <span class="Item_body">Sold Out Towel</span>
    <span class="Item_info_price">$15.00</span>
  </a>
  <a class="Item_inner">
    <span class="Item_body">Broken card without a link</span>
  </a>
</div></body></html>
"""

SHOP_PRODUCT_CARDS = """
<html><body>
  <div class="product-card">
    <a href="/products/moona-birthday-set"><span class="product-card__title">Birthday Set 2024</span></a>
    <span class="product-card__image"><img src="/files/birthday.jpg" alt="Birthday"></span>
    <span class="product-card__price">$45.00</span>
  </div>
</body></html>
"""

SHOP_PRODUCT_LINKS = """
<html><body>
  <a href="/products/moona-plush"><img src="//cdn.shop.test/plush.jpg"><span class="title">Plush</span><span class="price">$30</span></a>
  <a href="/products/moona-keychain"><img src="//cdn.shop.test/key.jpg"></a>
  <a href="/products/someone-else-plush"><span class="title">Not ours</span></a>
</body></html>
"""

SHOP_EMPTY = "<html><body><p>Maintenance</p></body></html>"


def timeline_item(post_id: str, text: str, date: str = "Jan 15, 2024 · 3:45 PM UTC",
                  extra: str = "", author: str = "moonahoshinova") -> str:
    return f"""
  <div class="timeline-item">
    <a class="tweet-link" href="/moonahoshinova/status/{post_id}#m"></a>
    <div class="tweet-body">
      <div class="tweet-header">
        <a class="username" href="/{author}">@{author}</a>
        <span class="tweet-date"><a href="/moonahoshinova/status/{post_id}#m" title="{date}">1h</a></span>
      </div>
      {extra}
      <div class="tweet-content media-body">{text}</div>
    </div>
  </div>"""


_RETWEET = timeline_item("112", "Retweeted post", "Jan 14, 2024 · 9:00 AM UTC",
                         '<div class="retweet-header">Moona retweeted</div>', author="ollie")
_QUOTE = timeline_item("113", "Check this", "Jan 13, 2024 · 9:00 AM UTC",
                       '<div class="quote"><a class="quote-link" href="/reine/status/700#m"></a>'
                       '<a class="username" href="/reine">@reine</a></div>')
_REPLY_DUPLICATE = timeline_item("111", "Hello moon (duplicate from replies)")
_LATE_REPLY = timeline_item("114", "Late night reply", "Jan 16, 2024 · 11:30 PM UTC")
_LOOSE = timeline_item("211", "Outside the usual container")

TIMELINE_PAGE = f"""
<html><body><div class="timeline">
  <div class="timeline-item">
    <div class="pinned"><span class="icon-pin"></span>Pinned Tweet</div>
    <a class="tweet-link" href="/moonahoshinova/status/999#m"></a>
    <span class="tweet-date"><a href="/moonahoshinova/status/999#m" title="Jan 1, 2023 · 1:00 AM UTC">1y</a></span>
    <div class="tweet-content media-body">Pinned post</div>
  </div>
  <div class="timeline-item">
    <a class="tweet-link" href="/moonahoshinova/status/111#m"></a>
    <div class="tweet-body">
      <div class="tweet-header">
        <span class="tweet-date"><a href="/moonahoshinova/status/111#m" title="Jan 15, 2024 · 3:45 PM UTC">1h</a></span>
      </div>
      <div class="replying-to">Replying to <a href="/kronii">@kronii</a></div>
      <div class="tweet-content media-body">Hello moon</div>
      <div class="attachments">
        <div class="gallery-row">
          <div class="attachment image"><img src="/pic/media%2FGabc.jpg"></div>
        </div>
      </div>
      <div class="tweet-stats">
        <span class="tweet-stat"><span class="icon-comment"></span> 12</span>
        <span class="tweet-stat"><span class="icon-retweet"></span> 3</span>
        <span class="tweet-stat"><span class="icon-heart"></span> 1,204</span>
      </div>
    </div>
  </div>
  {_RETWEET}
  {_QUOTE}
  <div class="timeline-item">
    <div class="tweet-content media-body">No link and no date</div>
  </div>
</div></body></html>
"""

REPLIES_PAGE = f"""
<html><body><div class="timeline">
  {_REPLY_DUPLICATE}
  {_LATE_REPLY}
</div></body></html>
"""

LOOSE_TIMELINE_PAGE = f"""
<html><body><div class="profile-timeline">
  {_LOOSE}
</div></body></html>
"""

BARE_BODIES_PAGE = """
<html><body>
  <div class="tweet-body">
    <span class="tweet-date"><a href="/moonahoshinova/status/311#m" title="Feb 2, 2024 · 8:05 AM UTC">2d</a></span>
    <div class="tweet-content">Only a tweet body</div>
  </div>
</body></html>
"""

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:atom="http://www.w3.org/2005/Atom">
<channel>
  <title>Moona Hoshinova / @moonahoshinova</title>
  <item>
    <title>R to @kronii: see you there</title>
    <dc:creator>@moonahoshinova</dc:creator>
    <description><![CDATA[<p>see you there</p><img src="https://nitter-a.test/pic/media%2FGxyz.jpg?name=small" />]]></description>
    <pubDate>Mon, 15 Jan 2024 18:00:00 GMT</pubDate>
    <link>https://nitter-a.test/moonahoshinova/status/222#m</link>
  </item>
  <item>
    <title>Space time https://twitter.com/i/spaces/1AbCdEf</title>
    <dc:creator>@moonahoshinova</dc:creator>
    <description><![CDATA[<p><a href="https://twitter.com/i/spaces/1AbCdEf">twitter.com/i/spaces/1AbCdEf</a></p>]]></description>
    <pubDate>Sun, 14 Jan 2024 12:00:00 GMT</pubDate>
    <link>https://nitter-a.test/moonahoshinova/status/333#m</link>
  </item>
  <item>
    <title>look at this</title>
    <description><![CDATA[<p>look at this</p><p><a href="https://nitter-a.test/kronii/status/444#m">nitter-a.test/kronii/status/444</a></p>]]></description>
    <pubDate>Sat, 13 Jan 2024 12:00:00 GMT</pubDate>
    <link>https://nitter-a.test/moonahoshinova/status/555#m</link>
  </item>
  <item>
    <title>RT by @moonahoshinova: great cover</title>
    <dc:creator>@ollie</dc:creator>
    <description><![CDATA[<p>great cover</p><video><source src="https://nitter-a.test/video/enc/video.twimg.com%2Ftweet_video%2FGv1.mp4" /></video>]]></description>
    <pubDate>Fri, 12 Jan 2024 12:00:00 GMT</pubDate>
    <link>https://nitter-a.test/ollie/status/666#m</link>
  </item>
  <item>
    <title>broken item without a date</title>
    <link>https://nitter-a.test/moonahoshinova/status/777#m</link>
  </item>
</channel>
</rss>
"""

RSS_REPLIES_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel><title>replies</title>
  <item>
    <title>R to @kronii: see you there</title>
    <description><![CDATA[<p>see you there</p>]]></description>
    <pubDate>Mon, 15 Jan 2024 18:00:00 GMT</pubDate>
    <link>https://nitter-a.test/moonahoshinova/status/222#m</link>
  </item>
</channel></rss>
"""
