from .items import (
    ContentItem,
    FetchError,
    MediaAttachment,
    MerchItem,
    SocialPost,
    TweetsPayload,
    is_error_payload,
)

__all__ = [
    "ContentItem", "FetchError", "MediaAttachment", "MerchItem",
    "SocialPost", "TweetsPayload", "is_error_payload",
]
