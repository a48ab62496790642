from .atom import (
    FeedEntry,
    FeedLink,
    fetch_feed,
    has_duplicates,
    new_entries,
    parse_feed,
    summary_text,
)

__all__ = [
    "FeedEntry",
    "FeedLink",
    "fetch_feed",
    "has_duplicates",
    "new_entries",
    "parse_feed",
    "summary_text",
]
