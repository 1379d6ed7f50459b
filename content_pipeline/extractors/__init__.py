"""Tolerant extraction engine.

This package turns raw, possibly malformed markup into records:
1. text: ordered regex rules, entity decoding, tag stripping
2. dates: date normalization with a fallback chain
3. feeds: RSS 2.0 / Atom items
4. article: title/publisher/date waterfalls for article pages
5. fetch: HTTP header profiles and a non-raising GET
"""

from content_pipeline.extractors.article import extract_article_metadata, publisher_from_url
from content_pipeline.extractors.dates import newest_first, normalize_date
from content_pipeline.extractors.feeds import parse_feed
from content_pipeline.extractors.fetch import FetchResult, browser_headers, feed_headers, fetch_text
from content_pipeline.extractors.text import (
    ExtractionRule,
    clean_text,
    decode_entities,
    extract_first,
    strip_html,
)

__all__ = [
    "extract_article_metadata",
    "publisher_from_url",
    "newest_first",
    "normalize_date",
    "parse_feed",
    "FetchResult",
    "browser_headers",
    "feed_headers",
    "fetch_text",
    "ExtractionRule",
    "clean_text",
    "decode_entities",
    "extract_first",
    "strip_html",
]
