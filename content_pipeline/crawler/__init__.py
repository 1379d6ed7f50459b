"""Paginated listing crawler for brand study archives."""

from content_pipeline.crawler.listing import parse_listing_page
from content_pipeline.crawler.paginated import crawl_listing
from content_pipeline.crawler.session import CrawlSession, normalize_url, page_url

__all__ = [
    "parse_listing_page",
    "crawl_listing",
    "CrawlSession",
    "normalize_url",
    "page_url",
]
