"""Extract article metadata (title, publisher, publish date) from HTML.

Each field is resolved by a waterfall, tried in order of preference:

Title:      OpenGraph → Twitter card → <title> (site suffix stripped) → <h1>
Publisher:  og:site_name → Schema.org publisher → hostname
Date:       Schema.org datePublished → article:published_time → <time> →
            meta date tags → DC.date
"""

import re
from typing import Callable, Optional
from urllib.parse import urlparse

from content_pipeline.extractors.dates import normalize_date
from content_pipeline.extractors.text import (
    decode_entities,
    extract_first,
    iter_matches,
    meta_rules,
    rule,
)
from content_pipeline.models import ArticleMetadata

# Publishers the editorial team sees most often
KNOWN_PUBLISHERS = {
    "trugreen.com": "TruGreen",
    "scotts.com": "Scotts",
    "sunday.com": "Sunday Lawn Care",
    "lawnstarter.com": "LawnStarter",
    "lawnlove.com": "Lawn Love",
    "thisoldhouse.com": "This Old House",
    "bhg.com": "Better Homes & Gardens",
    "hgtv.com": "HGTV",
    "bobvila.com": "Bob Vila",
    "familyhandyman.com": "Family Handyman",
}

UNKNOWN_PUBLISHER = "Unknown"

# Title rules keep entities; the waterfall decodes the winner once
OG_TITLE_RULES = meta_rules("property", "og:title", unwrap=False)
TWITTER_TITLE_RULES = meta_rules("name", "twitter:title", unwrap=False)
TITLE_TAG_RULES = [rule(r"<title[^>]*>([^<]+)</title>", unwrap=False)]
H1_RULES = [rule(r"<h1[^>]*>([^<]+)</h1>", unwrap=False)]

# "Article Title | Site Name", "Article Title - Site Name"
_SITE_SUFFIX_RE = re.compile(r"\s*\|\s*[^|]+$|\s+[–-]\s+[^|–-]+$")

SITE_NAME_RULES = meta_rules("property", "og:site_name")
SCHEMA_PUBLISHER_RULES = [
    rule(r'"publisher"\s*:\s*\{[^{}]*?"name"\s*:\s*"([^"]+)"'),
]

DATE_RULES = [
    rule(r'"datePublished"\s*:\s*"([^"]+)"'),
    *meta_rules("property", "article:published_time"),
    rule(r"""<time\b[^>]*datetime=["']([^"']+)["'][^>]*>"""),
    *meta_rules("name", "date|pubdate|publish_date|publication_date"),
    *meta_rules("name", r"DC\.date"),
]


def publisher_from_url(url: str) -> str:
    """Derive a display name for the site hosting `url`.

    Known domains map to their brand name; anything else gets a readable
    name from the first hostname label ("green-industry.com" → "Green Industry").
    """
    try:
        hostname = urlparse(url).hostname
    except (ValueError, TypeError, AttributeError):
        return UNKNOWN_PUBLISHER
    if not hostname:
        return UNKNOWN_PUBLISHER

    hostname = re.sub(r"^www\.", "", hostname)
    if hostname in KNOWN_PUBLISHERS:
        return KNOWN_PUBLISHERS[hostname]

    label = hostname.split(".")[0]
    words = re.split(r"[-_]", label)
    return " ".join(word[:1].upper() + word[1:] for word in words if word) or UNKNOWN_PUBLISHER


def _title_from_title_tag(html: str) -> Optional[str]:
    title = extract_first(html, TITLE_TAG_RULES)
    if not title:
        return None
    return _SITE_SUFFIX_RE.sub("", title).strip() or None


def extract_title(html: str) -> Optional[str]:
    """Run the title waterfall; entities are decoded in the result."""
    strategies: list[Callable[[str], Optional[str]]] = [
        lambda h: extract_first(h, OG_TITLE_RULES),
        lambda h: extract_first(h, TWITTER_TITLE_RULES),
        _title_from_title_tag,
        lambda h: extract_first(h, H1_RULES),
    ]
    for strategy in strategies:
        title = strategy(html)
        if title:
            return decode_entities(title).strip()
    return None


def extract_publisher(html: str, url: str) -> str:
    """og:site_name overrides the hostname; Schema.org only without it."""
    site_name = extract_first(html, SITE_NAME_RULES)
    if site_name:
        return site_name

    schema_publisher = extract_first(html, SCHEMA_PUBLISHER_RULES)
    if schema_publisher:
        return schema_publisher

    return publisher_from_url(url)


def extract_publish_date(html: str) -> Optional[str]:
    """First candidate that normalizes to a date wins.

    Unparseable candidates do not stop the waterfall.
    """
    for candidate in iter_matches(html, DATE_RULES):
        parsed = normalize_date(candidate, date_only=True)
        if parsed:
            return parsed
    return None


def extract_article_metadata(html: Optional[str], url: str) -> ArticleMetadata:
    """Extract title, publisher and publish date from an article page.

    Publisher always has a value; title and date may be None.
    """
    if not html:
        return ArticleMetadata(publisher=publisher_from_url(url))

    return ArticleMetadata(
        title=extract_title(html),
        publisher=extract_publisher(html, url),
        publish_date=extract_publish_date(html),
    )
