"""Extract study records from one listing (category) page.

Two passes over the raw HTML, merged:
1. Anchor scan: links under the source's link prefix with usable text
2. Heading scan: <h1>-<h4> wrapping a link, which upgrades short titles
   and picks up records the anchor scan missed

Dates (<time datetime>) and images (<img src>) found on the page are then
assigned to records by position: the Nth value goes to the Nth record still
missing that field. There is no proximity matching.
"""

import re
import time
from typing import Optional
from urllib.parse import urlparse

from content_pipeline.crawler.session import normalize_url
from content_pipeline.extractors.dates import normalize_date
from content_pipeline.extractors.text import decode_entities, strip_html
from content_pipeline.models import StudyRecord
from content_pipeline.sources.studies import StudySource

EXCLUDED_PATH_MARKERS = ("/category/", "/tag/", "/page/")
GENERIC_LINK_TEXT = ("read more", "continue reading")
MIN_LINK_TEXT_LENGTH = 5
MIN_HEADING_TITLE_LENGTH = 5  # Heading-only records need a title longer than this

# Decorative or tracking images, never a study thumbnail
EXCLUDED_IMAGE_MARKERS = ("logo", "icon", "avatar", "pixel", "1x1", "tracking")

_TIME_RE = re.compile(r"""<time\b[^>]*datetime=["']([^"']+)["'][^>]*>""", re.I)
_IMG_RE = re.compile(r"""<img\b[^>]*src=["']([^"']+)["'][^>]*>""", re.I)


def _anchor_pattern(link_prefix: str) -> re.Pattern:
    prefix = re.escape(link_prefix)
    return re.compile(
        rf"""<a[^>]*href=["']([^"']*{prefix}[^"']+)["'][^>]*>([^<]*)</a>""",
        re.I,
    )


def _heading_pattern(link_prefix: str) -> re.Pattern:
    prefix = re.escape(link_prefix)
    # The lead-in may not cross the heading's closing tag
    return re.compile(
        rf"""<h([1-4])[^>]*>(?:(?!</h[1-4]>)[\s\S])*?"""
        rf"""<a[^>]*href=["']([^"']*{prefix}[^"']+)["'][^>]*>([\s\S]*?)</a>"""
        rf"""[\s\S]*?</h\1>""",
        re.I,
    )


def study_id(url: str, id_prefix: str) -> str:
    """Record id from the last URL path segment, e.g. "ll-best-cities".

    URLs without a path get a generated "study-<epoch ms>" slug.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        path = ""
    segments = [s for s in path.split("/") if s]
    slug = segments[-1] if segments else f"study-{int(time.time() * 1000)}"
    return f"{id_prefix}-{slug}"


def _is_listing_url(url: str, listing_url: str) -> bool:
    normalized = normalize_url(url)
    listing = normalize_url(listing_url)
    if normalized == listing:
        return True
    listing_segments = [s for s in urlparse(listing_url).path.split("/") if s]
    return bool(listing_segments) and normalized.endswith("/" + listing_segments[-1].lower())


def is_excluded_url(url: str, page_url: str, listing_url: str) -> bool:
    """Pagination, category and tag pages, and the listing itself."""
    if any(marker in url for marker in EXCLUDED_PATH_MARKERS):
        return True
    if url == page_url:
        return True
    return _is_listing_url(url, listing_url)


def is_generic_text(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in GENERIC_LINK_TEXT)


def _clean_title(raw: str) -> str:
    return decode_entities(strip_html(raw)).strip()


def _new_record(url: str, title: str, source: StudySource) -> StudyRecord:
    return StudyRecord(
        id=study_id(url, source.id_prefix),
        title=title,
        url=url,
        brand=source.brand,
    )


def scan_anchors(html: str, page_url: str, source: StudySource) -> list[StudyRecord]:
    """Pass 1: plain anchors pointing under the link prefix."""
    records = []
    seen: set[str] = set()

    for match in _anchor_pattern(source.link_prefix).finditer(html):
        url = match.group(1)
        text = _clean_title(match.group(2))

        if is_excluded_url(url, page_url, source.listing_url):
            continue

        # The first anchor for a URL decides, even if its text is unusable
        key = normalize_url(url)
        if key in seen:
            continue
        seen.add(key)

        if len(text) < MIN_LINK_TEXT_LENGTH or is_generic_text(text):
            continue

        records.append(_new_record(url, text, source))

    return records


def merge_headings(
    html: str,
    page_url: str,
    source: StudySource,
    records: list[StudyRecord],
) -> list[StudyRecord]:
    """Pass 2: heading-wrapped anchors upgrade titles or add records."""
    by_url = {normalize_url(r.url): r for r in records}

    for match in _heading_pattern(source.link_prefix).finditer(html):
        url = match.group(2)
        title = _clean_title(match.group(3))

        if is_excluded_url(url, page_url, source.listing_url):
            continue

        key = normalize_url(url)
        existing = by_url.get(key)
        if existing:
            if len(title) > len(existing.title):
                existing.title = title
        elif len(title) > MIN_HEADING_TITLE_LENGTH:
            record = _new_record(url, title, source)
            records.append(record)
            by_url[key] = record

    return records


def collect_dates(html: str) -> list[str]:
    """Every parseable <time datetime> value, in document order."""
    dates = []
    for match in _TIME_RE.finditer(html):
        parsed = normalize_date(match.group(1), date_only=True)
        if parsed:
            dates.append(parsed)
    return dates


def collect_images(html: str) -> list[str]:
    """Every <img src> that is not a logo/icon/tracker, in document order."""
    images = []
    for match in _IMG_RE.finditer(html):
        src = match.group(1)
        lowered = src.lower()
        if any(marker in lowered for marker in EXCLUDED_IMAGE_MARKERS):
            continue
        images.append(src)
    return images


def backfill_by_position(records: list[StudyRecord], field: str, values: list[str]) -> int:
    """Give the Nth value to the Nth record whose `field` is empty.

    Existing values are never overwritten. Returns the number filled.
    """
    missing = [r for r in records if getattr(r, field) is None]
    filled = 0
    for record, value in zip(missing, values):
        setattr(record, field, value)
        filled += 1
    return filled


def parse_listing_page(
    html: Optional[str],
    page_url: str,
    source: StudySource,
) -> list[StudyRecord]:
    """Extract study records from one listing page, in first-seen order."""
    if not html:
        return []

    records = scan_anchors(html, page_url, source)
    records = merge_headings(html, page_url, source, records)

    if records:
        backfill_by_position(records, "publish_date", collect_dates(html))
        backfill_by_position(records, "image", collect_images(html))

    return records
