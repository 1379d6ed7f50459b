"""RSS 2.0 / Atom feed parsing without an XML parser.

Feeds in the wild are frequently not well-formed XML (unescaped ampersands,
stray HTML, truncated payloads), so items are located by splitting on
<item>/<entry> blocks and fields are pulled out with ordered rules. A
broken feed yields fewer items, never an error.
"""

import re
from typing import Optional, Union

from content_pipeline.extractors.dates import normalize_date
from content_pipeline.extractors.text import (
    ExtractionRule,
    element_rule,
    extract_first,
    rule,
    strip_html,
)
from content_pipeline.models import FeedItem

MAX_DESCRIPTION_LENGTH = 300

_ITEM_RE = re.compile(r"<item(?:\s[^>]*)?>([\s\S]*?)</item>", re.I)
_ENTRY_RE = re.compile(r"<entry(?:\s[^>]*)?>([\s\S]*?)</entry>", re.I)

TITLE_RULES = [element_rule("title")]

RSS_LINK_RULES = [element_rule("link")]
RSS_DESCRIPTION_RULES = [element_rule("description"), element_rule("content:encoded")]
RSS_DATE_RULES = [element_rule("pubDate"), element_rule("dc:date")]

# Atom links carry the URL in href; prefer the alternate (HTML) link
ATOM_LINK_RULES: list[ExtractionRule] = [
    rule(r"""<link(?=[^>]*rel=["']alternate["'])[^>]*href=["']([^"']+)["'][^>]*>"""),
    rule(r"""<link[^>]*href=["']([^"']+)["'][^>]*>"""),
]
ATOM_DESCRIPTION_RULES = [element_rule("summary"), element_rule("content")]
ATOM_DATE_RULES = [element_rule("published"), element_rule("updated")]


def _description(block: str, rules: list[ExtractionRule]) -> str:
    # Entities are decoded before tags are stripped, so escaped markup
    # ("&lt;p&gt;") is removed along with real tags
    raw = extract_first(block, rules)
    return strip_html(raw)[:MAX_DESCRIPTION_LENGTH]


def _build_item(
    block: str,
    source_name: str,
    link_rules: list[ExtractionRule],
    description_rules: list[ExtractionRule],
    date_rules: list[ExtractionRule],
) -> Optional[FeedItem]:
    title = strip_html(extract_first(block, TITLE_RULES))
    link = extract_first(block, link_rules)
    if not title or not link:
        return None

    return FeedItem(
        title=title,
        link=link,
        description=_description(block, description_rules),
        publish_date=normalize_date(extract_first(block, date_rules)),
        source_name=source_name,
    )


def parse_rss_items(xml: str, source_name: str) -> list[FeedItem]:
    """Extract RSS 2.0 <item> records in document order."""
    items = []
    for match in _ITEM_RE.finditer(xml):
        item = _build_item(
            match.group(1), source_name, RSS_LINK_RULES, RSS_DESCRIPTION_RULES, RSS_DATE_RULES
        )
        if item:
            items.append(item)
    return items


def parse_atom_entries(xml: str, source_name: str) -> list[FeedItem]:
    """Extract Atom <entry> records in document order."""
    items = []
    for match in _ENTRY_RE.finditer(xml):
        item = _build_item(
            match.group(1), source_name, ATOM_LINK_RULES, ATOM_DESCRIPTION_RULES, ATOM_DATE_RULES
        )
        if item:
            items.append(item)
    return items


def parse_feed(payload: Union[str, bytes, None], source_name: str) -> list[FeedItem]:
    """Parse a feed payload into items.

    RSS 2.0 is tried first; Atom only when no RSS item was found.

    Args:
        payload: Raw feed body (bytes are decoded as UTF-8)
        source_name: Label stored on every item

    Returns:
        Items in document order (not re-sorted)
    """
    if not payload:
        return []
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")

    items = parse_rss_items(payload, source_name)
    if items:
        return items
    return parse_atom_entries(payload, source_name)
