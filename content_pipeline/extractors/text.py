"""Tolerant pattern extraction over raw markup.

Markup from third-party sites is routinely malformed, so fields are pulled
out with ordered regex rules evaluated against the raw text instead of a
parsed document. A rule that does not match is a normal outcome.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

# Entities seen in feeds and article heads; anything else is left as-is
HTML_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&#x27;": "'",
    "&#x2F;": "/",
    "&nbsp;": " ",
}

_ENTITY_LOOKUP = {entity.lower(): char for entity, char in HTML_ENTITIES.items()}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in HTML_ENTITIES), re.I)
_CDATA_RE = re.compile(r"<!\[CDATA\[|\]\]>")
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractionRule:
    """A single extraction strategy: pattern + capture group.

    When `unwrap` is set, the captured value has CDATA markers removed and
    entities decoded before it is returned.
    """

    pattern: re.Pattern
    group: Union[int, str] = 1
    unwrap: bool = True


def rule(pattern: str, group: Union[int, str] = 1, unwrap: bool = True) -> ExtractionRule:
    """Compile a case-insensitive rule."""
    return ExtractionRule(re.compile(pattern, re.I), group, unwrap)


def meta_rules(attr: str, names: str, unwrap: bool = True) -> list[ExtractionRule]:
    """Rules for a <meta> tag, in both attribute orders.

    `names` is a regex alternation matched against the `attr` attribute,
    e.g. meta_rules("property", "og:title").
    """
    key = rf"""{attr}=["'](?:{names})["']"""
    value = r"""content=(?P<q>["'])(?P<value>.*?)(?P=q)"""
    return [
        rule(rf"<meta[^>]*{key}[^>]*{value}", "value", unwrap),
        rule(rf"<meta[^>]*{value}[^>]*{key}", "value", unwrap),
    ]


def element_rule(tag: str) -> ExtractionRule:
    """Rule for the text content of an element, CDATA-wrapped or not."""
    return rule(rf"<{tag}(?:\s[^>]*)?>(?:<!\[CDATA\[)?([\s\S]*?)(?:\]\]>)?</{tag}>")


def decode_entities(text: Optional[str]) -> str:
    """Replace the known HTML entities with literal characters."""
    if not text:
        return ""
    # Single pass, so "&amp;lt;" becomes "&lt;" rather than "<"
    return _ENTITY_RE.sub(lambda m: _ENTITY_LOOKUP[m.group(0).lower()], text)


def strip_html(html: Optional[str]) -> str:
    """Remove all tags and collapse whitespace."""
    if not html:
        return ""
    text = _TAG_RE.sub("", html)
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_text(text: Optional[str]) -> str:
    """Remove CDATA markers, decode entities and trim."""
    if not text:
        return ""
    return decode_entities(_CDATA_RE.sub("", text)).strip()


def iter_matches(text: Optional[str], rules: Iterable[ExtractionRule]) -> Iterator[str]:
    """Yield the non-empty value of every matching rule, in rule order."""
    if not text:
        return
    for r in rules:
        match = r.pattern.search(text)
        if not match:
            continue
        value = match.group(r.group) or ""
        value = clean_text(value) if r.unwrap else value.strip()
        if value:
            yield value


def extract_first(text: Optional[str], rules: Iterable[ExtractionRule]) -> Optional[str]:
    """Return the first non-empty decoded match, else None."""
    return next(iter_matches(text, rules), None)
