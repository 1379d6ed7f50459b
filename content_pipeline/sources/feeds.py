"""Industry news feeds followed by the editorial team."""

import re

from pydantic import BaseModel


class FeedSource(BaseModel):
    """A named RSS/Atom feed."""

    id: str
    name: str
    url: str
    category: str = "industry"

    class Config:
        extra = "ignore"


DEFAULT_FEED_SOURCES = [
    FeedSource(
        id="lawnandlandscape",
        name="Lawn & Landscape",
        url="https://www.lawnandlandscape.com/rss",
    ),
    FeedSource(
        id="greenindustrypros",
        name="Green Industry Pros",
        url="https://www.greenindustrypros.com/rss",
    ),
]


def parse_source_option(value: str) -> FeedSource:
    """Parse a "Name=URL" command-line value into a FeedSource."""
    name, sep, url = value.partition("=")
    if not sep or not name.strip() or not url.strip():
        raise ValueError(f"Expected NAME=URL, got {value!r}")
    name = name.strip()
    slug = re.sub(r"[^a-z0-9]+", "", name.lower()) or "feed"
    return FeedSource(id=slug, name=name, url=url.strip())
