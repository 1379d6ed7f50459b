"""Feed sources and brand listing definitions."""

from content_pipeline.sources.feeds import DEFAULT_FEED_SOURCES, FeedSource, parse_source_option
from content_pipeline.sources.studies import STUDY_SOURCES, StudySource, get_study_source

__all__ = [
    "DEFAULT_FEED_SOURCES",
    "FeedSource",
    "parse_source_option",
    "STUDY_SOURCES",
    "StudySource",
    "get_study_source",
]
