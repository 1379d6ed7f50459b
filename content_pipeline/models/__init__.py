"""Data models for the content pipeline."""

from content_pipeline.models.records import (
    ArticleMetadata,
    ArticleScrapeResult,
    CrawlResult,
    FeedBatch,
    FeedItem,
    StudyRecord,
    TerminationReason,
    failure_record,
)

__all__ = [
    "ArticleMetadata",
    "ArticleScrapeResult",
    "CrawlResult",
    "FeedBatch",
    "FeedItem",
    "StudyRecord",
    "TerminationReason",
    "failure_record",
]
