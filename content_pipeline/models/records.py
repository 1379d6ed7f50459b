"""Data models for extracted records."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class FeedItem(BaseModel):
    """One item from an RSS 2.0 or Atom feed."""

    title: str
    link: str
    description: str = ""  # Plain text, at most 300 chars
    publish_date: Optional[str] = None  # Full ISO timestamp
    source_name: str = ""

    def to_record(self) -> dict:
        """Convert to the JSON shape consumed by the dashboard."""
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "pubDate": self.publish_date,
            "source": self.source_name,
        }


class ArticleMetadata(BaseModel):
    """Best-effort metadata for a single article page."""

    title: Optional[str] = None
    publisher: str = "Unknown"  # Never null
    publish_date: Optional[str] = None  # YYYY-MM-DD

    def to_record(self) -> dict:
        return {
            "title": self.title,
            "publisher": self.publisher,
            "publishDate": self.publish_date,
        }


class StudyRecord(BaseModel):
    """A study/article found on a paginated listing page."""

    id: str
    title: str
    url: str
    brand: str
    publish_date: Optional[str] = None  # YYYY-MM-DD
    excerpt: Optional[str] = None
    image: Optional[str] = None

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "brand": self.brand,
            "publishDate": self.publish_date,
            "excerpt": self.excerpt,
            "image": self.image,
        }


class TerminationReason(str, Enum):
    """Why a paginated crawl stopped."""

    END_OF_PAGINATION = "404"
    THIN_CONTENT = "thin-content"
    NO_NEW_CONTENT = "no-new-content"
    PAGE_LIMIT = "max-pages"
    FETCH_ERROR = "error"


class CrawlResult(BaseModel):
    """Outcome of one paginated crawl."""

    records: list[StudyRecord] = Field(default_factory=list)
    pages_walked: int = 0
    reason: TerminationReason = TerminationReason.PAGE_LIMIT
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_record(self) -> dict:
        record = {
            "success": self.success,
            "studies": [r.to_record() for r in self.records],
            "totalPages": self.pages_walked,
            "totalStudies": len(self.records),
            "reason": self.reason.value,
        }
        if self.error:
            record["error"] = self.error
        return record


class FeedBatch(BaseModel):
    """Merged result of fetching many feed sources at once."""

    items: list[FeedItem] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_count: int = 0
    items_by_source: dict[str, int] = Field(default_factory=dict)  # Before merge/dedup
    failed_sources: dict[str, str] = Field(default_factory=dict)  # name -> reason

    def to_record(self) -> dict:
        return {
            "success": True,
            "items": [item.to_record() for item in self.items],
            "fetchedAt": self.fetched_at.isoformat().replace("+00:00", "Z"),
            "sourceCount": self.source_count,
        }


class ArticleScrapeResult(BaseModel):
    """Outcome of scraping one article URL."""

    url: str
    metadata: Optional[ArticleMetadata] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.metadata is not None

    def to_record(self) -> dict:
        if self.success:
            return {"success": True, "data": self.metadata.to_record(), "url": self.url}
        return {"success": False, "error": self.error or "No metadata extracted", "url": self.url}


def failure_record(error: str) -> dict:
    """Structured failure returned in place of a record."""
    return {"success": False, "error": error}
