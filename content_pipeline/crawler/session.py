"""Per-crawl state: seen URLs, accumulated records, termination."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from content_pipeline.models import CrawlResult, StudyRecord, TerminationReason


def normalize_url(url: str) -> str:
    """Dedup key: trailing slash stripped, case folded."""
    return url.rstrip("/").lower()


def page_url(base_url: str, page: int) -> str:
    """Page 1 is the listing itself; page N is <base>page/N/."""
    if page <= 1:
        return base_url
    return f"{base_url}page/{page}/"


@dataclass
class CrawlSession:
    """State for one crawl call. Never shared between crawls."""

    base_url: str
    max_pages: int
    current_page: int = 0
    pages_walked: int = 0
    seen: set[str] = field(default_factory=set)
    records: list[StudyRecord] = field(default_factory=list)
    reason: Optional[TerminationReason] = None
    error: Optional[str] = None

    def next_page_url(self) -> str:
        """Advance to the next page and return its URL."""
        self.current_page += 1
        return page_url(self.base_url, self.current_page)

    @property
    def has_more_pages(self) -> bool:
        return self.reason is None and self.current_page < self.max_pages

    def admit(self, records: Iterable[StudyRecord]) -> int:
        """Append records not seen earlier in this crawl. Returns the new count."""
        new_count = 0
        for record in records:
            key = normalize_url(record.url)
            if key in self.seen:
                continue
            self.seen.add(key)
            self.records.append(record)
            new_count += 1
        return new_count

    def stop(self, reason: TerminationReason, error: Optional[str] = None) -> None:
        self.reason = reason
        self.error = error

    def result(self) -> CrawlResult:
        return CrawlResult(
            records=list(self.records),
            pages_walked=self.pages_walked,
            reason=self.reason or TerminationReason.PAGE_LIMIT,
            error=self.error,
        )
