"""Study archive: every brand's studies, merged and cached locally."""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

from content_pipeline import config
from content_pipeline.crawler.paginated import crawl_listing
from content_pipeline.crawler.session import normalize_url
from content_pipeline.extractors.dates import newest_first
from content_pipeline.extractors.fetch import open_client
from content_pipeline.models import StudyRecord
from content_pipeline.sources.studies import STUDY_SOURCES, StudySource

console = Console()

ARCHIVE_FILE = config.CACHE_DIR / "study_archive.json"


class BrandOutcome(BaseModel):
    """How one brand's crawl ended."""

    brand: str
    studies: int = 0
    pages: int = 0
    reason: str = ""
    error: Optional[str] = None


class StudyArchive(BaseModel):
    """Merged studies across brands, newest first."""

    studies: list[StudyRecord] = Field(default_factory=list)
    timestamp: Optional[str] = None  # When the archive was saved
    outcomes: list[BrandOutcome] = Field(default_factory=list)

    def to_record(self) -> dict:
        return {
            "studies": [s.to_record() for s in self.studies],
            "timestamp": self.timestamp,
        }


class ArchiveCache:
    """JSON file holding the last archive build."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or ARCHIVE_FILE

    def load(self) -> Optional[StudyArchive]:
        """Load the cached archive, or None if missing/corrupt."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            studies = [StudyRecord.model_validate(s) for s in data.get("studies", [])]
            return StudyArchive(studies=studies, timestamp=data.get("cached_at"))
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError, OSError, AttributeError) as e:
            console.print(f"[yellow]Failed to load archive cache: {e}[/yellow]")
            return None

    def save(self, studies: list[StudyRecord]) -> Optional[str]:
        """Write studies to disk. Returns the ISO timestamp stored, or None if the write failed."""
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({
                    "cached_at": timestamp,
                    "studies": [s.model_dump() for s in studies],
                }, f, indent=2, ensure_ascii=False)
        except OSError as e:
            console.print(f"[yellow]Failed to save archive cache: {e}[/yellow]")
            return None
        return timestamp

    def clear(self) -> bool:
        """Delete the cache file. Returns True if one existed."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True


def dedupe_studies(studies: Iterable[StudyRecord]) -> list[StudyRecord]:
    """Keep the first study per normalized URL (cross-posted studies)."""
    seen: set[str] = set()
    unique = []
    for study in studies:
        key = normalize_url(study.url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(study)
    return unique


async def build_study_archive(
    sources: Optional[list[StudySource]] = None,
    max_pages: int = config.CRAWL_MAX_PAGES,
    delay: float = config.CRAWL_DELAY_SECONDS,
    cache: Optional[ArchiveCache] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> StudyArchive:
    """Crawl each brand's listing in turn and build the merged archive.

    A brand whose crawl fails still contributes the studies found before
    the failure. The merged archive is saved to `cache`.
    """
    sources = sources if sources is not None else STUDY_SOURCES
    cache = cache or ArchiveCache()
    collected: list[StudyRecord] = []
    outcomes: list[BrandOutcome] = []

    async with open_client(client, timeout=config.PAGE_TIMEOUT_SECONDS) as http:
        for source in sources:
            console.print(f"[cyan]Fetching {source.brand} studies...[/cyan]")
            result = await crawl_listing(source, max_pages=max_pages, delay=delay, client=http)
            collected.extend(result.records)
            outcomes.append(BrandOutcome(
                brand=source.brand,
                studies=len(result.records),
                pages=result.pages_walked,
                reason=result.reason.value,
                error=result.error,
            ))

    studies = newest_first(dedupe_studies(collected))

    console.print("[dim]Saving to cache...[/dim]")
    timestamp = cache.save(studies)
    console.print(f"[green]Archive built: {len(studies)} studies from {len(sources)} brands[/green]")

    return StudyArchive(studies=studies, timestamp=timestamp, outcomes=outcomes)


def extract_year(date_str: Optional[str]) -> Optional[int]:
    """First 4-digit run in a date string."""
    if not date_str:
        return None
    match = re.search(r"\d{4}", date_str)
    return int(match.group(0)) if match else None


def years_from_studies(studies: Iterable[StudyRecord]) -> list[int]:
    """Distinct publish years, newest first."""
    years = {extract_year(s.publish_date) for s in studies}
    return sorted((y for y in years if y), reverse=True)
