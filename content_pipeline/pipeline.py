"""Network operations: feed batches and single-article scrapes.

fetch_feeds() fetches every source concurrently, each under its own timeout,
then merges, sorts newest first and drops duplicate links. A failing source
contributes nothing; it never fails the batch.
"""

import asyncio
from typing import Iterable, Optional
from urllib.parse import urlparse

import httpx
from rich.console import Console

from content_pipeline import config
from content_pipeline.extractors.article import extract_article_metadata
from content_pipeline.extractors.dates import newest_first
from content_pipeline.extractors.feeds import parse_feed
from content_pipeline.extractors.fetch import browser_headers, feed_headers, fetch_text, open_client
from content_pipeline.models import ArticleScrapeResult, FeedBatch, FeedItem, failure_record
from content_pipeline.sources.feeds import DEFAULT_FEED_SOURCES, FeedSource

console = Console()


def dedupe_by_link(items: Iterable[FeedItem]) -> list[FeedItem]:
    """Keep the first item for each exact link string."""
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.link in seen:
            continue
        seen.add(item.link)
        unique.append(item)
    return unique


async def fetch_feed(client: httpx.AsyncClient, source: FeedSource) -> tuple[list[FeedItem], Optional[str]]:
    """Fetch and parse one feed.

    Returns:
        (items, error); non-2xx and transport errors give ([], reason)
    """
    fetched = await fetch_text(client, source.url, feed_headers())
    if not fetched.ok:
        return [], fetched.describe()
    return parse_feed(fetched.text, source.name), None


async def fetch_feeds(
    sources: Optional[list[FeedSource]] = None,
    timeout: float = config.FEED_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
) -> FeedBatch:
    """Fetch every source concurrently and merge the results.

    Args:
        sources: Feeds to fetch (defaults to DEFAULT_FEED_SOURCES)
        timeout: Per-source deadline in seconds; a source that misses it is
            cancelled and contributes no items
        client: Optional shared httpx client

    Returns:
        FeedBatch with items sorted newest first (undated last) and
        deduplicated by exact link
    """
    sources = list(sources if sources is not None else DEFAULT_FEED_SOURCES)
    batch = FeedBatch(source_count=len(sources))
    console.print(f"[cyan]Fetching {len(sources)} feeds...[/cyan]")

    async with open_client(client, timeout=timeout) as http:

        async def fetch_with_timeout(source: FeedSource) -> tuple[list[FeedItem], Optional[str]]:
            try:
                items, error = await asyncio.wait_for(fetch_feed(http, source), timeout=timeout)
            except asyncio.TimeoutError:
                console.print(f"[yellow]Timed out fetching {source.name} after {timeout}s[/yellow]")
                return [], "timeout"
            except Exception as e:
                console.print(f"[red]Error fetching {source.name}: {e}[/red]")
                return [], f"exception:{type(e).__name__}"

            if error:
                console.print(f"[red]Failed to fetch {source.name}: {error}[/red]")
            else:
                console.print(f"[dim]Fetched {len(items)} items from {source.name}[/dim]")
            return items, error

        results = await asyncio.gather(*[fetch_with_timeout(s) for s in sources])

    # Barrier passed: every source has settled
    merged: list[FeedItem] = []
    for source, (items, error) in zip(sources, results):
        batch.items_by_source[source.name] = len(items)
        if error:
            batch.failed_sources[source.name] = error
        merged.extend(items)

    batch.items = dedupe_by_link(newest_first(merged))
    console.print(f"[green]Returning {len(batch.items)} total items[/green]")
    return batch


async def run_feed_batch(
    sources: Optional[list[FeedSource]] = None,
    timeout: float = config.FEED_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
) -> dict:
    """fetch_feeds() as a JSON-ready record, or a structured failure."""
    try:
        batch = await fetch_feeds(sources, timeout=timeout, client=client)
    except Exception as e:
        console.print(f"[red]Error fetching feeds: {e}[/red]")
        return failure_record(str(e))
    return batch.to_record()


def is_valid_url(url: Optional[str]) -> bool:
    """Absolute http(s) URL with a host."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


async def scrape_article(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    min_content_length: int = config.MIN_ARTICLE_LENGTH,
) -> ArticleScrapeResult:
    """Fetch one article page and extract its metadata."""
    if not is_valid_url(url):
        return ArticleScrapeResult(url=url or "", error="Invalid URL format")

    console.print(f"[dim]Scraping article metadata from: {url}[/dim]")

    async with open_client(client, timeout=config.PAGE_TIMEOUT_SECONDS) as http:
        fetched = await fetch_text(http, url, browser_headers())

    if not fetched.ok:
        error = fetched.describe()
        console.print(f"[red]Error scraping {url}: {error}[/red]")
        return ArticleScrapeResult(url=url, error=error)

    html = fetched.text or ""
    if len(html) < min_content_length:
        return ArticleScrapeResult(url=url, error="Page returned too little content")

    metadata = extract_article_metadata(html, url)
    console.print(
        f"[green]Extracted:[/green] {(metadata.title or '?')[:50]} "
        f"[dim](publisher: {metadata.publisher}, date: {metadata.publish_date or '-'})[/dim]"
    )
    return ArticleScrapeResult(url=url, metadata=metadata)
