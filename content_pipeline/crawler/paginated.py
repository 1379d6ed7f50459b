"""Sequential crawl of a paginated listing.

Walks page 1, page/2/, page/3/ ... and stops on the first of:
- HTTP 404 (end of pagination)
- a body too short to be a real listing (thin content)
- a page that adds no URL not already seen in this crawl
- the page cap
- any other HTTP or transport failure (fatal, partial results kept)
"""

import asyncio
from typing import Optional

import httpx
from rich.console import Console

from content_pipeline import config
from content_pipeline.crawler.listing import parse_listing_page
from content_pipeline.crawler.session import CrawlSession
from content_pipeline.extractors.fetch import browser_headers, fetch_text, open_client
from content_pipeline.models import CrawlResult, TerminationReason
from content_pipeline.sources.studies import StudySource

console = Console()


async def crawl_listing(
    source: StudySource,
    max_pages: int = config.CRAWL_MAX_PAGES,
    headers: Optional[dict[str, str]] = None,
    delay: float = config.CRAWL_DELAY_SECONDS,
    min_content_length: int = config.MIN_LISTING_LENGTH,
    client: Optional[httpx.AsyncClient] = None,
) -> CrawlResult:
    """Crawl a brand's listing and return every study found.

    Args:
        source: Listing definition (base URL, link prefix, brand)
        max_pages: Page cap
        headers: Request headers; defaults to realistic browser headers
        delay: Pause between pages, only when another page follows
        min_content_length: Bodies shorter than this end the crawl
        client: Optional shared httpx client

    Returns:
        CrawlResult with records in first-seen order. On a fatal error the
        records accumulated so far are returned alongside the error.
    """
    session = CrawlSession(base_url=source.listing_url, max_pages=max_pages)
    headers = headers or browser_headers()

    async with open_client(client, timeout=config.PAGE_TIMEOUT_SECONDS) as http:
        while session.has_more_pages:
            url = session.next_page_url()
            console.print(f"[dim]Fetching {source.brand} page {session.current_page}: {url}[/dim]")

            fetched = await fetch_text(http, url, headers)

            if fetched.status == 404:
                console.print(f"[dim]Page {session.current_page} returned 404 - end of pagination[/dim]")
                session.stop(TerminationReason.END_OF_PAGINATION)
                break

            if not fetched.ok:
                error = fetched.describe()
                console.print(f"[red]Crawl of {source.brand} failed on page {session.current_page}: {error}[/red]")
                session.stop(TerminationReason.FETCH_ERROR, error=error)
                break

            html = fetched.text or ""
            if len(html) < min_content_length:
                console.print(f"[yellow]Page {session.current_page} returned too little content[/yellow]")
                session.stop(TerminationReason.THIN_CONTENT)
                break

            session.pages_walked += 1
            records = parse_listing_page(html, url, source)
            new_count = session.admit(records)
            console.print(
                f"[dim]Found {len(records)} studies on page {session.current_page} "
                f"({new_count} new)[/dim]"
            )

            if new_count == 0:
                console.print(f"[dim]No new studies on page {session.current_page} - end of pagination[/dim]")
                session.stop(TerminationReason.NO_NEW_CONTENT)
                break

            # Small delay between pages to be polite
            if session.has_more_pages and delay > 0:
                await asyncio.sleep(delay)

    if session.reason is None:
        session.stop(TerminationReason.PAGE_LIMIT)

    result = session.result()
    color = "green" if result.success else "yellow"
    console.print(
        f"[{color}]{source.brand}: {len(result.records)} studies from "
        f"{result.pages_walked} pages ({result.reason.value})[/{color}]"
    )
    return result
