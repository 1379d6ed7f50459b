"""CLI for the content pipeline."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from content_pipeline import config
from content_pipeline.archive import ArchiveCache, build_study_archive, years_from_studies
from content_pipeline.crawler.paginated import crawl_listing
from content_pipeline.models import FeedItem, StudyRecord
from content_pipeline.pipeline import fetch_feeds, scrape_article
from content_pipeline.sources.feeds import parse_source_option
from content_pipeline.sources.studies import STUDY_SOURCES, StudySource, get_study_source

app = typer.Typer(
    name="content-pipeline",
    help="Feed, article and study-archive extraction for editorial tooling",
    add_completion=False,
)
console = Console()


def print_feed_summary(items: list[FeedItem], limit: int = 20) -> None:
    """Print a summary table of feed items."""
    table = Table(title=f"Feed Items (showing {min(len(items), limit)} of {len(items)})")
    table.add_column("Date", style="magenta")
    table.add_column("Source", style="green", max_width=20)
    table.add_column("Title", style="cyan", max_width=60)

    for item in items[:limit]:
        table.add_row(
            (item.publish_date or "?")[:10],
            item.source_name,
            item.title[:60],
        )

    console.print(table)


def print_study_summary(studies: list[StudyRecord], limit: int = 20) -> None:
    """Print a summary table of studies."""
    table = Table(title=f"Studies (showing {min(len(studies), limit)} of {len(studies)})")
    table.add_column("Date", style="magenta")
    table.add_column("Brand", style="green")
    table.add_column("Title", style="cyan", max_width=60)
    table.add_column("Image", style="dim", justify="center")

    for study in studies[:limit]:
        table.add_row(
            study.publish_date or "?",
            study.brand,
            study.title[:60],
            "yes" if study.image else "-",
        )

    console.print(table)


@app.command()
def feeds(
    source: Optional[list[str]] = typer.Option(
        None, "--source", "-s",
        help="Feed as NAME=URL (repeatable, default: built-in industry feeds)",
    ),
    timeout: float = typer.Option(config.FEED_TIMEOUT_SECONDS, "--timeout", "-t", help="Per-feed timeout (seconds)"),
    limit: int = typer.Option(20, "--limit", "-l", help="Rows in the summary table"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw batch record"),
):
    """Fetch industry feeds concurrently and show the merged items."""
    try:
        sources = [parse_source_option(s) for s in source] if source else None
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    batch = asyncio.run(fetch_feeds(sources, timeout=timeout))

    if as_json:
        console.print_json(data=batch.to_record())
        return

    print_feed_summary(batch.items, limit=limit)
    for name, reason in batch.failed_sources.items():
        console.print(f"  [yellow]Skipped {name}: {reason}[/yellow]")


@app.command()
def article(
    url: str = typer.Argument(..., help="Article URL"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result record"),
):
    """Scrape title, publisher and publish date from an article."""
    result = asyncio.run(scrape_article(url))

    if as_json:
        console.print_json(data=result.to_record())
    elif result.success:
        metadata = result.metadata
        console.print(f"\n[bold]{metadata.title or '(no title)'}[/bold]")
        console.print(f"  Publisher: {metadata.publisher}")
        console.print(f"  Published: {metadata.publish_date or 'unknown'}")

    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)


def _resolve_listing(
    source_id: Optional[str],
    url: Optional[str],
    prefix: Optional[str],
    brand: Optional[str],
    id_prefix: str,
) -> StudySource:
    if url:
        if not prefix:
            raise typer.BadParameter("--prefix is required with --url")
        return StudySource(
            id="custom",
            brand=brand or "Custom",
            listing_url=url,
            link_prefix=prefix,
            id_prefix=id_prefix,
        )

    listing = get_study_source(source_id or "lawnlove")
    if listing is None:
        known = ", ".join(s.id for s in STUDY_SOURCES)
        raise typer.BadParameter(f"Unknown source {source_id!r} (known: {known})")
    return listing


@app.command()
def crawl(
    source_id: Optional[str] = typer.Option(None, "--source", "-s", help="Configured listing id (default: lawnlove)"),
    url: Optional[str] = typer.Option(None, "--url", help="Custom listing URL (page 1)"),
    prefix: Optional[str] = typer.Option(None, "--prefix", help="Substring article links must contain"),
    brand: Optional[str] = typer.Option(None, "--brand", help="Brand label for custom listings"),
    id_prefix: str = typer.Option("study", "--id-prefix", help="Record id prefix for custom listings"),
    max_pages: int = typer.Option(config.CRAWL_MAX_PAGES, "--max-pages", "-p", help="Page cap"),
    delay: float = typer.Option(config.CRAWL_DELAY_SECONDS, "--delay", "-d", help="Pause between pages (seconds)"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw crawl record"),
):
    """Crawl one paginated listing of studies."""
    listing = _resolve_listing(source_id, url, prefix, brand, id_prefix)
    result = asyncio.run(crawl_listing(listing, max_pages=max_pages, delay=delay))

    if as_json:
        console.print_json(data=result.to_record())
    else:
        print_study_summary(result.records)
        console.print(f"  Pages: {result.pages_walked} | Stopped: {result.reason.value}")

    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)


@app.command()
def archive(
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Re-crawl even if a cached archive exists"),
    max_pages: int = typer.Option(config.CRAWL_MAX_PAGES, "--max-pages", "-p", help="Page cap per brand"),
    limit: int = typer.Option(20, "--limit", "-l", help="Rows in the summary table"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw archive record"),
):
    """Build (or load) the merged study archive for every brand."""
    cache = ArchiveCache()
    result = None if refresh else cache.load()

    if result is None:
        result = asyncio.run(build_study_archive(max_pages=max_pages, cache=cache))
        for outcome in result.outcomes:
            style = "red" if outcome.error else "dim"
            detail = f" - {outcome.error}" if outcome.error else ""
            console.print(
                f"  [{style}]{outcome.brand}: {outcome.studies} studies, "
                f"{outcome.pages} pages ({outcome.reason}){detail}[/{style}]"
            )
    else:
        console.print(f"[dim]Loaded {len(result.studies)} studies from cache ({result.timestamp})[/dim]")

    if as_json:
        console.print_json(data=result.to_record())
    else:
        print_study_summary(result.studies, limit=limit)


@app.command("archive-clear")
def archive_clear():
    """Delete the cached study archive."""
    if ArchiveCache().clear():
        console.print("[green]Archive cache cleared[/green]")
    else:
        console.print("[dim]No archive cache to clear[/dim]")


@app.command()
def years():
    """List publish years available in the cached archive."""
    cached = ArchiveCache().load()
    if cached is None:
        console.print("[yellow]No cached archive (run 'archive' first)[/yellow]")
        raise typer.Exit(1)

    found = years_from_studies(cached.studies)
    console.print(", ".join(str(y) for y in found) or "[dim]No dated studies[/dim]")


if __name__ == "__main__":
    app()
