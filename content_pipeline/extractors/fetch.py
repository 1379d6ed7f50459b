"""HTTP fetching for feeds, article pages and listing pages.

Two header profiles:
1. Feed bot: identifies itself, asks for feed content types
2. Browser: realistic desktop browser headers, needed by sites that
   reject non-browser clients

Fetches never raise for HTTP or transport problems; callers inspect the
returned FetchResult.
"""

import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from rich.console import Console

console = Console()

FEED_USER_AGENT = "Mozilla/5.0 (compatible; EditorialFeedBot/1.0)"
FEED_ACCEPT = "application/rss+xml, application/xml, text/xml, application/atom+xml, */*"

# Realistic desktop User-Agents (2025-2026)
BROWSER_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:134.0) Gecko/20100101 Firefox/134.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14.7; rv:134.0) Gecko/20100101 Firefox/134.0",
    "Mozilla/5.0 (X11; Linux x86_64; rv:134.0) Gecko/20100101 Firefox/134.0",
]
BROWSER_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


def feed_headers() -> dict[str, str]:
    """Headers for feed requests."""
    return {
        "User-Agent": FEED_USER_AGENT,
        "Accept": FEED_ACCEPT,
    }


def browser_headers() -> dict[str, str]:
    """Headers that look like a desktop browser."""
    return {
        "User-Agent": random.choice(BROWSER_USER_AGENTS),
        "Accept": BROWSER_ACCEPT,
        "Accept-Language": "en-US,en;q=0.5",
        "Cache-Control": "no-cache",
    }


class FetchResult:
    """Result of a single GET with error details."""
    def __init__(
        self,
        url: str,
        text: Optional[str] = None,
        status: Optional[int] = None,
        reason_phrase: str = "",
        error: Optional[str] = None,
    ):
        self.url = url
        self.text = text
        self.status = status
        self.reason_phrase = reason_phrase
        self.error = error  # "timeout", "connection", or the httpx error name

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300

    def describe(self) -> str:
        """Human-readable failure, e.g. "HTTP 503: Service Unavailable"."""
        if self.error:
            return self.error
        if self.status is not None and not self.ok:
            return f"HTTP {self.status}: {self.reason_phrase}".rstrip(": ")
        return "ok"


@asynccontextmanager
async def open_client(
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the caller's client, or a fresh one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
        yield owned


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str],
    timeout: Optional[float] = None,
) -> FetchResult:
    """GET `url` once (no retries) and capture body + status."""
    kwargs = {"headers": headers, "follow_redirects": True}
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        response = await client.get(url, **kwargs)
    except httpx.TimeoutException:
        return FetchResult(url, error="timeout")
    except httpx.ConnectError:
        return FetchResult(url, error="connection")
    except httpx.HTTPError as e:
        console.print(f"[dim]Request failed for {url}: {e}[/dim]")
        return FetchResult(url, error=type(e).__name__.lower())

    return FetchResult(
        url,
        text=response.text,
        status=response.status_code,
        reason_phrase=response.reason_phrase,
    )
