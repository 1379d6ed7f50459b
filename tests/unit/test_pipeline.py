"""Tests for feed orchestration and article scraping."""

import asyncio

import httpx
import pytest
from content_pipeline import pipeline
from content_pipeline.pipeline import fetch_feeds, is_valid_url, run_feed_batch, scrape_article
from content_pipeline.sources.feeds import FeedSource, parse_source_option

FAST_FEED = """<rss><channel>
<item><title>Older</title><link>https://fast.example/older</link><pubDate>Mon, 01 Jan 2024 00:00:00 GMT</pubDate></item>
<item><title>Undated</title><link>https://fast.example/undated</link></item>
<item><title>Newest</title><link>https://fast.example/newest</link><pubDate>Fri, 01 Mar 2024 00:00:00 GMT</pubDate></item>
</channel></rss>"""

SHARED_FEED = """<rss><channel>
<item><title>Shared story</title><link>https://shared.example/story</link><pubDate>Fri, 01 Mar 2024 00:00:00 GMT</pubDate></item>
<item><title>Trailing slash variant</title><link>https://shared.example/story/</link></item>
</channel></rss>"""

ARTICLE_HTML = """<html><head>
<title>Fall Overseeding Guide | Lawn Love</title>
<meta property="article:published_time" content="2024-09-01T12:00:00Z">
</head><body>{padding}</body></html>""".format(padding="<p>" + "grass " * 200 + "</p>")

FAST = FeedSource(id="fast", name="Fast Feed", url="https://fast.example/rss")
SLOW = FeedSource(id="slow", name="Slow Feed", url="https://slow.example/rss")


class TestFetchFeeds:
    """Tests for concurrent feed fetching."""

    @pytest.mark.asyncio
    async def test_slow_source_times_out_without_failing_batch(self, mock_client):
        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "slow.example":
                await asyncio.sleep(5)
            return httpx.Response(200, text=FAST_FEED)

        async with mock_client(handler) as client:
            batch = await fetch_feeds([FAST, SLOW], timeout=0.2, client=client)

        assert [i.title for i in batch.items] == ["Newest", "Older", "Undated"]
        assert batch.failed_sources == {"Slow Feed": "timeout"}
        assert batch.items_by_source == {"Fast Feed": 3, "Slow Feed": 0}
        assert batch.source_count == 2

    @pytest.mark.asyncio
    async def test_http_error_recorded(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "slow.example":
                return httpx.Response(503)
            return httpx.Response(200, text=FAST_FEED)

        async with mock_client(handler) as client:
            batch = await fetch_feeds([FAST, SLOW], client=client)

        assert len(batch.items) == 3
        assert batch.failed_sources == {"Slow Feed": "HTTP 503: Service Unavailable"}

    @pytest.mark.asyncio
    async def test_source_raising_unexpected_error(self, mock_client, monkeypatch):
        real_parse_feed = pipeline.parse_feed

        def flaky_parse_feed(payload, source_name):
            if source_name == SLOW.name:
                raise RuntimeError("parser exploded")
            return real_parse_feed(payload, source_name)

        monkeypatch.setattr(pipeline, "parse_feed", flaky_parse_feed)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=FAST_FEED)

        async with mock_client(handler) as client:
            batch = await fetch_feeds([FAST, SLOW], client=client)

        assert [i.title for i in batch.items] == ["Newest", "Older", "Undated"]
        assert batch.failed_sources == {"Slow Feed": "exception:RuntimeError"}
        assert batch.items_by_source == {"Fast Feed": 3, "Slow Feed": 0}

    @pytest.mark.asyncio
    async def test_duplicate_links_dropped_exactly(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=SHARED_FEED)

        sources = [
            FeedSource(id="a", name="A", url="https://a.example/rss"),
            FeedSource(id="b", name="B", url="https://b.example/rss"),
        ]
        async with mock_client(handler) as client:
            batch = await fetch_feeds(sources, client=client)

        assert [i.link for i in batch.items] == [
            "https://shared.example/story",
            "https://shared.example/story/",
        ]
        assert batch.items[0].source_name == "A"

    @pytest.mark.asyncio
    async def test_sends_feed_headers(self, mock_client):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["user-agent"])
            return httpx.Response(200, text=FAST_FEED)

        async with mock_client(handler) as client:
            await fetch_feeds([FAST], client=client)

        assert seen == ["Mozilla/5.0 (compatible; EditorialFeedBot/1.0)"]

    @pytest.mark.asyncio
    async def test_batch_record_shape(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=FAST_FEED)

        async with mock_client(handler) as client:
            record = await run_feed_batch([FAST], client=client)

        assert record["success"] is True
        assert record["sourceCount"] == 1
        assert record["fetchedAt"].endswith("Z")
        assert record["items"][0]["pubDate"] == "2024-03-01T00:00:00.000Z"
        assert record["items"][0]["source"] == "Fast Feed"

    @pytest.mark.asyncio
    async def test_all_sources_failing_is_still_success(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with mock_client(handler) as client:
            record = await run_feed_batch([FAST, SLOW], client=client)

        assert record["success"] is True
        assert record["items"] == []


class TestSourceOption:
    """Tests for NAME=URL parsing."""

    def test_parse(self):
        source = parse_source_option("Turf Mag=https://turf.example/feed")
        assert source.name == "Turf Mag"
        assert source.url == "https://turf.example/feed"
        assert source.id == "turfmag"

    @pytest.mark.parametrize("value", ["no-separator", "=https://x", "Name="])
    def test_invalid(self, value: str):
        with pytest.raises(ValueError):
            parse_source_option(value)


class TestScrapeArticle:
    """Tests for single-article scraping."""

    @pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com/file", "https://"])
    def test_invalid_url(self, url: str):
        assert not is_valid_url(url)

    @pytest.mark.asyncio
    async def test_invalid_url_fails_without_fetching(self, mock_client):
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(200, text=ARTICLE_HTML)

        async with mock_client(handler) as client:
            result = await scrape_article("lawnlove.com/blog/x", client=client)

        assert result.to_record() == {"success": False, "error": "Invalid URL format", "url": "lawnlove.com/blog/x"}
        assert calls == []

    @pytest.mark.asyncio
    async def test_success(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=ARTICLE_HTML)

        url = "https://lawnlove.com/blog/fall-overseeding/"
        async with mock_client(handler) as client:
            result = await scrape_article(url, client=client)

        assert result.to_record() == {
            "success": True,
            "data": {
                "title": "Fall Overseeding Guide",
                "publisher": "Lawn Love",
                "publishDate": "2024-09-01",
            },
            "url": url,
        }

    @pytest.mark.asyncio
    async def test_too_little_content(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html><title>Blocked</title></html>")

        async with mock_client(handler) as client:
            result = await scrape_article("https://example.com/a", client=client)

        assert not result.success
        assert result.error == "Page returned too little content"

    @pytest.mark.asyncio
    async def test_http_error(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403)

        async with mock_client(handler) as client:
            result = await scrape_article("https://example.com/a", client=client)

        assert result.to_record()["error"] == "HTTP 403: Forbidden"

    @pytest.mark.asyncio
    async def test_timeout(self, mock_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with mock_client(handler) as client:
            result = await scrape_article("https://example.com/a", client=client)

        assert result.error == "timeout"
