"""Shared test fixtures and configuration."""

import httpx
import pytest
from content_pipeline.models import StudyRecord
from content_pipeline.sources.studies import StudySource

LISTING_URL = "https://example.com/blog/category/studies/"


@pytest.fixture
def study_source() -> StudySource:
    """A listing on a test domain."""
    return StudySource(
        id="example",
        brand="Example",
        listing_url=LISTING_URL,
        link_prefix="example.com/blog/",
        id_prefix="ex",
    )


@pytest.fixture
def sample_study() -> StudyRecord:
    """Create a sample study for testing."""
    return StudyRecord(
        id="ll-best-cities-for-gardening",
        title="2024's Best Cities for Gardening",
        url="https://lawnlove.com/blog/best-cities-for-gardening/",
        brand="Lawn Love",
        publish_date="2024-03-05",
        image="https://lawnlove.com/wp-content/uploads/gardening.jpg",
    )


@pytest.fixture
def listing_page():
    """Build a listing page with one titled anchor per slug.

    The page is padded past the thin-content floor unless padding=0.
    """
    def build(slugs: list[str], padding: int = 1200) -> str:
        links = "\n".join(
            f'<article><a href="https://example.com/blog/{slug}/">'
            f'Study about {slug.replace("-", " ")}</a></article>'
            for slug in slugs
        )
        return f"<html><body>{links}<!-- {'x' * padding} --></body></html>"

    return build


@pytest.fixture
def mock_client():
    """Build an AsyncClient whose requests are answered by a handler."""
    def build(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return build
