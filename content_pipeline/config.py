"""Runtime settings for the content pipeline.

Values come from environment variables (a local .env file is loaded first),
falling back to the defaults below.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


# Feed orchestration
FEED_TIMEOUT_SECONDS = _env_float("FEED_TIMEOUT_SECONDS", 10.0)

# Article pages and listing pages
PAGE_TIMEOUT_SECONDS = _env_float("PAGE_TIMEOUT_SECONDS", 30.0)
MIN_ARTICLE_LENGTH = _env_int("MIN_ARTICLE_LENGTH", 500)  # Shorter bodies are error/consent pages

# Paginated crawl
CRAWL_MAX_PAGES = _env_int("CRAWL_MAX_PAGES", 10)
CRAWL_DELAY_SECONDS = _env_float("CRAWL_DELAY_SECONDS", 0.3)  # Pause between listing pages
MIN_LISTING_LENGTH = _env_int("MIN_LISTING_LENGTH", 1000)

# Local cache (study archive)
CACHE_DIR = Path(os.environ.get("CACHE_DIR", Path(__file__).parent.parent / ".cache"))
