"""Date normalization with a fallback chain.

Feeds, article heads and listing pages express dates in every format
imaginable. `normalize_date` tries, in order:

1. A generic calendar parse (ISO 8601, RFC 822/2822, common written formats)
2. "Month DD, YYYY" anywhere in the string
3. "DD Month YYYY" anywhere in the string (date-only contexts)

and returns None when nothing fits. It never raises.
"""

import re
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, Optional, TypeVar

MONTH_NAMES = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

# Formats the generic parse accepts beyond ISO 8601 and RFC 2822
DATE_FORMATS = [
    "%Y-%m-%dT%H:%M:%S%z",      # 2024-03-05T10:00:00+0000
    "%Y-%m-%dT%H:%M:%S.%f%z",   # 2024-03-05T10:00:00.123+0000
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%Y/%m/%d",                 # 2024/03/05
    "%m/%d/%Y",                 # 03/05/2024
    "%B %d, %Y",                # March 5, 2024
    "%b %d, %Y",                # Mar 5, 2024
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",                 # 5 March 2024
    "%d %b %Y",                 # 5 Mar 2024
    "%A, %B %d, %Y",            # Tuesday, March 5, 2024
]

_MONTH_DAY_YEAR = re.compile(r"([A-Za-z]+)\s+(\d{1,2}),?\s+(\d{4})")
_DAY_MONTH_YEAR = re.compile(r"(\d{1,2})\s+([A-Za-z]+)\s+(\d{4})")

T = TypeVar("T")


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Generic calendar parse. Returns an aware UTC datetime or None."""
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None

    parsed = None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            parsed = None

    if parsed is None:
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None

    # Naive values are taken as UTC
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None


def _month_index(name: str) -> Optional[int]:
    try:
        return MONTH_NAMES.index(name.lower()) + 1
    except ValueError:
        return None


def _build_date(year: str, month: Optional[int], day: str) -> Optional[str]:
    if month is None:
        return None
    try:
        return date(int(year), month, int(day)).isoformat()
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    """Format as a full UTC timestamp, e.g. 2024-03-05T10:00:00.000Z."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def normalize_date(value: Optional[str], date_only: bool = False) -> Optional[str]:
    """Normalize a date string to ISO form, or None.

    Args:
        value: Raw date text from markup
        date_only: Return YYYY-MM-DD (article/study contexts) instead of a
            full timestamp (feed contexts). Also enables "DD Month YYYY".
    """
    if not value or not isinstance(value, str):
        return None
    cleaned = value.strip()

    parsed = parse_datetime(cleaned)
    if parsed is not None:
        return parsed.date().isoformat() if date_only else format_timestamp(parsed)

    match = _MONTH_DAY_YEAR.search(cleaned)
    if match:
        result = _build_date(match.group(3), _month_index(match.group(1)), match.group(2))
        if result:
            return result

    if date_only:
        match = _DAY_MONTH_YEAR.search(cleaned)
        if match:
            result = _build_date(match.group(3), _month_index(match.group(2)), match.group(1))
            if result:
                return result

    return None


def to_timestamp(value: Optional[str]) -> Optional[float]:
    """Epoch seconds for a normalized date, for ordering."""
    parsed = parse_datetime(value)
    return parsed.timestamp() if parsed else None


def newest_first(records: Iterable[T]) -> list[T]:
    """Stable sort by `publish_date`, newest first, undated records last.

    Two undated records compare equal and keep their relative order.
    """
    def sort_key(record) -> tuple[int, float]:
        ts = to_timestamp(getattr(record, "publish_date", None))
        if ts is None:
            return (1, 0.0)
        return (0, -ts)

    return sorted(records, key=sort_key)
