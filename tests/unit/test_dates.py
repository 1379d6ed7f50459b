"""Tests for date normalization and ordering."""

import pytest
from content_pipeline.extractors.dates import newest_first, normalize_date, parse_datetime
from content_pipeline.models import FeedItem, StudyRecord


class TestNormalizeDate:
    """Tests for the normalization fallback chain."""

    @pytest.mark.parametrize("raw,expected", [
        ("March 5, 2024", "2024-03-05"),
        ("Mar 5, 2024", "2024-03-05"),
        ("2024-03-05", "2024-03-05"),
        ("2024-03-05T23:30:00Z", "2024-03-05"),
        ("Tue, 05 Mar 2024 10:00:00 GMT", "2024-03-05"),
        ("Published on March 5, 2024 by Staff", "2024-03-05"),
        ("Updated 5 March 2024", "2024-03-05"),
    ])
    def test_date_only(self, raw: str, expected: str):
        assert normalize_date(raw, date_only=True) == expected

    def test_rfc822_full_timestamp(self):
        """Feed dates keep the time of day, in UTC."""
        assert normalize_date("Tue, 05 Mar 2024 10:00:00 GMT") == "2024-03-05T10:00:00.000Z"

    def test_offset_converted_to_utc(self):
        assert normalize_date("2024-03-05T10:00:00-05:00") == "2024-03-05T15:00:00.000Z"

    def test_naive_taken_as_utc(self):
        assert normalize_date("2024-03-05T10:00:00") == "2024-03-05T10:00:00.000Z"

    def test_day_month_year_only_in_date_only_mode(self):
        assert normalize_date("Updated 5 March 2024") is None
        assert normalize_date("Updated 5 March 2024", date_only=True) == "2024-03-05"

    @pytest.mark.parametrize("raw", [
        "not a date",
        "",
        "   ",
        "February 31, 2024",
        "Smarch 5, 2024",
    ])
    def test_unparseable(self, raw: str):
        assert normalize_date(raw) is None
        assert normalize_date(raw, date_only=True) is None

    def test_none_and_non_string(self):
        assert normalize_date(None) is None
        assert normalize_date(20240305) is None


class TestParseDatetime:
    """Tests for the generic parse."""

    def test_returns_aware_utc(self):
        parsed = parse_datetime("Tue, 05 Mar 2024 10:00:00 +0100")
        assert parsed is not None
        assert parsed.utcoffset().total_seconds() == 0
        assert parsed.hour == 9


class TestNewestFirst:
    """Tests for ordering records by publish date."""

    def test_newest_first_undated_last(self):
        items = [
            FeedItem(title="old", link="https://a/1", publish_date="2024-01-01T00:00:00.000Z"),
            FeedItem(title="undated", link="https://a/2"),
            FeedItem(title="new", link="https://a/3", publish_date="2024-03-01T00:00:00.000Z"),
        ]
        assert [i.title for i in newest_first(items)] == ["new", "old", "undated"]

    def test_undated_keep_relative_order(self):
        studies = [
            StudyRecord(id=f"s-{n}", title=f"Study {n}", url=f"https://a/{n}", brand="A")
            for n in range(3)
        ]
        assert [s.id for s in newest_first(studies)] == ["s-0", "s-1", "s-2"]

    def test_mixed_date_precision(self):
        """Date-only and full timestamps sort together."""
        studies = [
            StudyRecord(id="a", title="A", url="https://a/a", brand="A", publish_date="2024-03-05"),
            StudyRecord(id="b", title="B", url="https://a/b", brand="A", publish_date="2024-03-05T12:00:00.000Z"),
        ]
        assert [s.id for s in newest_first(studies)] == ["b", "a"]
