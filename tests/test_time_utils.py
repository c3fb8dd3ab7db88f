"""Tests for timestamp helpers."""

from datetime import datetime, timedelta, timezone

from riley.infra.time_utils import (
    JUST_NOW,
    format_relative,
    parse_iso,
    to_iso,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestIso:
    def test_naive_is_treated_as_utc(self):
        assert to_iso(datetime(2026, 1, 1)) == "2026-01-01T00:00:00+00:00"

    def test_none_is_now(self):
        assert parse_iso(to_iso(None)).tzinfo is not None

    def test_parse_z_suffix(self):
        assert parse_iso("2026-01-01T00:00:00Z") == datetime(
            2026, 1, 1, tzinfo=timezone.utc
        )

    def test_parse_garbage(self):
        assert parse_iso("yesterday") is None
        assert parse_iso("") is None


class TestFormatRelative:
    def test_buckets(self):
        assert format_relative(NOW - timedelta(seconds=30), NOW) == JUST_NOW
        assert format_relative(NOW - timedelta(minutes=5), NOW) == "5m ago"
        assert format_relative(NOW - timedelta(hours=3), NOW) == "3h ago"

    def test_days_optional(self):
        then = NOW - timedelta(days=2)
        assert format_relative(then, NOW, include_days=True) == "2d ago"
        assert format_relative(then, NOW) == then.astimezone().date().isoformat()

    def test_missing_value(self):
        assert format_relative(None, NOW) == JUST_NOW
