"""Unit tests for the retention policy."""

from datetime import UTC, datetime, timedelta

import pytest
from btrsnap.snapshots.retention import (
    compute_cutoff,
    format_duration,
    is_expired,
    parse_duration,
)


def _at(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, tz=UTC)


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("30s", timedelta(seconds=30)),
            ("30m", timedelta(minutes=30)),
            ("12h", timedelta(hours=12)),
            ("7d", timedelta(days=7)),
            ("2w", timedelta(weeks=2)),
            ("2 weeks", timedelta(weeks=2)),
            ("90", timedelta(seconds=90)),
            ("1.5h", timedelta(minutes=90)),
        ],
    )
    def test_single_unit(self, text: str, expected: timedelta) -> None:
        """Single number/unit pairs parse to the matching duration."""
        assert parse_duration(text) == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1M", timedelta(days=30.44)),
            ("2months", timedelta(days=60.88)),
            ("1 month", timedelta(days=30.44)),
            ("1y", timedelta(days=365.25)),
            ("2 years", timedelta(days=730.5)),
        ],
    )
    def test_calendar_units(self, text: str, expected: timedelta) -> None:
        """Months and years use average calendar lengths."""
        assert parse_duration(text) == expected

    def test_month_and_minute_are_distinct(self) -> None:
        """Upper-case M is a month, lower-case m a minute."""
        assert parse_duration("1M") > timedelta(days=28)
        assert parse_duration("1m") == timedelta(minutes=1)
        assert parse_duration("1M 30m") == timedelta(days=30.44, minutes=30)

    @pytest.mark.parametrize("text", ["1H", "1Y", "1D", "2Months"])
    def test_other_upper_case_units_rejected(self, text: str) -> None:
        """Only M is case sensitive; other upper-case units are not guessed at."""
        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration(text)

    def test_compound_with_spaces(self) -> None:
        """Space-separated parts are summed."""
        assert parse_duration("1d 12h") == timedelta(hours=36)

    def test_compound_without_spaces(self) -> None:
        """Adjacent parts are summed."""
        assert parse_duration("1w2d") == timedelta(days=9)

    def test_surrounding_whitespace_ignored(self) -> None:
        """Leading and trailing whitespace is stripped."""
        assert parse_duration("  7d \n") == timedelta(days=7)

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_rejected(self, text: str) -> None:
        """Empty durations are rejected."""
        with pytest.raises(ValueError, match="empty"):
            parse_duration(text)

    @pytest.mark.parametrize("text", ["abc", "7x", "d7", "7d!", "-7d"])
    def test_malformed_rejected(self, text: str) -> None:
        """Text that is not a duration is rejected with the input in the message."""
        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration(text)

    def test_zero_rejected(self) -> None:
        """A zero duration is not a valid retention period."""
        with pytest.raises(ValueError, match="positive"):
            parse_duration("0s")


class TestFormatDuration:
    """Tests for format_duration."""

    def test_formats_days(self) -> None:
        """Durations render in words."""
        assert format_duration(timedelta(days=7)) == "1 week"

    def test_formats_compound(self) -> None:
        """Mixed units are joined."""
        assert format_duration(timedelta(days=1, hours=12)) == "1 day and 12 hours"


class TestCutoff:
    """Tests for compute_cutoff and is_expired."""

    def test_cutoff_is_now_minus_keep(self) -> None:
        """The cutoff lies keep before now."""
        assert compute_cutoff(_at(2000), timedelta(seconds=400)) == _at(1600)

    def test_older_than_cutoff_expires(self) -> None:
        """Snapshots strictly before the cutoff are expired."""
        assert is_expired(_at(1599), _at(1600)) is True

    def test_exactly_at_cutoff_is_kept(self) -> None:
        """The boundary is strict: a snapshot at the cutoff is kept."""
        assert is_expired(_at(1600), _at(1600)) is False

    def test_newer_than_cutoff_is_kept(self) -> None:
        """Snapshots after the cutoff are kept."""
        assert is_expired(_at(1601), _at(1600)) is False
