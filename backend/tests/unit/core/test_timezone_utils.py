from datetime import datetime, timedelta, timezone

from tuitiontime.core.timezone_utils import add_months, ensure_utc, overlaps, parse_iso_date


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 10, hour, minute, tzinfo=timezone.utc)


class TestOverlaps:
    def test_touching_ranges_do_not_overlap(self) -> None:
        assert not overlaps(_at(10), _at(11), _at(11), _at(12))

    def test_partial_overlap(self) -> None:
        assert overlaps(_at(10), _at(11), _at(10, 30), _at(11, 30))

    def test_containment(self) -> None:
        assert overlaps(_at(9), _at(12), _at(10), _at(11))


class TestAddMonths:
    def test_clamps_to_month_end(self) -> None:
        start = datetime(2025, 1, 31, 9, tzinfo=timezone.utc)
        assert add_months(start, 1) == datetime(2025, 2, 28, 9, tzinfo=timezone.utc)

    def test_leap_year(self) -> None:
        start = datetime(2024, 1, 31, tzinfo=timezone.utc)
        assert add_months(start, 1).day == 29

    def test_rolls_over_year(self) -> None:
        start = datetime(2025, 11, 15, tzinfo=timezone.utc)
        assert add_months(start, 3) == datetime(2026, 2, 15, tzinfo=timezone.utc)


def test_ensure_utc_tags_naive_values() -> None:
    naive = datetime(2025, 3, 10, 10, 0)
    assert ensure_utc(naive).tzinfo == timezone.utc


def test_ensure_utc_converts_offsets() -> None:
    ist = timezone(timedelta(hours=5, minutes=30))
    value = datetime(2025, 3, 10, 15, 30, tzinfo=ist)
    assert ensure_utc(value) == datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc)
    assert ensure_utc(value).utcoffset() == timedelta(0)


def test_parse_iso_date_returns_none_for_garbage() -> None:
    assert parse_iso_date("2025-02-30") is None
    assert parse_iso_date("2025-02-28").day == 28
