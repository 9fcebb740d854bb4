# tests/test_money_and_dates.py
from datetime import datetime, timezone

from utils.date_utils import format_vi_date, month_add, month_floor, parse_timestamp
from utils.money_utils import format_vi_number, format_vnd, parse_amount, to_number


def test_parse_amount_reads_leading_number():
    assert parse_amount("1500000.50") == 1500000.5
    assert parse_amount("  42abc") == 42.0
    assert parse_amount("1e3") == 1000.0
    assert parse_amount(".5") == 0.5
    assert parse_amount(250000) == 250000.0


def test_parse_amount_never_returns_nan():
    for junk in (None, "", "abc", "NaN", "Infinity", True, float("nan"), float("inf"), {"x": 1}):
        assert parse_amount(junk) == 0.0


def test_to_number_requires_whole_string():
    assert to_number("1200") == 1200.0
    assert to_number(" 12.5 ") == 12.5
    assert to_number("12abc") == 0.0
    assert to_number("") == 0.0
    assert to_number(None) == 0.0


def test_format_vnd_uses_vi_grouping_and_symbol():
    assert format_vnd(1234567) == "1.234.567\u00a0₫"
    assert format_vnd(0) == "0\u00a0₫"
    assert format_vnd(999.5) == "1.000\u00a0₫"
    assert format_vi_number(1234) == "1.234"


def test_parse_timestamp_variants():
    aware = parse_timestamp("2025-10-05T03:00:00.000Z")
    assert aware == datetime(2025, 10, 5, 3, 0, tzinfo=timezone.utc)

    naive = parse_timestamp("2025-10-05T03:00:00")
    assert naive.tzinfo is None

    date_only = parse_timestamp("2025-10-05")
    assert date_only == datetime(2025, 10, 5, tzinfo=timezone.utc)

    assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


def test_month_helpers_cross_year():
    d = datetime(2025, 1, 20, 15, 30)
    assert month_floor(d) == datetime(2025, 1, 1)
    assert month_add(month_floor(d), -1) == datetime(2024, 12, 1)
    assert month_add(datetime(2025, 11, 1), 2) == datetime(2026, 1, 1)


def test_format_vi_date():
    assert format_vi_date("2025-10-05") == "5/10/2025"
    assert format_vi_date("") == "—"
    assert format_vi_date("garbage") == "—"


def test_format_vi_date_uses_dashboard_timezone():
    # 20:00 UTC = 03:00 ngày hôm sau giờ Việt Nam
    assert format_vi_date("2025-10-04T20:00:00Z") == "5/10/2025"
    assert format_vi_date("2025-10-04T20:00:00+07:00") == "4/10/2025"
    assert format_vi_date("2025-10-04T20:00:00") == "4/10/2025"
    assert format_vi_date("2025-10-04") == "4/10/2025"
