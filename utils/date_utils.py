# utils/date_utils.py
from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from .config import DASHBOARD_TZ

_DATE_ONLY_LEN = len("YYYY-MM-DD")


def parse_timestamp(value) -> datetime | None:
    """
    Đọc timestamp từ API:
    - ISO có 'Z' / offset -> aware
    - ISO không offset -> naive (hiểu theo giờ local ở nơi so sánh)
    - 'YYYY-MM-DD' -> 00:00 UTC
    - số -> epoch milliseconds
    Không đọc được -> None
    """
    if value is None or isinstance(value, bool) or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    s = str(value).strip()
    try:
        if len(s) == _DATE_ONLY_LEN:
            d = date.fromisoformat(s)
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def month_floor(d: datetime) -> datetime:
    return d.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def month_add(d: datetime, months: int) -> datetime:
    y = d.year + (d.month - 1 + months) // 12
    m = (d.month - 1 + months) % 12 + 1
    return d.replace(year=y, month=m, day=1, hour=0, minute=0, second=0, microsecond=0)


def align_tz(ts: datetime, ref: datetime) -> datetime:
    """Gắn tz của ref cho timestamp naive để so sánh được với ref."""
    if ts.tzinfo is None and ref.tzinfo is not None:
        return ts.replace(tzinfo=ref.tzinfo)
    if ts.tzinfo is not None and ref.tzinfo is None:
        return ts.astimezone().replace(tzinfo=None)
    return ts


def days_from(d: datetime, days: int) -> datetime:
    return d + timedelta(days=days)


def format_vi_date(value) -> str:
    """'2025-10-05' -> '5/10/2025'; thiếu/sai -> '—'. Timestamp có tz hiển thị theo DASHBOARD_TZ."""
    ts = parse_timestamp(value)
    if ts is None:
        return "—"
    if ts.tzinfo is not None and not _is_date_only(value):
        ts = ts.astimezone(ZoneInfo(DASHBOARD_TZ))
    return f"{ts.day}/{ts.month}/{ts.year}"


def _is_date_only(value) -> bool:
    if isinstance(value, date) and not isinstance(value, datetime):
        return True
    return isinstance(value, str) and len(value.strip()) == _DATE_ONLY_LEN
