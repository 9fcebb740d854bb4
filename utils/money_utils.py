# utils/money_utils.py
from __future__ import annotations
import math
import re
from decimal import Decimal, ROUND_HALF_UP

# Phần số thập phân ở đầu chuỗi: "12.5abc" -> 12.5
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_FLOAT_FULL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

NBSP = "\u00a0"


def _finite(x: float) -> float:
    return x if math.isfinite(x) else 0.0


def parse_amount(val) -> float:
    """
    Đọc số tiền: lấy phần số ở đầu chuỗi.
    Không parse được (None, bool, chuỗi rỗng, "abc", NaN/inf) -> 0.0
    """
    if val is None or isinstance(val, bool):
        return 0.0
    if isinstance(val, (int, float)):
        return _finite(float(val))
    m = _FLOAT_PREFIX.match(str(val))
    if not m:
        return 0.0
    try:
        return _finite(float(m.group(1)))
    except (ValueError, OverflowError):
        return 0.0


def to_number(val) -> float:
    """Cả chuỗi phải là số; chuỗi trắng, chuỗi lỗi -> 0."""
    if val is None:
        return 0.0
    if isinstance(val, bool):
        return 1.0 if val else 0.0
    if isinstance(val, (int, float)):
        return _finite(float(val))
    s = str(val).strip()
    if not s or not _FLOAT_FULL.match(s):
        return 0.0
    try:
        return _finite(float(s))
    except (ValueError, OverflowError):
        return 0.0


def _group_thousands(n: int) -> str:
    return f"{n:,}".replace(",", ".")


def format_vi_number(n) -> str:
    """1234 -> '1.234' (vi-VN)"""
    q = int(Decimal(str(parse_amount(n))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if q < 0 else ""
    return sign + _group_thousands(abs(q))


def format_vnd(amount) -> str:
    """1234567.5 -> '1.234.568 ₫' (vi-VN, VND không có phần lẻ)"""
    return f"{format_vi_number(amount)}{NBSP}₫"
