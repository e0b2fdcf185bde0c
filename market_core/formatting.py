"""
Numeric coercion and display formatting shared by every screen.

Everything here is pure and stateless: unparseable input becomes ``None`` and
formatters render ``None``/NaN as the placeholder glyph instead of raising.
"""

from __future__ import annotations

import math
import re
from numbers import Number
from typing import Any, Callable, Optional, Tuple

import pandas as pd

from market_core.catalog import METRICS_BY_KEY

PLACEHOLDER = "–"

CURRENCY_PERCENT_RE = re.compile(r"[€$£%\s]")
LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
RANGE_RE = re.compile(r"^\s*(?P<low>.*?\d.*?)\s*(?:–|—|-|\bto\b)\s*(?P<high>.*\d.*?)\s*$", re.IGNORECASE)

PERCENT_FIELDS = {key for key, spec in METRICS_BY_KEY.items() if spec.kind == "percent"}
MONEY_FIELDS = {key for key, spec in METRICS_BY_KEY.items() if spec.kind == "money"}


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def coerce_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    if _is_number(value):
        return value
    s = str(value).strip()
    if s == "" or s == PLACEHOLDER:
        return None
    s = CURRENCY_PERCENT_RE.sub("", s)
    if "," in s and "." in s:
        # 1.234,56 -> 1234.56
        s = s.replace(".", "").replace(",", ".", 1)
    elif "," in s:
        s = s.replace(",", ".", 1)
    match = LEADING_FLOAT_RE.match(s)
    if not match:
        return None
    try:
        return float(match.group(0))
    except ValueError:
        return None


def normalise_percent(value: Any) -> Optional[float]:
    """Coerce and express a percentage on the 0-100 scale (0.075 and 7.5 -> 7.5)."""
    num = coerce_number(value)
    if num is None or _is_missing(num):
        return None
    return num * 100 if abs(num) <= 1 else num


def is_ambiguous_percent(value: Any, tolerance: float = 0.005) -> bool:
    num = coerce_number(value)
    if num is None or _is_missing(num):
        return False
    return abs(abs(num) - 1.0) <= tolerance


def parse_range(value: Any) -> Optional[Tuple[float, float]]:
    if value is None or _is_number(value):
        return None
    match = RANGE_RE.match(str(value))
    if not match:
        return None
    low = coerce_number(match.group("low"))
    high = coerce_number(match.group("high"))
    if low is None or high is None:
        return None
    return low, high


def format_number(value: Any) -> str:
    if _is_missing(value):
        return PLACEHOLDER
    try:
        v = float(value)
    except (TypeError, ValueError):
        return PLACEHOLDER
    if math.isinf(v):
        return PLACEHOLDER
    if abs(v) >= 1000:
        return f"{v:,.0f}"
    text = f"{v:,.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_money(value: Any) -> str:
    if _is_missing(value):
        return PLACEHOLDER
    try:
        v = float(value)
    except (TypeError, ValueError):
        return PLACEHOLDER
    if math.isinf(v):
        return PLACEHOLDER
    return f"{v:,.2f}"


def format_percent(value: Any) -> str:
    """Two decimals plus "%". Expects a value already on the 0-100 scale."""
    if _is_missing(value):
        return PLACEHOLDER
    try:
        v = float(value)
    except (TypeError, ValueError):
        return PLACEHOLDER
    if math.isinf(v):
        return PLACEHOLDER
    return f"{v:.2f}%"


def format_range_or_value(value: Any, formatter: Callable[[Any], str] = format_money) -> str:
    bounds = parse_range(value)
    if bounds is not None:
        low, high = bounds
        return f"{formatter(low)} – {formatter(high)}"
    return formatter(coerce_number(value))


def formatter_for(name: str) -> Callable[[Any], str]:
    if name in PERCENT_FIELDS:
        return format_percent
    if name in MONEY_FIELDS:
        return format_money
    return format_number


def display_value(name: str, value: Any) -> Optional[float]:
    """Numeric value as shown on screen and in charts (percent fields on 0-100)."""
    if name in PERCENT_FIELDS:
        return normalise_percent(value)
    num = coerce_number(value)
    return None if _is_missing(num) else num


def format_metric(name: str, value: Any, *, allow_range: bool = False) -> str:
    if allow_range and parse_range(value) is not None:
        return format_range_or_value(value, formatter_for(name))
    return formatter_for(name)(display_value(name, value))
