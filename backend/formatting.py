"""
Display formatters shared by the calculator (labels, insight text)
and the Streamlit components.
"""

from typing import Any, Optional

import pandas as pd

from backend.coercion import parse_timestamp, to_number


def format_number(value: float) -> str:
    return f"{to_number(value):,.0f}"


def format_percent(value: float, digits: int = 1) -> str:
    return f"{to_number(value):.{digits}f}%"


def format_compact(value: float) -> str:
    """1234 -> 1.2K, 2500000 -> 2.5M."""
    number = to_number(value)
    magnitude = abs(number)
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return f"{number / threshold:.1f}".rstrip("0").rstrip(".") + suffix
    return f"{number:.1f}".rstrip("0").rstrip(".")


def _parse(value: Any) -> Optional[pd.Timestamp]:
    if not isinstance(value, str):
        return None
    return parse_timestamp(value)


def format_label_date(value: Any) -> str:
    ts = _parse(value)
    return ts.strftime("%d %b") if ts is not None else str(value or "")


def format_long_date(value: Any) -> str:
    ts = _parse(value)
    return ts.strftime("%d %B %Y") if ts is not None else str(value or "")


def format_trend(trend) -> Optional[str]:
    """
    Badge text for a TrendStat: signed percentage when defined,
    otherwise the signed absolute difference.
    """
    if trend is None:
        return None
    sign = "+" if trend.diff >= 0 else "-"
    if trend.percentage is not None:
        return f"{sign}{format_percent(abs(trend.percentage))}"
    return f"{sign}{format_number(abs(trend.diff))}"
