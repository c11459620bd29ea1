"""
Defensive coercion helpers for the dashboard report payload.
Upstream fields may be missing, of the wrong type or non-numeric;
everything here degrades to a default instead of raising.
"""

import logging
from typing import Any, Callable, List, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# pandas resolves these against the clock; upstream data never means that
RELATIVE_DATE_WORDS = {"now", "today", "yesterday", "tomorrow"}


def to_number(value: Any, fallback: float = 0) -> float:
    """Return ``value`` as a finite number, or ``fallback``."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, np.integer)):
        try:
            as_float = float(value)
        except OverflowError:
            return fallback
        return int(value) if np.isfinite(as_float) else fallback
    if isinstance(value, (float, np.floating)):
        return float(value) if np.isfinite(value) else fallback
    if value is None:
        return fallback
    if isinstance(value, str):
        if not value.strip():
            return 0
        # float() accepts digit separators, JSON numbers do not
        if "_" in value:
            return fallback
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    return number if np.isfinite(number) else fallback


def parse_timestamp(text: str) -> Optional[pd.Timestamp]:
    """Parse an absolute date string, or None."""
    if not text or text.strip().lower() in RELATIVE_DATE_WORDS:
        return None
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    return None if ts is None or pd.isna(ts) else ts


def to_calendar_date(value: Any) -> str:
    """
    Normalize ``value`` to a ``YYYY-MM-DD`` string.
    Unparseable input is passed through unchanged; callers sort on it anyway.
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    ts = parse_timestamp(text)
    if ts is None:
        logger.debug(f"Unparseable date kept as-is: {text!r}")
        return text
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC")
    return ts.strftime("%Y-%m-%d")


def safe_array(value: Any, map_fn: Optional[Callable[[Any], Any]] = None) -> List:
    if not isinstance(value, (list, tuple)):
        return []
    if map_fn is None:
        return list(value)
    return [map_fn(item) for item in value]


def field(entry: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from an entry that may not be a dict at all."""
    if isinstance(entry, dict):
        return entry.get(key, default)
    return default
