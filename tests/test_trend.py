import random

import pytest

from backend.calculator import compute_trend
from backend.models import TrendStat


def _days(values, start_day=1):
    return [
        {"date": f"2024-01-{day:02d}", "value": value}
        for day, value in enumerate(values, start=start_day)
    ]


def test_empty_series():
    assert compute_trend([]) == TrendStat(current=0, previous=0, diff=0, percentage=None)


def test_two_full_weeks():
    series = _days([5, 5, 5, 5, 10, 10, 10] + [10] * 7)
    random.Random(7).shuffle(series)

    trend = compute_trend(series)

    assert trend.current == 70
    assert trend.previous == 50
    assert trend.diff == 20
    assert trend.percentage == pytest.approx(40.0)


def test_short_series_has_no_previous_window():
    trend = compute_trend(_days([3, 4]))
    assert trend == TrendStat(current=7, previous=0, diff=7, percentage=None)


def test_partial_previous_window():
    # 10 entries: last 7 are current, first 3 are previous
    trend = compute_trend(_days([1, 2, 3] + [1] * 7))
    assert trend.current == 7
    assert trend.previous == 6
    assert trend.percentage == pytest.approx(100 / 6)


def test_drop_gives_negative_percentage():
    trend = compute_trend(_days([10] * 7 + [5] * 7))
    assert trend.diff == -35
    assert trend.percentage == pytest.approx(-50.0)


def test_previous_zero_means_undefined_percentage():
    trend = compute_trend(_days([0] * 7 + [4] * 7))
    assert trend.previous == 0
    assert trend.percentage is None


def test_windows_are_positions_not_calendar_weeks():
    # gaps in the calendar still count as consecutive entries
    series = [{"date": f"2024-0{month}-01", "value": 1} for month in range(1, 9)]
    trend = compute_trend(series)
    assert trend.current == 7
    assert trend.previous == 1


def test_custom_selector_and_bad_values():
    series = [
        {"date": "2024-01-01", "logins": "3"},
        {"date": "2024-01-02", "logins": "n/a"},
        {"date": "2024-01-03"},
    ]
    assert compute_trend(series, key="logins").current == 3
    assert compute_trend(series, key=lambda entry: entry.get("logins")).current == 3


def test_accepts_series_rows(row):
    trend = compute_trend([row("2024-01-02", 2), row("2024-01-01", 1)])
    assert trend.current == 3
