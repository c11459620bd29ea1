import pytest

from backend.models import TimeSeriesRow
from backend.report_client import load_fallback_report


@pytest.fixture
def sample_report():
    return load_fallback_report()


def make_row(date: str, value: float) -> TimeSeriesRow:
    return TimeSeriesRow(date=date, label=date, tooltip_label=date, value=value)


@pytest.fixture
def row():
    return make_row
