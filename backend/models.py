from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TimeSeriesRow:
    """One day of a single report series, value already coerced."""

    date: str
    label: str
    tooltip_label: str
    value: float = 0


@dataclass(frozen=True)
class MergedRow:
    date: str
    label: str
    tooltip_label: str
    logins: float = 0
    registrations: float = 0


@dataclass(frozen=True)
class TrendStat:
    """
    Week-over-week comparison.

    ``percentage`` is None when the previous window sums to 0, meaning the
    trend is undefined rather than infinite.
    """

    current: float = 0
    previous: float = 0
    diff: float = 0
    percentage: Optional[float] = None


@dataclass(frozen=True)
class RankedItem:
    name: str
    value: float
    percentage: float = 0.0


@dataclass(frozen=True)
class GaugeReading:
    name: str
    value: float


@dataclass(frozen=True)
class Insight:
    kind: str
    title: str
    description: str


@dataclass(frozen=True)
class Kpis:
    total_students: float = 0
    avatar_selected: float = 0
    avatar_rate: float = 0.0
    active_days: int = 0
    distinct_days: int = 0
    schools_count: int = 0
    total_logins: float = 0
    total_registrations: float = 0
    average_students_per_school: float = 0.0
    engagement_rate: float = 0.0


@dataclass(frozen=True)
class Trends:
    logins: TrendStat = field(default_factory=TrendStat)
    registrations: TrendStat = field(default_factory=TrendStat)


@dataclass(frozen=True)
class DerivedView:
    kpis: Kpis
    stage_progress: List[RankedItem]
    stage_ranking: List[RankedItem]
    school_ranking: List[RankedItem]
    mission_engagement: List[RankedItem]
    login_series: List[TimeSeriesRow]
    registration_series: List[TimeSeriesRow]
    merged_series: List[MergedRow]
    trends: Trends
    insights: List[Insight]
    gauges: List[GaugeReading]
    date_range: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        """JSON-serialisable copy, handy for logging and st.json."""
        return asdict(self)
