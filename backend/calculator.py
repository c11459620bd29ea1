"""
Gamification report - derivation pipeline
Turns one raw dashboard report into the DerivedView consumed by the frontend:
KPIs, rankings, the merged login/registration series, weekly trends and insights.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from backend.coercion import field, safe_array, to_calendar_date, to_number
from backend.formatting import format_label_date, format_long_date
from backend.insights import select_insights
from backend.models import (
    DerivedView,
    GaugeReading,
    Kpis,
    MergedRow,
    RankedItem,
    TimeSeriesRow,
    TrendStat,
    Trends,
)

logger = logging.getLogger(__name__)

TREND_WINDOW = 7
TOP_MISSIONS = 6

Selector = Union[str, Callable[[Any], Any]]


def _select(entry: Any, key: Selector) -> float:
    if callable(key):
        return to_number(key(entry))
    if isinstance(entry, dict):
        return to_number(entry.get(key))
    return to_number(getattr(entry, key, None))


def _date_of(entry: Any) -> str:
    value = entry.get("date") if isinstance(entry, dict) else getattr(entry, "date", "")
    return value if isinstance(value, str) else str(value or "")


def _share(value: float, total: float) -> float:
    return value / total * 100 if total > 0 else 0.0


def _rank(items: Iterable[RankedItem]) -> List[RankedItem]:
    # sorted() is stable with reverse=True, equal values keep input order
    return sorted(items, key=lambda item: item.value, reverse=True)


def compute_trend(series: Sequence[Any], key: Selector = "value") -> TrendStat:
    """
    Compare the last 7 entries against the 7 before them.

    Windows are array positions after sorting by date, not calendar weeks:
    a series with gaps or duplicate dates is summed as-is. Dates must be ISO
    strings for the lexicographic sort to be chronological.
    """
    if not series:
        return TrendStat(current=0, previous=0, diff=0, percentage=None)

    ordered = sorted(series, key=_date_of)
    current = sum(_select(entry, key) for entry in ordered[-TREND_WINDOW:])
    previous = sum(_select(entry, key) for entry in ordered[-2 * TREND_WINDOW:-TREND_WINDOW])
    diff = current - previous
    percentage = diff / previous * 100 if previous > 0 else None
    return TrendStat(current=current, previous=previous, diff=diff, percentage=percentage)


def merge_series(logins: Sequence[TimeSeriesRow], registrations: Sequence[TimeSeriesRow]) -> List[MergedRow]:
    """
    One row per calendar date found in either series, ascending by date.
    Duplicate dates inside a series are summed.
    """
    by_date: Dict[str, Dict[str, Any]] = {}

    def _accumulate(rows: Sequence[TimeSeriesRow], side: str) -> None:
        for row in rows:
            slot = by_date.setdefault(row.date, {
                "date": row.date,
                "label": row.label,
                "tooltip_label": row.tooltip_label,
                "logins": 0,
                "registrations": 0,
            })
            slot[side] += to_number(row.value)

    _accumulate(logins, "logins")
    _accumulate(registrations, "registrations")

    return [MergedRow(**by_date[date]) for date in sorted(by_date)]


def _series_row(entry: Any, value_key: str) -> TimeSeriesRow:
    raw_date = field(entry, "date")
    return TimeSeriesRow(
        date=to_calendar_date(raw_date),
        label=format_label_date(raw_date),
        tooltip_label=format_long_date(raw_date),
        value=to_number(field(entry, value_key), 0),
    )


def _name(entry: Any, key: str) -> str:
    value = field(entry, key)
    return "" if value is None else str(value).strip()


class ReportCalculator:
    """
    Computes every DerivedView component from one raw report dict.
    Each public method is a pure function of the report; compute_all() runs them in order.
    """

    def __init__(self, report: Dict):
        self.report = report if isinstance(report, dict) else {}
        self._logins: Optional[List[TimeSeriesRow]] = None
        self._registrations: Optional[List[TimeSeriesRow]] = None

    @property
    def total_students(self) -> float:
        return to_number(self.report.get("total_students"), 0)

    @property
    def logins(self) -> List[TimeSeriesRow]:
        if self._logins is None:
            self._logins = safe_array(
                self.report.get("daily_login_completions"),
                lambda entry: _series_row(entry, "completions"),
            )
        return self._logins

    @property
    def registrations(self) -> List[TimeSeriesRow]:
        if self._registrations is None:
            self._registrations = safe_array(
                self.report.get("new_registrations_counts"),
                lambda entry: _series_row(entry, "registrations"),
            )
        return self._registrations

    # ─────────────────────────────────────────────
    # KPIs
    # ─────────────────────────────────────────────

    def kpis(self) -> Kpis:
        total_students = self.total_students
        avatar_selected = to_number(self.report.get("avatar_selection_count"), 0)
        schools_count = len(safe_array(self.report.get("school_user_counts")))
        active_days = sum(1 for row in self.logins if row.value > 0)
        distinct_days = len({row.date for row in self.logins} | {row.date for row in self.registrations})

        return Kpis(
            total_students=total_students,
            avatar_selected=avatar_selected,
            avatar_rate=_share(avatar_selected, total_students),
            active_days=active_days,
            distinct_days=distinct_days,
            schools_count=schools_count,
            total_logins=sum(row.value for row in self.logins),
            total_registrations=sum(row.value for row in self.registrations),
            average_students_per_school=total_students / schools_count if schools_count > 0 else 0.0,
            engagement_rate=_share(active_days, distinct_days),
        )

    # ─────────────────────────────────────────────
    # RANKINGS
    # ─────────────────────────────────────────────

    def stage_progress(self) -> List[RankedItem]:
        """Stages in report order, each with its share of all stage completions."""
        stages = safe_array(
            self.report.get("stage_completion_counts"),
            lambda entry: (_name(entry, "stage_name"), to_number(field(entry, "users_count"), 0)),
        )
        total = sum(value for _, value in stages)
        return [RankedItem(name=name, value=value, percentage=_share(value, total)) for name, value in stages]

    def school_ranking(self) -> List[RankedItem]:
        total_students = self.total_students
        schools = safe_array(
            self.report.get("school_user_counts"),
            lambda entry: (_name(entry, "school_name"), to_number(field(entry, "users_count"), 0)),
        )
        return _rank(
            RankedItem(name=name, value=value, percentage=_share(value, total_students))
            for name, value in schools
        )

    def missions_sorted(self) -> List[RankedItem]:
        missions = safe_array(
            self.report.get("evidence_mission_completion_counts"),
            lambda entry: RankedItem(
                name=_name(entry, "mission_name"),
                value=to_number(field(entry, "users_count"), 0),
            ),
        )
        return _rank(missions)

    def mission_engagement(self, top_n: int = TOP_MISSIONS) -> List[RankedItem]:
        """Top missions, each as a percentage of the single best mission."""
        ranked = self.missions_sorted()
        top_value = ranked[0].value if ranked else 0
        return [
            RankedItem(name=mission.name, value=mission.value, percentage=_share(mission.value, top_value))
            for mission in ranked[:top_n]
        ]

    # ─────────────────────────────────────────────
    # SERIES & TRENDS
    # ─────────────────────────────────────────────

    def merged_series(self) -> List[MergedRow]:
        return merge_series(self.logins, self.registrations)

    def trends(self) -> Trends:
        return Trends(
            logins=compute_trend(self.logins),
            registrations=compute_trend(self.registrations),
        )

    @staticmethod
    def gauges(kpis: Kpis) -> List[GaugeReading]:
        return [
            GaugeReading(name="Active login days", value=min(100.0, kpis.engagement_rate)),
            GaugeReading(name="Avatar selected", value=min(100.0, kpis.avatar_rate)),
        ]

    @staticmethod
    def date_range(merged: List[MergedRow]) -> Optional[str]:
        if not merged:
            return None
        return f"{merged[0].tooltip_label} — {merged[-1].tooltip_label}"

    def compute_all(self) -> DerivedView:
        kpis = self.kpis()
        stage_progress = self.stage_progress()
        stage_ranking = _rank(stage_progress)
        school_ranking = self.school_ranking()
        missions = self.missions_sorted()
        merged = self.merged_series()
        trends = self.trends()

        insights = select_insights(
            logins=self.logins,
            registrations=self.registrations,
            stages=stage_ranking,
            missions=missions,
            schools=school_ranking,
        )

        logger.debug(
            f"Derived view: {len(merged)} days, {len(stage_progress)} stages, "
            f"{len(school_ranking)} schools, {len(missions)} missions, {len(insights)} insights"
        )

        return DerivedView(
            kpis=kpis,
            stage_progress=stage_progress,
            stage_ranking=stage_ranking,
            school_ranking=school_ranking,
            mission_engagement=self.mission_engagement(),
            login_series=list(self.logins),
            registration_series=list(self.registrations),
            merged_series=merged,
            trends=trends,
            insights=insights,
            gauges=self.gauges(kpis),
            date_range=self.date_range(merged),
        )


def build_derived_view(report: Optional[Dict]) -> Optional[DerivedView]:
    """Full derivation for one report; None until a report has been fetched."""
    if report is None:
        return None
    return ReportCalculator(report).compute_all()
