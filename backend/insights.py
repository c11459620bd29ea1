"""
Narrative insights: up to five superlative facts picked from the derived data.
An insight whose source list is empty is left out, never shown as a placeholder.
"""

from typing import List, Optional, Sequence

from backend.formatting import format_number, format_percent
from backend.models import Insight, RankedItem, TimeSeriesRow


def _peak_day(rows: Sequence[TimeSeriesRow]) -> Optional[TimeSeriesRow]:
    """Highest non-zero day; the first one wins a tie."""
    candidates = [row for row in rows if row.value > 0]
    if not candidates:
        return None
    return sorted(candidates, key=lambda row: row.value, reverse=True)[0]


def _top(items: Sequence[RankedItem], by_percentage: bool = False) -> Optional[RankedItem]:
    if not items:
        return None
    key = (lambda item: item.percentage) if by_percentage else (lambda item: item.value)
    return sorted(items, key=key, reverse=True)[0]


def select_insights(
    logins: Sequence[TimeSeriesRow],
    registrations: Sequence[TimeSeriesRow],
    stages: Sequence[RankedItem],
    missions: Sequence[RankedItem],
    schools: Sequence[RankedItem],
) -> List[Insight]:
    insights: List[Insight] = []

    peak_registration = _peak_day(registrations)
    if peak_registration is not None:
        insights.append(Insight(
            kind="registration_peak",
            title="Registration peak",
            description=(
                f"{format_number(peak_registration.value)} new registrations on "
                f"{peak_registration.tooltip_label.lower()}"
            ),
        ))

    top_stage = _top(stages, by_percentage=True)
    if top_stage is not None:
        insights.append(Insight(
            kind="top_stage",
            title="Most completed stage",
            description=f"{top_stage.name} holds {format_percent(top_stage.percentage)} of evidence submissions",
        ))

    top_mission = _top(missions)
    if top_mission is not None:
        insights.append(Insight(
            kind="top_mission",
            title="Featured mission",
            description=f"{top_mission.name} received {format_number(top_mission.value)} submissions",
        ))

    top_school = _top(schools, by_percentage=True)
    if top_school is not None:
        insights.append(Insight(
            kind="top_school",
            title="Most engaged school",
            description=f"{top_school.name} concentrates {format_percent(top_school.percentage)} of active students",
        ))

    peak_login = _peak_day(logins)
    if peak_login is not None:
        insights.append(Insight(
            kind="login_peak",
            title="Busiest login day",
            description=f"{format_number(peak_login.value)} sessions on {peak_login.tooltip_label.lower()}",
        ))

    return insights
