import itertools
import json
import math

import pytest

from backend.calculator import ReportCalculator, build_derived_view
from backend.models import DerivedView


def _numbers(view: DerivedView):
    """Every float/int leaf of the serialised view."""
    def walk(obj):
        if isinstance(obj, dict):
            for value in obj.values():
                yield from walk(value)
        elif isinstance(obj, (list, tuple)):
            for value in obj:
                yield from walk(value)
        elif isinstance(obj, (int, float)) and not isinstance(obj, bool):
            yield obj
    return list(walk(view.as_dict()))


def test_no_report_yet():
    assert build_derived_view(None) is None


def test_sample_report_kpis(sample_report):
    kpis = build_derived_view(sample_report).kpis

    assert kpis.total_students == 1842
    assert kpis.avatar_rate == pytest.approx(1317 / 1842 * 100)
    assert kpis.schools_count == 5
    assert kpis.average_students_per_school == pytest.approx(1842 / 5)
    assert kpis.active_days == 13
    assert kpis.distinct_days == 15
    assert kpis.engagement_rate == pytest.approx(13 / 15 * 100)
    assert kpis.total_registrations == 433


def test_sample_report_rankings(sample_report):
    view = build_derived_view(sample_report)

    assert view.school_ranking[0].name == "EE Monteiro Lobato"
    assert view.school_ranking[0].percentage == pytest.approx(502 / 1842 * 100)
    assert [s.name for s in view.stage_progress][0] == "Exploração"
    assert sum(s.percentage for s in view.stage_progress) == pytest.approx(100)

    missions = view.mission_engagement
    assert len(missions) == 6
    assert missions[0].name == "Horta na escola"
    assert missions[0].percentage == pytest.approx(100)
    assert missions[1].percentage == pytest.approx(287 / 331 * 100)


def test_sample_report_series(sample_report):
    view = build_derived_view(sample_report)

    assert len(view.merged_series) == 15
    assert view.merged_series[0].date == "2024-09-01"
    assert view.merged_series[0].logins == 0
    assert view.merged_series[0].registrations == 35
    assert view.date_range == "01 September 2024 — 15 September 2024"
    assert view.trends.logins.current == 212 + 247 + 239 + 268 + 191 + 57 + 12


def test_zero_students_never_divides():
    view = build_derived_view({
        "total_students": 0,
        "avatar_selection_count": 10,
        "school_user_counts": [{"school_name": "A", "users_count": 4}],
    })
    assert view.kpis.avatar_rate == 0
    assert view.kpis.average_students_per_school == 0
    assert view.school_ranking[0].percentage == 0


def test_no_schools_average_is_zero():
    view = build_derived_view({"total_students": 40})
    assert view.kpis.average_students_per_school == 0
    assert view.kpis.engagement_rate == 0


def test_empty_report():
    view = build_derived_view({})

    assert view.merged_series == []
    assert view.insights == []
    assert view.date_range is None
    assert view.trends.logins.percentage is None
    assert view.trends.registrations.percentage is None


def test_malformed_report_is_absorbed():
    view = build_derived_view({
        "total_students": "abc",
        "avatar_selection_count": float("nan"),
        "stage_completion_counts": "oops",
        "daily_login_completions": [None, {"date": "2024-01-01", "completions": "x"}, 7],
        "evidence_mission_completion_counts": [{"mission_name": None, "users_count": "12"}],
        "school_user_counts": {"not": "a list"},
        "new_registrations_counts": [{"date": "someday", "registrations": "3"}],
    })

    assert view.kpis.total_students == 0
    assert view.stage_progress == []
    assert view.school_ranking == []
    assert view.mission_engagement[0].name == ""
    assert view.mission_engagement[0].value == 12
    assert view.kpis.total_registrations == 3
    assert "someday" in [row.date for row in view.merged_series]
    assert all(math.isfinite(n) for n in _numbers(view))


def test_missions_all_zero():
    view = build_derived_view({
        "evidence_mission_completion_counts": [
            {"mission_name": "A", "users_count": 0},
            {"mission_name": "B", "users_count": 0},
        ],
    })
    assert [m.percentage for m in view.mission_engagement] == [0, 0]


def test_stage_share_with_zero_total():
    calc = ReportCalculator({"stage_completion_counts": [{"stage_name": "One", "users_count": 0}]})
    assert calc.stage_progress()[0].percentage == 0


def test_rankings_are_descending_and_stable():
    schools = [
        {"school_name": "A", "users_count": 5},
        {"school_name": "B", "users_count": 7},
        {"school_name": "C", "users_count": 5},
        {"school_name": "D", "users_count": 1},
    ]
    for permutation in itertools.permutations(schools):
        ranked = ReportCalculator({"total_students": 18, "school_user_counts": list(permutation)}).school_ranking()
        values = [item.value for item in ranked]
        assert values == sorted(values, reverse=True)
        ties = [item.name for item in ranked if item.value == 5]
        assert ties == [s["school_name"] for s in permutation if s["users_count"] == 5]


def test_stage_ranking_keeps_progress_order_separate():
    calc = ReportCalculator({"stage_completion_counts": [
        {"stage_name": "First", "users_count": 1},
        {"stage_name": "Second", "users_count": 3},
    ]})
    view = calc.compute_all()
    assert [s.name for s in view.stage_progress] == ["First", "Second"]
    assert [s.name for s in view.stage_ranking] == ["Second", "First"]


def test_gauges_are_capped():
    view = build_derived_view({"total_students": 10, "avatar_selection_count": 25})
    avatar = [g for g in view.gauges if g.name == "Avatar selected"][0]
    assert view.kpis.avatar_rate == pytest.approx(250)
    assert avatar.value == 100


def test_rebuild_is_deterministic(sample_report):
    assert build_derived_view(sample_report) == build_derived_view(sample_report)


def test_integer_too_large_for_a_float_is_ignored():
    report = json.loads(
        '{"total_students": 1' + "0" * 400 + ', '
        '"school_user_counts": [{"school_name": "A", "users_count": 1}]}'
    )

    view = build_derived_view(report)

    assert view.kpis.total_students == 0
    assert view.kpis.average_students_per_school == 0
    assert view.school_ranking[0].percentage == 0
    assert all(math.isfinite(n) for n in _numbers(view))
