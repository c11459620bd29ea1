"""
Gamification Dashboard
Run with: streamlit run frontend/app.py
"""

import sys
import logging
from functools import partial
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from backend.config import ConfigError, load_config
from backend.formatting import format_compact, format_number, format_percent
from backend.poller import ReportPoller
from backend.report_client import ReportClient, load_fallback_report
from backend.state import StateStore
from frontend.components import (
    daily_flow_chart,
    gauge_chart,
    inject_css,
    insight_list,
    metric_card,
    mission_bars,
    school_table,
    section_header,
    stage_bar_chart,
    status_badge,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Gamification Dashboard",
    layout="wide",
    initial_sidebar_state="collapsed",
)

try:
    config = load_config()
except ConfigError as e:
    st.error(f"Configuration error: {e}")
    st.stop()

theme = config.active_theme
inject_css(theme)


@st.cache_resource
def get_client(endpoint: str, timeout: float, max_retries: int, backoff_factor: float) -> ReportClient:
    return ReportClient(endpoint=endpoint, timeout=timeout, max_retries=max_retries, backoff_factor=backoff_factor)


client = get_client(config.endpoint, config.timeout, config.max_retries, config.backoff_factor)
store = StateStore()
poller = ReportPoller(
    client,
    state=store.get(),
    fallback_loader=partial(load_fallback_report, config.fallback_payload),
)

with st.sidebar:
    st.markdown("#### Data source")
    st.caption(config.endpoint)
    st.caption(f"Theme: {theme.name} · refresh every {theme.refresh_seconds}s")


# ─────────────────────────────────────────────────────────────────────────────
# DASHBOARD (re-runs on the refresh timer)
# ─────────────────────────────────────────────────────────────────────────────

@st.fragment(run_every=theme.refresh_seconds)
def render_dashboard():
    state = poller.poll()
    derived = state.derived
    if not state.loaded:
        st.info("Loading analytics data…")
        return

    kpis = derived.kpis
    trends = derived.trends

    # ── Header ─────────────────────────────────────────────────────────────
    col_title, col_status = st.columns([3, 1])
    with col_title:
        st.markdown(f"""
        <div style="margin-bottom: 4px;">
            <span style="font-size: 28px; font-weight: 800; color: #E2E8F0;">{theme.title}</span>
        </div>
        """, unsafe_allow_html=True)
        st.caption(
            f"Student engagement, refreshed every {theme.refresh_seconds} seconds · "
            f"{format_number(kpis.total_logins)} logins recorded"
        )
    with col_status:
        status_badge(state.is_fallback, state.last_error, state.last_fetch_timestamp)

    if state.is_fallback:
        st.warning("Showing the bundled example payload (data/dashboard-payload-example.json).")

    # ── KPI cards ──────────────────────────────────────────────────────────
    cols = st.columns(4)
    with cols[0]:
        metric_card(
            "Registered students",
            format_number(kpis.total_students),
            f"{format_compact(trends.registrations.current)} registrations in the last 7 days",
            trend=trends.registrations,
        )
    with cols[1]:
        metric_card(
            "Avatar adoption",
            format_percent(kpis.avatar_rate),
            f"{format_number(kpis.avatar_selected)} students already customized their profile",
        )
    with cols[2]:
        metric_card(
            "Weekly logins",
            format_compact(trends.logins.current),
            f"{format_percent(kpis.engagement_rate)} of monitored days have logins",
            trend=trends.logins,
        )
    with cols[3]:
        metric_card(
            "Students per school",
            format_number(round(kpis.average_students_per_school)),
            f"{kpis.schools_count} active schools on the platform",
        )

    # ── Daily flow + gauges ────────────────────────────────────────────────
    col_flow, col_gauges = st.columns([2, 1])
    with col_flow:
        section_header("Daily logins and registrations", derived.date_range or "")
        st.caption(f"Weekly login trend: {format_percent(abs(trends.logins.percentage or 0))}")
        daily_flow_chart(derived.merged_series, theme)
    with col_gauges:
        section_header("Overall engagement", "Percentage indicators")
        for reading, color in zip(derived.gauges, (theme.login_color, theme.registration_color)):
            gauge_chart(reading, color=color, height=180)
        st.caption(
            f"{kpis.schools_count} active schools average "
            f"{format_number(round(kpis.average_students_per_school))} students each. "
            f"{format_number(kpis.total_registrations)} registrations and "
            f"{format_number(kpis.total_logins)} sessions accumulated."
        )

    # ── Stages + missions ──────────────────────────────────────────────────
    col_stages, col_missions = st.columns(2)
    with col_stages:
        section_header("Completions per stage", "Distribution across learning tracks")
        stage_bar_chart(derived.stage_progress, theme)
    with col_missions:
        section_header("Most engaged missions", "Top 6 missions with evidence submitted")
        mission_bars(derived.mission_engagement)

    # ── Schools + insights ─────────────────────────────────────────────────
    col_schools, col_insights = st.columns([3, 2])
    with col_schools:
        section_header("School ranking", "Ordered by number of active students")
        school_table(derived.school_ranking)
    with col_insights:
        section_header("Actionable insights", "What drives engagement")
        insight_list(derived.insights)


render_dashboard()
