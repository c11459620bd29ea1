"""
Reusable Streamlit UI components for the gamification dashboard.
"""

import html
from datetime import datetime
from typing import List, Optional, Sequence

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from backend.config import ThemeConfig
from backend.formatting import format_number, format_percent, format_trend
from backend.models import GaugeReading, Insight, MergedRow, RankedItem, TrendStat

TEXT_PRIMARY = "#E2E8F0"
TEXT_SECONDARY = "#94A3B8"
GRID_COLOR = "rgba(148, 163, 184, 0.15)"


def _rgba(color: str, alpha: float) -> str:
    return f"rgba({int(color[1:3], 16)},{int(color[3:5], 16)},{int(color[5:7], 16)},{alpha})"


def inject_css(theme: ThemeConfig):
    """Inject global CSS overrides for the active theme."""
    st.markdown(f"""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@300;400;500;600;700&family=JetBrains+Mono:wght@400;500&display=swap');

        html, body, [class*="css"] {{
            font-family: 'Space Grotesk', sans-serif;
        }}

        .stApp {{
            background: {theme.background};
        }}

        /* Metric cards */
        .gm-card {{
            background: linear-gradient(135deg, {theme.surface} 0%, {_rgba(theme.accent, 0.08)} 100%);
            border: 1px solid {_rgba(theme.accent, 0.25)};
            border-radius: 16px;
            padding: 20px;
            margin-bottom: 12px;
            position: relative;
            overflow: hidden;
        }}

        .gm-card::before {{
            content: '';
            position: absolute;
            top: 0; left: 0;
            right: 0; height: 3px;
            background: {theme.accent};
        }}

        .card-label {{
            font-size: 11px;
            font-weight: 600;
            letter-spacing: 0.08em;
            text-transform: uppercase;
            color: {TEXT_SECONDARY};
            margin-bottom: 6px;
        }}

        .card-value {{
            font-size: 30px;
            font-weight: 700;
            color: {TEXT_PRIMARY};
            line-height: 1;
            font-family: 'JetBrains Mono', monospace;
        }}

        .card-trend-up {{ font-size: 12px; color: #34D399; font-weight: 600; }}
        .card-trend-down {{ font-size: 12px; color: #FB7185; font-weight: 600; }}

        .card-desc {{
            font-size: 11px;
            color: {TEXT_SECONDARY};
            margin-top: 6px;
        }}

        /* Section headers */
        .section-header {{
            margin: 28px 0 12px 0;
            padding-bottom: 8px;
            border-bottom: 1px solid {_rgba(theme.accent, 0.2)};
        }}

        .section-title {{
            font-size: 15px;
            font-weight: 700;
            letter-spacing: 0.06em;
            text-transform: uppercase;
            color: {TEXT_PRIMARY};
        }}

        .section-desc {{
            font-size: 12px;
            color: {TEXT_SECONDARY};
        }}

        /* Mission bars */
        .mission-row {{ margin-bottom: 10px; }}
        .mission-track {{
            background: {_rgba(theme.accent, 0.1)};
            border-radius: 999px;
            height: 8px;
        }}
        .mission-fill {{
            background: {theme.accent};
            border-radius: 999px;
            height: 8px;
        }}

        /* Insights */
        .insight {{
            border-left: 3px solid {theme.accent};
            padding: 6px 12px;
            margin-bottom: 10px;
        }}
        .insight-title {{ font-weight: 600; color: {TEXT_PRIMARY}; font-size: 13px; }}
        .insight-desc {{ color: {TEXT_SECONDARY}; font-size: 12px; }}

        hr {{ border-color: {_rgba(theme.accent, 0.15)} !important; }}
    </style>
    """, unsafe_allow_html=True)


# ─────────────────────────────────────────────
# METRIC CARD
# ─────────────────────────────────────────────

def metric_card(label: str, value: str, subtitle: str = "", trend: Optional[TrendStat] = None):
    """Render a styled metric card with an optional weekly trend badge."""
    trend_text = format_trend(trend)
    if trend_text is None:
        trend_html = ""
    elif trend.diff >= 0:
        trend_html = f'<div class="card-trend-up">▲ {trend_text} vs previous week</div>'
    else:
        trend_html = f'<div class="card-trend-down">▼ {trend_text} vs previous week</div>'

    st.markdown(f"""
    <div class="gm-card">
        <div class="card-label">{html.escape(label)}</div>
        <div class="card-value">{html.escape(value)}</div>
        {trend_html}
        <div class="card-desc">{html.escape(subtitle)}</div>
    </div>
    """, unsafe_allow_html=True)


def section_header(title: str, description: str = ""):
    desc_html = f'<div class="section-desc">{html.escape(description)}</div>' if description else ""
    st.markdown(f"""
    <div class="section-header">
        <div class="section-title">{html.escape(title)}</div>
        {desc_html}
    </div>
    """, unsafe_allow_html=True)


# ─────────────────────────────────────────────
# CHARTS
# ─────────────────────────────────────────────

PLOTLY_LAYOUT = dict(
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font=dict(family="Space Grotesk, sans-serif", color=TEXT_SECONDARY, size=11),
    margin=dict(l=10, r=10, t=30, b=30),
    xaxis=dict(showgrid=False, showline=False, tickfont=dict(color=TEXT_SECONDARY, size=10), zeroline=False),
    yaxis=dict(showgrid=True, gridcolor=GRID_COLOR, showline=False,
               tickfont=dict(color=TEXT_SECONDARY, size=10), zeroline=False),
    legend=dict(bgcolor="rgba(0,0,0,0)", orientation="h", y=1.12, font=dict(color=TEXT_SECONDARY)),
)


def daily_flow_chart(rows: Sequence[MergedRow], theme: ThemeConfig, height: int = 320):
    """Logins and registrations per day as two filled areas."""
    if not rows:
        st.caption("No daily data")
        return
    x = [row.label for row in rows]
    hover = [row.tooltip_label for row in rows]
    fig = go.Figure()
    for name, values, color in (
        ("Logins", [row.logins for row in rows], theme.login_color),
        ("Registrations", [row.registrations for row in rows], theme.registration_color),
    ):
        fig.add_trace(go.Scatter(
            x=x, y=values, name=name,
            mode="lines",
            line=dict(color=color, width=2.4, shape="spline"),
            fill="tozeroy",
            fillcolor=_rgba(color, 0.15),
            customdata=hover,
            hovertemplate="%{customdata}<br>" + name + ": %{y:,}<extra></extra>",
        ))
    fig.update_layout(**{**PLOTLY_LAYOUT, "height": height})
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def stage_bar_chart(stages: Sequence[RankedItem], theme: ThemeConfig, height: int = 300):
    if not stages:
        st.caption("No stage data")
        return
    colors = [theme.palette[i % len(theme.palette)] for i in range(len(stages))]
    fig = go.Figure(go.Bar(
        x=[stage.name for stage in stages],
        y=[stage.value for stage in stages],
        marker_color=colors,
        marker_line_width=0,
        customdata=[format_percent(stage.percentage) for stage in stages],
        hovertemplate="%{x}<br>Completions: %{y:,} (%{customdata})<extra></extra>",
    ))
    fig.update_layout(**{**PLOTLY_LAYOUT, "height": height, "bargap": 0.25})
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def gauge_chart(reading: GaugeReading, color: str, height: int = 200):
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=reading.value,
        number=dict(suffix="%", valueformat=".1f", font=dict(color=TEXT_PRIMARY, size=26, family="JetBrains Mono")),
        gauge=dict(
            axis=dict(range=[0, 100], tickfont=dict(color=TEXT_SECONDARY)),
            bar=dict(color=color),
            bgcolor=_rgba(color, 0.08),
            borderwidth=0,
        ),
        title=dict(text=reading.name, font=dict(color=TEXT_PRIMARY, size=12)),
    ))
    layout = {**PLOTLY_LAYOUT, "height": height}
    del layout["xaxis"], layout["yaxis"]
    fig.update_layout(**layout)
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


# ─────────────────────────────────────────────
# LISTS & TABLES
# ─────────────────────────────────────────────

def mission_bars(missions: Sequence[RankedItem]):
    """Progress bars scaled to the most engaged mission."""
    if not missions:
        st.caption("No mission data")
        return
    for position, mission in enumerate(missions, start=1):
        st.markdown(f"""
        <div class="mission-row">
            <div style="display:flex;justify-content:space-between;font-size:13px;color:{TEXT_PRIMARY};">
                <span>{position}. {html.escape(mission.name)}</span>
                <span>{format_number(mission.value)}</span>
            </div>
            <div class="mission-track">
                <div class="mission-fill" style="width:{mission.percentage or 0:.1f}%;"></div>
            </div>
        </div>
        """, unsafe_allow_html=True)


def school_table(schools: Sequence[RankedItem]):
    if not schools:
        st.caption("No school data")
        return
    df = pd.DataFrame([
        {"#": position, "School": school.name, "Students": school.value, "Share": school.percentage}
        for position, school in enumerate(schools, start=1)
    ])
    st.dataframe(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            "Students": st.column_config.NumberColumn(format="%d"),
            "Share": st.column_config.ProgressColumn(format="%.1f%%", min_value=0, max_value=100),
        },
    )


def insight_list(insights: List[Insight]):
    if not insights:
        st.caption("No insights yet")
        return
    for insight in insights:
        st.markdown(f"""
        <div class="insight">
            <div class="insight-title">{html.escape(insight.title)}</div>
            <div class="insight-desc">{html.escape(insight.description)}</div>
        </div>
        """, unsafe_allow_html=True)


def status_badge(is_fallback: bool, last_error: Optional[str], last_update: Optional[datetime]):
    """Live / example-data indicator shown in the header."""
    updated = last_update.strftime("%H:%M:%S UTC") if last_update else "—"
    if not is_fallback:
        st.markdown(
            f'<div style="display:inline-flex;align-items:center;gap:6px;background:#052E16;border:1px solid #166534;'
            f'border-radius:20px;padding:4px 12px;font-size:12px;color:#4ADE80;">'
            f'<span style="width:6px;height:6px;background:#4ADE80;border-radius:50%;"></span>'
            f'Live · updated {updated}</div>',
            unsafe_allow_html=True
        )
        return
    st.markdown(
        f'<div style="display:inline-flex;align-items:center;gap:6px;background:#2D1A05;border:1px solid #92400E;'
        f'border-radius:20px;padding:4px 12px;font-size:12px;color:#FCD34D;">'
        f'<span style="width:6px;height:6px;background:#F59E0B;border-radius:50%;"></span>'
        f'Example payload · updated {updated}</div>',
        unsafe_allow_html=True
    )
    if last_error:
        st.caption(f"Live fetch failed: {last_error}")
