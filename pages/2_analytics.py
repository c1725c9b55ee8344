# pages/2_analytics.py
"""
Advanced Analytics - investment grading, risk assessment and performance
scores per provider.
"""

import streamlit as st
import altair as alt

from utils.config import (
    setup_page,
    get_supabase_client,
    GRADE_COLORS,
    TIMEFRAME_OPTIONS,
)
from utils.data_loader import FundDataLoader, DataLoadError
from utils.display_components import display_load_error, display_grade_legend, style_recommendation
from utils.formatting import format_percent, format_velocity
from services.scoring import (
    ALL_GRADES,
    GRADE_BANDS,
    FAILING_GRADE,
    score_providers,
    filter_by_timeframe,
    top_performers,
    grade_distribution,
    radar_frame,
    scores_frame,
)

setup_page("Fund Analytics | Advanced Analytics")

st.title("Advanced Analytics")
st.markdown("Investment grading, risk assessment, and performance metrics")

# ----------------------------
# Controls
# ----------------------------
col1, col2 = st.columns(2)
with col1:
    focus = st.selectbox("Focus", ["Performance Focus", "Risk Analysis", "Efficiency Metrics"])
with col2:
    timeframe_label = st.selectbox("Time Frame", ["All Time"] + list(TIMEFRAME_OPTIONS.keys()), index=2)

# ----------------------------
# Load & score
# ----------------------------
loader = FundDataLoader(get_supabase_client())

with st.spinner("Analyzing portfolio metrics..."):
    try:
        records = loader.load_records()
    except DataLoadError as e:
        display_load_error(e)

if timeframe_label != "All Time":
    records = filter_by_timeframe(records, TIMEFRAME_OPTIONS[timeframe_label])

results = score_providers(records)

if not results:
    st.info("No provider data for the selected time frame.")
    st.stop()

sort_column = {
    "Performance Focus": "performance_score",
    "Risk Analysis": "risk_score",
    "Efficiency Metrics": "efficiency",
}[focus]

# ----------------------------
# Grade Distribution & Risk Matrix
# ----------------------------
col1, col2 = st.columns(2)

with col1:
    st.subheader("Investment Grade Distribution")
    grade_legend = {grade: f"{bound:.0f}+" for bound, grade in GRADE_BANDS}
    grade_legend[FAILING_GRADE] = f"below {GRADE_BANDS[-1][0]:.0f}"
    display_grade_legend(grade_legend)
    grade_df = grade_distribution(results)
    grade_chart = alt.Chart(grade_df).mark_bar().encode(
        x=alt.X("grade:N", title="Grade", sort=ALL_GRADES),
        y=alt.Y("percentage:Q", title="% of Providers"),
        color=alt.Color(
            "grade:N",
            scale=alt.Scale(domain=list(GRADE_COLORS.keys()), range=list(GRADE_COLORS.values())),
            legend=None,
        ),
        tooltip=["grade:N", "count:Q", alt.Tooltip("percentage:Q", format=".1f")],
    ).properties(height=300)
    st.altair_chart(grade_chart, width="stretch")

with col2:
    st.subheader("Risk vs Performance Matrix")
    scatter = alt.Chart(scores_frame(results)).mark_circle(opacity=0.7).encode(
        x=alt.X("risk_score:Q", title="Risk Score", scale=alt.Scale(domain=[0, 100])),
        y=alt.Y("performance_score:Q", title="Performance Score", scale=alt.Scale(domain=[0, 100])),
        size=alt.Size("volume:Q", title="Volume", scale=alt.Scale(range=[50, 400])),
        color=alt.Color(
            "grade:N",
            scale=alt.Scale(domain=list(GRADE_COLORS.keys()), range=list(GRADE_COLORS.values())),
        ),
        tooltip=[
            "provider:N",
            "grade:N",
            alt.Tooltip("risk_score:Q", format=".1f"),
            alt.Tooltip("performance_score:Q", format=".1f"),
            alt.Tooltip("volume:Q", format="$,.0f"),
        ],
    ).properties(height=300)
    st.altair_chart(scatter, width="stretch")

# ----------------------------
# Top 5 Comparison
# ----------------------------
st.subheader("Top 5 Providers - Multi-Dimensional Analysis")
comparison_chart = alt.Chart(radar_frame(results, n=5)).mark_bar().encode(
    x=alt.X("metric:N", title=""),
    y=alt.Y("value:Q", title="Score", scale=alt.Scale(domain=[0, 100])),
    xOffset="provider:N",
    color=alt.Color("provider:N", title="Provider"),
    tooltip=["provider:N", "metric:N", alt.Tooltip("value:Q", format=".1f")],
).properties(height=400)
st.altair_chart(comparison_chart, width="stretch")

# ----------------------------
# Performance Table
# ----------------------------
st.subheader("Provider Performance Rankings")
table_df = scores_frame(top_performers(results, n=len(results)))
table_df = table_df.sort_values(sort_column, ascending=(sort_column == "risk_score")).head(10)
table_df = table_df[[
    "provider", "grade", "performance_score", "risk_score",
    "recovery_velocity", "consistency", "efficiency", "recommendation",
]]
table_df.columns = [
    "Provider", "Grade", "Performance", "Risk Score",
    "Recovery Velocity", "Consistency", "Efficiency", "Recommendation",
]
styled = table_df.style.format({
    "Performance": "{:.1f}",
    "Risk Score": "{:.1f}",
    "Recovery Velocity": format_velocity,
    "Consistency": format_percent,
    "Efficiency": format_percent,
}).map(style_recommendation, subset=["Recommendation"])
st.dataframe(styled, width="stretch", hide_index=True)
