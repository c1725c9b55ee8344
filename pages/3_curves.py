# pages/3_curves.py
"""
Collection Curves Analysis - recovery patterns by months since origination.
"""

import streamlit as st
import altair as alt

from utils.config import setup_page, get_supabase_client, COLOR_PALETTE, CURVE_RANGE_OPTIONS
from utils.data_loader import FundDataLoader, DataLoadError
from utils.display_components import display_load_error, display_summary_table
from utils.formatting import format_percent
from services.curves import (
    VIEW_CUMULATIVE,
    VIEW_MONTHLY,
    build_curves,
    curve_providers,
    default_providers,
    filter_curves,
    curves_frame,
    average_curve,
)

setup_page("Fund Analytics | Collection Curves")

st.title("Collection Curves Analysis")
st.markdown("Recovery patterns and performance over time")

# ----------------------------
# Load data
# ----------------------------
loader = FundDataLoader(get_supabase_client())

with st.spinner("Calculating collection curves..."):
    try:
        records = loader.load_records(order_by="origination_date")
    except DataLoadError as e:
        display_load_error(e)

points = build_curves(records)
providers = curve_providers(points)

if not points:
    st.info("No cases with an origination date to build curves from.")
    st.stop()

# ----------------------------
# Controls
# ----------------------------
col1, col2, col3 = st.columns(3)
with col1:
    view_label = st.selectbox("View Type", ["Cumulative Recovery", "Monthly Recovery"])
    view = VIEW_CUMULATIVE if view_label == "Cumulative Recovery" else VIEW_MONTHLY
with col2:
    range_label = st.selectbox("Time Range", list(CURVE_RANGE_OPTIONS.keys()), index=1)
with col3:
    selected_providers = st.multiselect(
        "Providers", providers, default=default_providers(points)
    )

filtered = filter_curves(points, selected_providers, CURVE_RANGE_OPTIONS[range_label])
value_title = "Cumulative Recovery (%)" if view == VIEW_CUMULATIVE else "Monthly Recovery Rate (%)"

# ----------------------------
# Curves Chart
# ----------------------------
st.subheader("Cumulative Collection Curves" if view == VIEW_CUMULATIVE else "Monthly Recovery Rates")
curve_chart = alt.Chart(curves_frame(filtered, view)).mark_line(point=True).encode(
    x=alt.X("month:Q", title="Months Since Origination"),
    y=alt.Y("value:Q", title=value_title),
    color=alt.Color("provider:N", title="Provider", scale=alt.Scale(range=COLOR_PALETTE)),
    tooltip=["provider:N", "month:Q", alt.Tooltip("value:Q", format=".2f")],
).properties(height=400)
st.altair_chart(curve_chart, width="stretch")

# ----------------------------
# Average Curve
# ----------------------------
st.subheader("Average Curve (Selected Providers)")
average_df = average_curve(filtered, view)
band = alt.Chart(average_df).mark_area(opacity=0.2, color=COLOR_PALETTE[0]).encode(
    x=alt.X("month:Q", title="Months Since Origination"),
    y=alt.Y("min:Q", title=value_title),
    y2="max:Q",
)
line = alt.Chart(average_df).mark_line(color=COLOR_PALETTE[0]).encode(
    x="month:Q",
    y="average:Q",
    tooltip=[
        "month:Q",
        alt.Tooltip("average:Q", format=".2f"),
        alt.Tooltip("min:Q", format=".2f"),
        alt.Tooltip("max:Q", format=".2f"),
    ],
)
st.altair_chart((band + line).properties(height=300), width="stretch")

display_summary_table(
    average_df.rename(columns={"month": "Month", "average": "Average", "min": "Min", "max": "Max"}),
    title="Average Curve Data",
    format_dict={"Average": format_percent, "Min": format_percent, "Max": format_percent},
)
