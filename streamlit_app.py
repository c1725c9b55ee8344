# streamlit_app.py
"""
Portfolio Overview - headline totals, grade mix and top providers.
"""

import streamlit as st
import pandas as pd
import altair as alt

from utils.config import setup_page, get_supabase_client, PRIMARY_COLOR, OVERVIEW_ROW_LIMIT
from utils.data_loader import FundDataLoader, DataLoadError
from utils.display_components import display_metric_row, display_load_error, display_summary_table
from utils.formatting import format_currency, format_multiple, format_count
from services.aggregation import summarize_portfolio, provider_performance

setup_page("Fund Analytics | Portfolio Overview")

# ----------------------------
# Load data
# ----------------------------
loader = FundDataLoader(get_supabase_client())

with st.spinner("Loading portfolio..."):
    try:
        records = loader.load_records(order_by="purchase_month", descending=True, limit=OVERVIEW_ROW_LIMIT)
    except DataLoadError as e:
        display_load_error(e)

summary = summarize_portfolio(records)
top_providers = provider_performance(records, limit=10)

# ----------------------------
# Header & KPIs
# ----------------------------
st.title("Portfolio Overview")
st.markdown("Fund performance across all providers and investments.")

display_metric_row([
    {"label": "Total Invested", "value": summary.total_invested, "format": format_currency},
    {"label": "Current Value", "value": summary.current_value, "format": format_currency},
    {"label": "Avg Multiple", "value": summary.avg_multiple, "format": format_multiple},
    {"label": "Investments", "value": summary.count, "format": format_count,
     "help": f"Across {summary.provider_count} providers"},
])

st.markdown("---")

if summary.count == 0:
    st.info("No fund data available. Upload a file from the Admin page.")
    st.stop()

# ----------------------------
# Charts
# ----------------------------
col1, col2 = st.columns(2)

with col1:
    st.subheader("Grade Distribution")
    grade_df = pd.DataFrame(
        [{"grade": grade, "count": count} for grade, count in summary.grade_distribution.items()]
    )
    grade_chart = alt.Chart(grade_df).mark_bar(color=PRIMARY_COLOR).encode(
        x=alt.X("grade:N", title="Letter Grade", sort="ascending"),
        y=alt.Y("count:Q", title="Investments"),
        tooltip=["grade:N", "count:Q"],
    ).properties(height=300)
    st.altair_chart(grade_chart, width="stretch")

with col2:
    st.subheader("Top 10 Providers by Investment")
    chart_df = top_providers.melt(
        id_vars="provider", value_vars=["invested", "current"], var_name="measure", value_name="amount"
    )
    provider_chart = alt.Chart(chart_df).mark_bar().encode(
        x=alt.X("provider:N", title="Provider", sort=top_providers["provider"].tolist()),
        y=alt.Y("amount:Q", title="Amount", axis=alt.Axis(format="$,.0f")),
        xOffset="measure:N",
        color=alt.Color("measure:N", title=""),
        tooltip=["provider:N", "measure:N", alt.Tooltip("amount:Q", format="$,.0f")],
    ).properties(height=300)
    st.altair_chart(provider_chart, width="stretch")

# ----------------------------
# Provider Table
# ----------------------------
display_summary_table(
    top_providers.rename(columns={
        "provider": "Provider",
        "investments": "Investments",
        "invested": "Invested",
        "current": "Current Value",
        "multiple": "Multiple",
    }),
    title="Provider Performance",
    format_dict={
        "Invested": format_currency,
        "Current Value": format_currency,
        "Multiple": format_multiple,
    },
)
