# pages/1_providers.py
"""
Provider Performance - invested vs repaid, case status mix and recovery
rates per capital provider.
"""

import streamlit as st
import altair as alt

from utils.config import setup_page, get_supabase_client, COLOR_PALETTE
from utils.data_loader import FundDataLoader, DataLoadError
from utils.display_components import display_metric_row, display_load_error, display_summary_table
from utils.formatting import format_currency, format_percent, format_multiple, format_count
from services.aggregation import aggregate, portfolio_totals, providers_frame

setup_page("Fund Analytics | Providers")

# ----------------------------
# Load data
# ----------------------------
loader = FundDataLoader(get_supabase_client())

with st.spinner("Loading provider data..."):
    try:
        records = loader.load_records()
    except DataLoadError as e:
        display_load_error(e)

aggregates = aggregate(records)
totals = portfolio_totals(aggregates)

st.title("Provider Performance")
st.markdown("Capital deployed and recovered by provider.")

# ----------------------------
# Filters
# ----------------------------
col_search, col_sort = st.columns([2, 1])
with col_search:
    search_term = st.text_input("Search providers", "")
with col_sort:
    sort_labels = {
        "Amount Invested": "invested",
        "Amount Repaid": "repaid",
        "Average Multiple": "multiple",
        "Name": "name",
    }
    sort_label = st.selectbox("Sort by", list(sort_labels.keys()))

providers_df = providers_frame(aggregates, search=search_term, sort_by=sort_labels[sort_label])
top_df = providers_df.head(10).copy()

# ----------------------------
# Portfolio Totals
# ----------------------------
display_metric_row([
    {"label": "Providers", "value": len(aggregates), "format": format_count},
    {"label": "Total Invested", "value": totals["invested"], "format": format_currency},
    {"label": "Total Repaid", "value": totals["repaid"], "format": format_currency},
    {"label": "Cases", "value": totals["cases"], "format": format_count},
])

st.markdown("---")

if top_df.empty:
    st.info("No providers match the current filters.")
    st.stop()

top_df["name"] = top_df["provider"].str.slice(0, 20)

# ----------------------------
# Charts
# ----------------------------
col1, col2 = st.columns(2)

with col1:
    st.subheader("Invested vs Repaid (Top 10)")
    chart_df = top_df.melt(
        id_vars="name", value_vars=["total_sent", "total_repaid"], var_name="measure", value_name="amount"
    )
    chart_df["measure"] = chart_df["measure"].map({"total_sent": "Invested", "total_repaid": "Repaid"})
    bar_chart = alt.Chart(chart_df).mark_bar().encode(
        x=alt.X("name:N", title="Provider", sort=top_df["name"].tolist()),
        y=alt.Y("amount:Q", title="Amount", axis=alt.Axis(format="$,.0f")),
        xOffset="measure:N",
        color=alt.Color("measure:N", title="", scale=alt.Scale(range=COLOR_PALETTE[:2])),
        tooltip=["name:N", "measure:N", alt.Tooltip("amount:Q", format="$,.0f")],
    ).properties(height=350)
    st.altair_chart(bar_chart, width="stretch")

with col2:
    st.subheader("Investment Distribution")
    pie_chart = alt.Chart(top_df).mark_arc(innerRadius=50).encode(
        theta=alt.Theta("total_sent:Q"),
        color=alt.Color("name:N", title="Provider", scale=alt.Scale(range=COLOR_PALETTE)),
        tooltip=["name:N", alt.Tooltip("total_sent:Q", title="Invested", format="$,.0f")],
    ).properties(height=350)
    st.altair_chart(pie_chart, width="stretch")

st.subheader("Recovery Rate by Provider")
recovery_chart = alt.Chart(top_df).mark_line(point=True).encode(
    x=alt.X("name:N", title="Provider", sort=top_df["name"].tolist()),
    y=alt.Y("recovery_rate:Q", title="Recovery Rate (%)"),
    tooltip=["name:N", alt.Tooltip("recovery_rate:Q", format=".1f")],
).properties(height=300)
st.altair_chart(recovery_chart, width="stretch")

# ----------------------------
# Provider Detail
# ----------------------------
selected_provider = st.selectbox("Provider detail", ["None"] + providers_df["provider"].tolist())
if selected_provider != "None":
    bucket = aggregates[selected_provider]
    display_metric_row([
        {"label": "Cases", "value": bucket.case_count, "format": format_count},
        {"label": "Pending", "value": bucket.pending_cases, "format": format_count},
        {"label": "Closed", "value": bucket.closed_cases, "format": format_count},
        {"label": "Recovery Rate", "value": bucket.recovery_rate, "format": format_percent},
        {"label": "Avg Multiple", "value": bucket.avg_multiple, "format": format_multiple},
    ])

# ----------------------------
# Provider Table
# ----------------------------
display_summary_table(
    providers_df.rename(columns={
        "provider": "Provider",
        "case_count": "Cases",
        "total_sent": "Invested",
        "total_repaid": "Repaid",
        "pending_cases": "Pending",
        "closed_cases": "Closed",
        "avg_multiple": "Avg Multiple",
        "recovery_rate": "Recovery Rate",
    }),
    title="All Providers",
    format_dict={
        "Invested": format_currency,
        "Repaid": format_currency,
        "Avg Multiple": format_multiple,
        "Recovery Rate": format_percent,
    },
)
