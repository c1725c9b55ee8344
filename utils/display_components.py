# utils/display_components.py
"""
Reusable UI components for the fund analytics pages.
Provides consistent metric rows, error states, grade badges and downloads.
"""

import streamlit as st
import pandas as pd
from typing import List, Dict, Optional, Any

from utils.config import GRADE_COLORS, RECOMMENDATION_COLORS


MISSING_METRIC = "n/a"


def metric_kwargs(metric: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a metric spec into ``st.metric`` keyword arguments.

    A spec holds ``label`` and a raw ``value``, plus optional ``format`` (a
    formatter from utils.formatting applied to the value), ``delta`` and
    ``help``. Values that format to blank are shown as "n/a".
    """
    value = metric.get("value")
    formatter = metric.get("format")
    if formatter is not None:
        value = formatter(value)
    if value is None or value == "":
        value = MISSING_METRIC
    return {
        "label": metric["label"],
        "value": value,
        "delta": metric.get("delta"),
        "help": metric.get("help"),
    }


def display_metric_row(metrics: List[Dict[str, Any]], columns: Optional[int] = None):
    """
    Lay out KPI metrics across Streamlit columns, wrapping after ``columns``.

    Example:
        display_metric_row([
            {"label": "Total Invested", "value": 1500000, "format": format_currency},
            {"label": "Avg Multiple", "value": 1.25, "format": format_multiple,
             "help": "Mean net multiple"},
        ])
    """
    if not metrics:
        return

    n_cols = columns or len(metrics)
    cols = st.columns(n_cols)
    for i, metric in enumerate(metrics):
        cols[i % n_cols].metric(**metric_kwargs(metric))


def display_load_error(error: Exception, key: str = "retry"):
    """
    Show a load failure with a manual Retry button and stop the page run.

    Clicking Retry reruns the script, which re-fetches from scratch.
    """
    st.error(f"Error loading data: {error}")
    if st.button("Retry", key=key):
        st.rerun()
    st.stop()


def grade_badge(grade: str, label: Optional[str] = None) -> str:
    """HTML badge styled by the grade-<letter> classes from the global stylesheet"""
    css_class = f"grade-{grade}" if grade in GRADE_COLORS else "grade-unknown"
    return f'<span class="grade-badge {css_class}">{label or grade}</span>'


def display_grade_legend(descriptions: Dict[str, str]):
    """One badge per grade with its description, e.g. {"A": "Excellent"}"""
    badges = [grade_badge(grade, f"{grade} {text}") for grade, text in descriptions.items()]
    st.markdown(" ".join(badges), unsafe_allow_html=True)


def style_recommendation(value: str) -> str:
    """Styler callback colouring the recommendation column"""
    color = RECOMMENDATION_COLORS.get(value)
    return f"color: {color}; font-weight: 600" if color else ""


def create_download_button(
    data: bytes,
    filename: str,
    mime: str,
    label: str = "Download Data",
    key: Optional[str] = None
):
    """
    Create a download button for serialized data.

    Args:
        data: File contents
        filename: Name of downloaded file
        mime: MIME type
        label: Button label
        key: Optional widget key
    """
    st.download_button(
        label=label,
        data=data,
        file_name=filename,
        mime=mime,
        key=key
    )


def display_summary_table(
    df: pd.DataFrame,
    title: str = "",
    format_dict: Optional[Dict[str, Any]] = None,
    hide_index: bool = True
):
    """
    Display a formatted summary table.

    Args:
        df: DataFrame to display
        title: Optional title for the table
        format_dict: Dictionary mapping column names to format strings or callables
        hide_index: Whether to hide the index
    """
    if title:
        st.subheader(title)

    if format_dict:
        st.dataframe(df.style.format(format_dict), width='stretch', hide_index=hide_index)
    else:
        st.dataframe(df, width='stretch', hide_index=hide_index)
