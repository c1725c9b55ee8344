# utils/config.py
import logging
import os

import streamlit as st
from supabase import create_client, Client
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# ----------------------------
# Supabase Connection
# ----------------------------
FUND_DATA_TABLE = "fund_data"


def _supabase_secrets() -> dict:
    try:
        return dict(st.secrets["supabase"])
    except (KeyError, FileNotFoundError):
        return {}


@st.cache_resource
def get_supabase_client() -> Optional[Client]:
    """
    Read-only client (anon key, falling back to the service role key).
    Returns None when secrets are not configured.
    """
    secrets = _supabase_secrets()
    url = secrets.get("url")
    key = secrets.get("anon_key") or secrets.get("service_role")
    if not url or not key:
        logger.warning("Supabase secrets missing; read client not created")
        return None
    return create_client(url, key)


@st.cache_resource
def get_supabase_admin_client() -> Optional[Client]:
    """Service role client for uploads and deletes"""
    secrets = _supabase_secrets()
    url = secrets.get("url")
    key = secrets.get("service_role")
    if not url or not key:
        logger.warning("Supabase service role secrets missing; admin client not created")
        return None
    return create_client(url, key)

# ----------------------------
# Color Palette Constants
# ----------------------------
PRIMARY_COLOR = "#3B82F6"
TEXT_COLOR = "#222222"
BACKGROUND_COLOR = "#ffffff"

COLOR_PALETTE = [
    "#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8",
    "#82CA9D", "#FFC658", "#FF6B6B", "#4ECDC4", "#45B7D1"
]

GRADE_COLORS = {
    "A": "#10B981",
    "B": "#3B82F6",
    "C": "#FBBF24",
    "D": "#FB923C",
    "E": "#EF4444",
    "F": "#991B1B",
}

RECOMMENDATION_COLORS = {
    "STRONG BUY": "#16a34a",
    "HOLD": "#ca8a04",
    "REDUCE": "#dc2626",
}

# ----------------------------
# Pipeline Constants
# ----------------------------
FETCH_CHUNK_SIZE = 1000
UPLOAD_BATCH_SIZE = 100
OVERVIEW_ROW_LIMIT = 1000

TIMEFRAME_OPTIONS = {
    "Last 30 Days": 30,
    "Last 90 Days": 90,
    "Last 180 Days": 180,
    "Last Year": 365,
}

CURVE_RANGE_OPTIONS = {
    "6 Months": 6,
    "12 Months": 12,
    "24 Months": 24,
    "All Time": None,
}

# ----------------------------
# Logging
# ----------------------------
def configure_logging(level: Optional[str] = None):
    """Configure root logging once; level from LOG_LEVEL env var (default INFO)"""
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

# ----------------------------
# Page Setup Functions
# ----------------------------
def setup_page(title: str = "Fund Analytics | Dashboard", layout: str = "wide"):
    """
    Centralized page setup function that applies consistent configuration and branding

    Args:
        title: Page title to display in browser tab
        layout: Page layout ('wide' or 'centered')

    Usage:
        from utils.config import setup_page
        setup_page("Fund Analytics | My Page")
    """
    configure_logging()
    st.set_page_config(page_title=title, layout=layout)
    inject_global_styles()
    inject_logo()

# ----------------------------
# Branding Functions
# ----------------------------
LOGO_PATH = Path("assets/logo.png")


def inject_logo(path: Path = LOGO_PATH):
    """Show the fund logo above the sidebar navigation when the asset exists"""
    if not path.exists():
        logger.debug(f"No logo at {path}; skipping")
        return
    st.logo(str(path), size="large")


def build_global_css() -> str:
    """
    Global stylesheet for every page.

    Grade badges get one class per letter (``grade-A`` .. ``grade-F``)
    coloured from GRADE_COLORS, plus ``grade-unknown`` for anything else.
    """
    rules = [
        f"""
        html, body, [class*="css"] {{
            font-family: 'Segoe UI', sans-serif;
            color: {TEXT_COLOR};
            background-color: {BACKGROUND_COLOR};
        }}
        .stButton > button, .stDownloadButton > button {{
            background-color: {PRIMARY_COLOR};
            color: white;
            border-radius: 6px;
        }}
        [data-testid="stMetric"] {{
            border-left: 4px solid {PRIMARY_COLOR};
            padding-left: 0.75rem;
        }}
        .grade-badge {{
            display: inline-block;
            padding: 2px 10px;
            margin-right: 4px;
            border-radius: 999px;
            font-weight: 600;
        }}
        """
    ]
    for grade, color in GRADE_COLORS.items():
        rules.append(f".grade-{grade} {{ background-color: {color}20; color: {color}; }}")
    rules.append(".grade-unknown { background-color: #99999920; color: #999999; }")
    return "\n".join(rules)


def inject_global_styles():
    st.markdown(f"<style>{build_global_css()}</style>", unsafe_allow_html=True)
