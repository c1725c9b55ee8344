# pages/4_admin.py
"""
Admin - upload fund data from CSV, export the table, or clear it.
"""

import streamlit as st

from utils.config import setup_page, get_supabase_admin_client, UPLOAD_BATCH_SIZE
from utils.data_loader import FundDataLoader, DataLoadError
from utils.display_components import display_metric_row, create_download_button
from utils.uploader import (
    UploadError,
    parse_csv,
    preview_csv,
    upload_records,
    clear_table,
    export_rows,
)

setup_page("Fund Analytics | Admin")

st.title("Data Administration")
st.markdown("Upload, export, and manage fund data.")

client = get_supabase_admin_client()
if client is None:
    st.error("Supabase connection not available")
    st.stop()

# ----------------------------
# Upload
# ----------------------------
st.header("Upload Data")
uploaded_file = st.file_uploader("Select a CSV file", type=["csv"])

if uploaded_file is not None:
    st.info(f"Selected: {uploaded_file.name} ({uploaded_file.size / 1024 / 1024:.2f} MB)")
    text = uploaded_file.getvalue().decode("utf-8", errors="replace")

    try:
        st.subheader("Preview")
        st.dataframe(preview_csv(text), width="stretch", hide_index=True)
    except UploadError as e:
        st.error(str(e))
        st.stop()

    if st.button("Upload to Database"):
        progress = st.progress(0, text="Processing file...")
        try:
            records = parse_csv(text)
        except UploadError as e:
            st.error(f"Upload failed: {e}")
            st.stop()

        progress.progress(10, text=f"Parsing {len(records)} records...")
        progress.progress(30, text="Uploading to database...")
        stats = upload_records(
            client,
            records,
            batch_size=UPLOAD_BATCH_SIZE,
            progress_callback=lambda pct: progress.progress(int(pct), text="Uploading to database..."),
        )

        display_metric_row([
            {"label": "Total Records", "value": stats.total},
            {"label": "Successful", "value": stats.success},
            {"label": "Failed", "value": stats.failed},
        ])
        if stats.ok:
            st.success(stats.message())
        else:
            st.error(stats.message())

st.markdown("---")

# ----------------------------
# Export
# ----------------------------
st.header("Export Data")
export_format = st.radio("Format", ["csv", "json"], horizontal=True)

if st.button("Prepare Export"):
    try:
        df = FundDataLoader(client).load_frame()
    except DataLoadError as e:
        st.error(f"Export failed: {e}")
    else:
        data, filename, mime = export_rows(df, export_format)
        create_download_button(data, filename, mime, label=f"Download {export_format.upper()}")

st.markdown("---")

# ----------------------------
# Danger Zone
# ----------------------------
st.header("Danger Zone")
confirm = st.checkbox("I understand this deletes all fund data and cannot be undone")

if st.button("Clear Database", disabled=not confirm):
    try:
        clear_table(client)
    except Exception as e:
        st.error(f"Failed to clear database: {e}")
    else:
        st.success("Database cleared successfully")
