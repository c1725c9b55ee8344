# utils/uploader.py
"""
Admin tooling for the fund_data table: CSV parsing and preview, batched
upserts, export and clearing.

Upload batches are independent: a failed batch is logged and counted, and the
remaining batches still run. There is no rollback of batches that succeeded.
"""

import io
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from utils.config import FUND_DATA_TABLE, UPLOAD_BATCH_SIZE

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json")


class UploadError(Exception):
    """Raised when an uploaded file cannot be parsed"""


@dataclass
class UploadStats:
    total: int
    success: int
    failed: int

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def message(self) -> str:
        if self.ok:
            return f"Successfully uploaded {self.success} records!"
        return f"Uploaded {self.success} records, {self.failed} failed"


def parse_csv(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text into row dicts keyed by trimmed header names.

    Values are kept as trimmed strings; blank lines are dropped and empty
    or missing cells become "". Values are matched to headers by position,
    so anything past the last header (a trailing delimiter, extra fields)
    is ignored.

    Raises:
        UploadError: The text has no header row
    """
    if not text or not text.strip():
        raise UploadError("File is empty")

    try:
        # index_col=False stops pandas from turning a surplus first field
        # into the row index and shifting every value one column left
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            index_col=False,
            engine="python",
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise UploadError(f"Could not parse CSV: {exc}") from exc

    df = df.fillna("")
    df.columns = [str(col).strip() for col in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df.to_dict(orient="records")


def preview_csv(text: str, rows: int = 5) -> pd.DataFrame:
    """First ``rows`` parsed rows for display before uploading"""
    return pd.DataFrame(parse_csv(text)[:rows])


def upload_records(
    client,
    records: List[Dict[str, Any]],
    batch_size: int = UPLOAD_BATCH_SIZE,
    table_name: str = FUND_DATA_TABLE,
    progress_callback: Optional[Callable[[float], None]] = None
) -> UploadStats:
    """
    Upsert records in fixed-size batches.

    Args:
        client: Supabase client with write access
        records: Row dicts to upsert
        batch_size: Rows per request
        table_name: Target table
        progress_callback: Called with progress in [30, 90] after each batch,
            then 100 when finished

    Returns:
        UploadStats with total/success/failed row counts
    """
    success_count = 0
    fail_count = 0
    total = len(records)

    for start in range(0, total, batch_size):
        batch = records[start:start + batch_size]
        try:
            client.table(table_name).upsert(batch).execute()
            success_count += len(batch)
        except Exception:
            logger.exception(f"Batch upload error (rows {start}-{start + len(batch) - 1})")
            fail_count += len(batch)

        if progress_callback:
            progress_callback(min(30 + (start + len(batch)) / total * 60, 90))

    if progress_callback:
        progress_callback(100)

    stats = UploadStats(total=total, success=success_count, failed=fail_count)
    logger.info(f"Upload finished: {stats.success}/{stats.total} rows, {stats.failed} failed")
    return stats


def clear_table(client, table_name: str = FUND_DATA_TABLE):
    """Delete every row in the table"""
    client.table(table_name).delete().neq("id", 0).execute()
    logger.info(f"Cleared table {table_name}")


def export_filename(file_format: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"export_{today.isoformat()}.{file_format}"


def export_rows(
    df: pd.DataFrame,
    file_format: str = "csv",
    today: Optional[date] = None
) -> Tuple[bytes, str, str]:
    """
    Serialize rows for download.

    Returns:
        Tuple of (data, filename, mime type)
    """
    if file_format not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported format: {file_format}")

    if file_format == "json":
        data = json.dumps(df.to_dict(orient="records"), indent=2, default=str).encode("utf-8")
        mime = "application/json"
    elif df.empty:
        data = b"No data available"
        mime = "text/csv"
    else:
        data = df.to_csv(index=False).encode("utf-8")
        mime = "text/csv"

    return data, export_filename(file_format, today), mime
