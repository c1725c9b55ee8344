# utils/data_loader.py
"""
Data access for the fund_data table.
The Supabase client is passed in, so pages use the cached client from
utils.config and tests can pass a fake.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from services.records import Record, records_from_rows
from utils.config import FUND_DATA_TABLE, FETCH_CHUNK_SIZE

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when fund data cannot be fetched; pages show it with a retry button"""


class FundDataLoader:
    """Loads fund records from Supabase on every call (no caching)"""

    def __init__(self, client, table_name: str = FUND_DATA_TABLE, chunk_size: int = FETCH_CHUNK_SIZE):
        self.client = client
        self.table_name = table_name
        self.chunk_size = chunk_size

    def _query(self, order_by: Optional[str], descending: bool):
        query = self.client.table(self.table_name).select("*")
        if order_by:
            query = query.order(order_by, desc=descending)
        return query

    def fetch_rows(
        self,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch raw rows using pagination to avoid the API row cap

        Args:
            order_by: Optional column to order by
            descending: Order direction
            limit: Stop after this many rows (None = all rows)

        Returns:
            List of row dicts

        Raises:
            DataLoadError: No client configured or the query failed
        """
        if self.client is None:
            raise DataLoadError("Supabase not initialized")

        rows: List[Dict[str, Any]] = []
        start = 0

        try:
            while limit is None or len(rows) < limit:
                size = self.chunk_size if limit is None else min(self.chunk_size, limit - len(rows))
                end = start + size - 1
                response = self._query(order_by, descending).range(start, end).execute()
                batch = response.data
                if not batch:
                    break  # no more rows
                rows.extend(batch)
                start += len(batch)
        except Exception as exc:
            logger.exception(f"Failed to load {self.table_name}")
            raise DataLoadError(f"Error fetching data: {exc}") from exc

        logger.info(f"Loaded {len(rows)} rows from {self.table_name}")
        return rows

    def load_records(
        self,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None
    ) -> List[Record]:
        """Fetch rows and coerce them into Records"""
        return records_from_rows(self.fetch_rows(order_by, descending, limit))

    def load_frame(self) -> pd.DataFrame:
        """All rows as a DataFrame, untouched (used for export)"""
        return pd.DataFrame(self.fetch_rows())
