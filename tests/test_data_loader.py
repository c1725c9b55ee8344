"""
Unit tests for the fund data loader, using an in-memory Supabase fake.
"""

import pytest

from services.records import Record
from utils.data_loader import FundDataLoader, DataLoadError


def make_rows(n):
    return [
        {"id": i, "provider_name_per_tbr": f"P{i % 3}", "total_sent": 100, "total_repaid": i}
        for i in range(n)
    ]


class TestFetchRows:
    """Test pagination and error handling"""

    def test_paginates_until_empty_batch(self, make_client):
        client = make_client(rows=make_rows(2500))
        rows = FundDataLoader(client, chunk_size=1000).fetch_rows()
        assert len(rows) == 2500
        bounds = [q.bounds for q in client.fake_table.executed]
        assert bounds == [(0, 999), (1000, 1999), (2000, 2999), (2500, 3499)]

    def test_reads_configured_table(self, make_client):
        client = make_client(rows=make_rows(3))
        FundDataLoader(client).fetch_rows()
        assert set(client.requested_tables) == {"fund_data"}

    def test_limit(self, make_client):
        client = make_client(rows=make_rows(2500))
        rows = FundDataLoader(client, chunk_size=1000).fetch_rows(limit=1500)
        assert len(rows) == 1500
        assert [q.bounds for q in client.fake_table.executed] == [(0, 999), (1000, 1499)]

    def test_order(self, make_client):
        client = make_client(rows=make_rows(5))
        rows = FundDataLoader(client).fetch_rows(order_by="id", descending=True)
        assert [row["id"] for row in rows] == [4, 3, 2, 1, 0]

    def test_empty_table(self, make_client):
        assert FundDataLoader(make_client()).fetch_rows() == []

    def test_missing_client(self):
        with pytest.raises(DataLoadError, match="not initialized"):
            FundDataLoader(None).fetch_rows()

    def test_query_failure(self, make_client):
        client = make_client(rows=make_rows(5), fail_select=True)
        with pytest.raises(DataLoadError):
            FundDataLoader(client).fetch_rows()


class TestLoadRecords:
    """Test conversion to Records"""

    def test_load_records(self, make_client):
        client = make_client(rows=make_rows(4))
        records = FundDataLoader(client).load_records()
        assert len(records) == 4
        assert all(isinstance(r, Record) for r in records)
        assert records[3].provider == "P0"
        assert records[3].amount_repaid == 3.0

    def test_load_frame(self, make_client):
        df = FundDataLoader(make_client(rows=make_rows(2))).load_frame()
        assert list(df["id"]) == [0, 1]
