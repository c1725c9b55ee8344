"""
Shared fixtures: an in-memory stand-in for the Supabase query builder.
"""

from types import SimpleNamespace

import pytest


class FakeQuery:
    """Chainable query mimicking the supabase-py builder methods we use"""

    def __init__(self, table, operation="select", payload=None):
        self.table = table
        self.operation = operation
        self.payload = payload
        self.order_by = None
        self.descending = False
        self.bounds = None
        self.filters = []

    def select(self, *columns):
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.descending = desc
        return self

    def range(self, start, end):
        self.bounds = (start, end)
        return self

    def neq(self, column, value):
        self.filters.append(("neq", column, value))
        return self

    def execute(self):
        self.table.executed.append(self)
        if self.table.fail_select and self.operation == "select":
            raise RuntimeError("connection refused")

        if self.operation == "upsert":
            call_index = len([q for q in self.table.executed if q.operation == "upsert"]) - 1
            if call_index in self.table.failing_batches:
                raise RuntimeError("batch rejected")
            self.table.upserted.extend(self.payload)
            return SimpleNamespace(data=self.payload)

        if self.operation == "delete":
            self.table.rows = []
            return SimpleNamespace(data=[])

        rows = list(self.table.rows)
        if self.order_by:
            rows.sort(key=lambda row: row.get(self.order_by), reverse=self.descending)
        if self.bounds:
            start, end = self.bounds
            rows = rows[start:end + 1]
        return SimpleNamespace(data=rows)


class FakeTable:
    def __init__(self, rows=None, failing_batches=(), fail_select=False):
        self.rows = list(rows or [])
        self.failing_batches = set(failing_batches)
        self.fail_select = fail_select
        self.executed = []
        self.upserted = []

    def select(self, *columns):
        return FakeQuery(self, "select")

    def upsert(self, payload):
        return FakeQuery(self, "upsert", payload)

    def delete(self):
        return FakeQuery(self, "delete")


class FakeSupabase:
    def __init__(self, **table_kwargs):
        self.fake_table = FakeTable(**table_kwargs)
        self.requested_tables = []

    def table(self, name):
        self.requested_tables.append(name)
        return self.fake_table


@pytest.fixture
def make_client():
    """Factory for FakeSupabase clients"""
    return FakeSupabase
