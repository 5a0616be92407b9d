# python -m pytest querycost/tests/cores/test_row_counter.py -v

"""Tests for row count collaborators."""

import asyncio

import pytest

from querycost.core.errors import UnknownTableError
from querycost.core.row_counter import (
    AsyncpgRowCounter,
    StaticRowCounter,
    TableRowCount,
    fetch_table_row_count,
    load_table_statistics,
    split_table_name,
)


class TestStaticRowCounter:
    def test_known_table(self):
        counter = StaticRowCounter({"keys": 42})
        assert counter.row_count(None, "keys") == 42

    def test_unknown_table(self):
        counter = StaticRowCounter({"keys": 42})
        with pytest.raises(UnknownTableError) as excinfo:
            counter.row_count(None, "missing")
        assert "missing" in str(excinfo.value)

    def test_lookup_is_case_sensitive(self):
        counter = StaticRowCounter({"Keys": 1})
        with pytest.raises(UnknownTableError):
            counter.row_count(None, "keys")

    def test_qualified_name_prefers_qualified_key(self):
        counter = StaticRowCounter({"dw.orders": 5, "orders": 100})
        assert counter.row_count(None, "dw.orders") == 5
        assert counter.row_count(None, "orders") == 100
        assert len(counter) == 2

    def test_qualified_name_falls_back_to_bare_key(self):
        counter = StaticRowCounter({"orders": 100})
        assert counter.row_count(None, "public.orders") == 100


def test_split_table_name():
    assert split_table_name("orders") == (None, "orders")
    assert split_table_name("dw.orders") == ("dw", "orders")
    assert split_table_name("db.dw.orders") == ("dw", "orders")


class DummyConn:
    """Answers like pg_class: matches schema list ($1) and, if given, relname ($2)."""

    def __init__(self, rows):
        self.rows = rows
        self.calls = []

    async def fetch(self, sql, *params):
        self.calls.append((sql, params))
        schemas = params[0]
        rows = [r for r in self.rows if r["schema_name"] in schemas]
        if len(params) > 1:
            rows = [r for r in rows if r["table_name"] == params[1]]
        return rows


STATS_ROWS = [
    {"schema_name": "archive", "table_name": "orders", "row_count": 5},
    {"schema_name": "public", "table_name": "orders", "row_count": 1200},
    {"schema_name": "public", "table_name": "fresh", "row_count": -1},
    {"schema_name": "public", "table_name": "empty", "row_count": None},
    {"schema_name": "dw", "table_name": "Orders", "row_count": 9},
]


class TestFetchTableRowCount:
    @pytest.mark.asyncio
    async def test_bare_name_uses_first_matching_schema(self):
        conn = DummyConn(STATS_ROWS)

        assert await fetch_table_row_count(conn, "orders", ["public", "archive"]) == 1200
        assert await fetch_table_row_count(conn, "orders", ["archive", "public"]) == 5

        sql, params = conn.calls[0]
        assert "pg_stat_user_tables" in sql
        assert params == (["public", "archive"], "orders")

    @pytest.mark.asyncio
    async def test_qualified_name_searches_only_its_schema(self):
        conn = DummyConn(STATS_ROWS)

        assert await fetch_table_row_count(conn, "archive.orders", ["public"]) == 5
        assert conn.calls[0][1] == (["archive"], "orders")

    @pytest.mark.asyncio
    async def test_names_are_matched_exactly(self):
        conn = DummyConn(STATS_ROWS)

        assert await fetch_table_row_count(conn, "dw.Orders", ["public"]) == 9
        with pytest.raises(UnknownTableError):
            await fetch_table_row_count(conn, "dw.orders", ["public"])

    @pytest.mark.asyncio
    async def test_negative_and_missing_estimates_clamp_to_zero(self):
        conn = DummyConn(STATS_ROWS)

        assert await fetch_table_row_count(conn, "fresh", ["public"]) == 0
        assert await fetch_table_row_count(conn, "empty", ["public"]) == 0

    @pytest.mark.asyncio
    async def test_unknown_table(self):
        conn = DummyConn(STATS_ROWS)

        with pytest.raises(UnknownTableError) as excinfo:
            await fetch_table_row_count(conn, "missing", ["public"])
        assert excinfo.value.table_name == "missing"


@pytest.mark.asyncio
async def test_asyncpg_row_counter_runs_query_on_loop_from_worker_thread():
    conn = DummyConn(STATS_ROWS)
    counter = AsyncpgRowCounter(asyncio.get_running_loop(), ["public"], timeout=5)

    assert await asyncio.to_thread(counter.row_count, conn, "orders") == 1200
    with pytest.raises(UnknownTableError):
        await asyncio.to_thread(counter.row_count, conn, "missing")


@pytest.mark.asyncio
async def test_load_table_statistics_orders_by_schema():
    conn = DummyConn(STATS_ROWS)

    statistics = await load_table_statistics(conn, ["public", "archive"])

    assert statistics == [
        TableRowCount("public", "orders", 1200),
        TableRowCount("public", "fresh", 0),
        TableRowCount("public", "empty", 0),
        TableRowCount("archive", "orders", 5),
    ]
