"""Row count collaborators used by the query coster"""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from querycost.core.errors import UnknownTableError


class RowCounter(Protocol):
    """Approximate row counts per table.

    `tx` is whatever transaction handle the caller passed to the coster; it is
    handed over unmodified.
    """

    def row_count(self, tx: Any, table_name: str) -> int:
        ...


@dataclass(frozen=True)
class TableRowCount:
    schema_name: str
    table_name: str
    row_count: int


def split_table_name(table_name: str) -> Tuple[Optional[str], str]:
    """Split "dw.orders" into ("dw", "orders"); a bare name gets schema None."""
    parts = table_name.split(".")
    if len(parts) == 1:
        return None, parts[0]
    return parts[-2], parts[-1]


class StaticRowCounter:
    """Row counter backed by an in-memory mapping {table_name: row_count}.

    Keys may be bare (`orders`) or schema-qualified (`dw.orders`); a qualified
    lookup falls back to the bare key.
    """

    def __init__(self, counts: Mapping[str, int]):
        self._counts: Dict[str, int] = {name: int(count) for name, count in counts.items()}

    def row_count(self, tx: Any, table_name: str) -> int:
        if table_name in self._counts:
            return self._counts[table_name]
        _, bare_name = split_table_name(table_name)
        if bare_name in self._counts:
            return self._counts[bare_name]
        raise UnknownTableError(table_name)

    def __len__(self) -> int:
        return len(self._counts)


class AsyncpgRowCounter:
    """Blocking row counter over the asyncpg connection passed as `tx`.

    `row_count` must be called off the event loop thread (e.g. from
    `asyncio.to_thread`); the statistics query itself runs on `loop`, which
    owns the connection.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, schemas: Sequence[str], *,
                 timeout: Optional[float] = None):
        self.loop = loop
        self.schemas = list(schemas)
        self.timeout = timeout

    def row_count(self, tx: Any, table_name: str) -> int:
        future = asyncio.run_coroutine_threadsafe(
            asyncio.wait_for(fetch_table_row_count(tx, table_name, self.schemas), self.timeout),
            self.loop,
        )
        return future.result()


def _rank_by_schema(rows: Sequence[Any], schemas: Sequence[str]) -> List[Any]:
    schema_rank = {schema: i for i, schema in enumerate(schemas)}
    return sorted(rows, key=lambda row: schema_rank.get(row["schema_name"], len(schema_rank)))


def _to_row_count(value: Any) -> int:
    # reltuples is -1 for never-analyzed tables
    return max(int(value or 0), 0)


async def fetch_table_row_count(conn: Any, table_name: str, schemas: Sequence[str]) -> int:
    """
    Approximate row count of a single table.

    Args:
        conn: asyncpg connection (anything with `await conn.fetch(sql, *args)`).
        table_name: `table` or `schema.table`. A bare name is searched in
            `schemas`, first match wins.
        schemas: search path for bare names.

    Raises:
        UnknownTableError: no ordinary table of that name exists.
    """
    schema_name, bare_name = split_table_name(table_name)
    search_path = [schema_name] if schema_name else list(schemas)

    rows = await conn.fetch(_TABLE_ROW_COUNT_SQL, search_path, bare_name)
    if not rows:
        raise UnknownTableError(table_name)
    return _to_row_count(_rank_by_schema(rows, search_path)[0]["row_count"])


async def load_table_statistics(conn: Any, schemas: Sequence[str]) -> List[TableRowCount]:
    """Approximate row counts for every ordinary table in `schemas`."""
    rows = await conn.fetch(_SCHEMA_ROW_COUNTS_SQL, list(schemas))
    return [
        TableRowCount(
            schema_name=row["schema_name"],
            table_name=row["table_name"],
            row_count=_to_row_count(row["row_count"]),
        )
        for row in _rank_by_schema(rows, schemas)
    ]


# n_live_tup is 0 until the stats collector has seen the table; fall back to
# the planner estimate in that case.
_ROW_COUNT_SELECT = """
SELECT
    n.nspname AS schema_name,
    c.relname AS table_name,
    COALESCE(NULLIF(s.n_live_tup, 0), c.reltuples::bigint, 0) AS row_count
FROM pg_class c
JOIN pg_namespace n ON n.oid = c.relnamespace
LEFT JOIN pg_stat_user_tables s ON s.relid = c.oid
WHERE c.relkind IN ('r', 'p')
  AND n.nspname = ANY($1::text[])
"""

_SCHEMA_ROW_COUNTS_SQL = _ROW_COUNT_SELECT

_TABLE_ROW_COUNT_SQL = _ROW_COUNT_SELECT + "  AND c.relname = $2\n"
