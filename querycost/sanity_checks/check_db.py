from __future__ import annotations

import asyncio
import traceback
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Callable, Optional

from querycost.config import settings
from querycost.core.row_counter import TableRowCount, load_table_statistics
from querycost.deps import get_db_connection


@dataclass(frozen=True)
class SanityCheckResult:
    """Outcome of a startup check against the row count statistics source."""

    name: str
    ok: bool
    detail: str = ""
    target: str = ""
    schemas: list[str] = field(default_factory=list)
    server_version: Optional[str] = None
    table_count: Optional[int] = None
    largest_table: Optional[TableRowCount] = None
    error: Optional[str] = None

    def to_log_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "name": self.name,
            "ok": self.ok,
            "detail": self.detail,
            "target": self.target,
            "schemas": self.schemas,
        }
        if self.server_version is not None:
            params["server_version"] = self.server_version
        if self.table_count is not None:
            params["table_count"] = self.table_count
        if self.largest_table is not None:
            table = self.largest_table
            params["largest_table"] = f"{table.schema_name}.{table.table_name} ({table.row_count} rows)"
        if self.error:
            params["error"] = self.error
        return params


async def check_target_db(
    *,
    timeout_seconds: float = 10.0,
    connection_factory: Callable[[], AsyncGenerator[Any, None]] = get_db_connection,
) -> SanityCheckResult:
    """
    Target DB connection + row count statistics.

    Fail-fast conditions:
    - the database is unreachable.
    - configured schemas are missing.
    """
    name = "target_db"
    schemas = settings.schema_list
    target = f"{settings.target_db_host}:{settings.target_db_port}/{settings.target_db_name}"

    async def _run() -> SanityCheckResult:
        async for conn in connection_factory():
            version = await conn.fetchval("SELECT version()")

            rows = await conn.fetch(
                "SELECT schema_name FROM information_schema.schemata WHERE schema_name = ANY($1::text[])",
                schemas,
            )
            existing = {r["schema_name"] for r in rows}
            missing = sorted(set(schemas) - existing)
            if missing:
                raise RuntimeError(f"Missing schemas in target DB: {missing}")

            statistics = await load_table_statistics(conn, schemas)
            return SanityCheckResult(
                name=name,
                ok=True,
                detail="OK",
                target=target,
                schemas=schemas,
                server_version=(version.split(",")[0] if isinstance(version, str) else str(version)),
                table_count=len(statistics),
                largest_table=max(statistics, key=lambda t: t.row_count, default=None),
            )

        raise RuntimeError("DB connection generator yielded no connection")

    try:
        return await asyncio.wait_for(_run(), timeout=timeout_seconds)
    except Exception as exc:
        return SanityCheckResult(
            name=name,
            ok=False,
            detail="Target DB sanity check failed",
            target=target,
            schemas=schemas,
            error=repr(exc) + "\n" + traceback.format_exc(),
        )
