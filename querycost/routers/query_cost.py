"""
Query cost router
- prices a raw SQL statement before it is run
- reports whether it fits under the configured cost budget
"""
from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import asyncpg
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from querycost.config import settings
from querycost.core.coster import FormulaQueryCoster, QueryCostEstimate
from querycost.core.errors import QueryCostError, UnknownTableError
from querycost.core.row_counter import AsyncpgRowCounter
from querycost.deps import get_db_connection
from querycost.smart_logger import SmartLogger


router = APIRouter(prefix="/query-cost", tags=["Query Cost"])


class QueryCostRequest(BaseModel):
    sql: str = Field(..., min_length=1, description="SQL statement to price")
    params: List[Any] = Field(default_factory=list, description="Bound parameters (not used for pricing)")


class QueryCostResponse(BaseModel):
    status: str  # allowed, rejected
    sql: str
    query_type: str
    table_name: str = ""
    row_count: int = 0
    cost: int
    max_query_cost: int
    allowed: bool
    error_message: Optional[str] = None


def _log_failure(level: str, event: str, request: QueryCostRequest, exc: Exception) -> None:
    SmartLogger.log(
        level,
        f"query_cost.router.{event}",
        category="query_cost.router",
        params={"sql": request.sql, "error": str(exc), "error_type": type(exc).__name__},
    )


@router.post("", response_model=QueryCostResponse)
async def estimate_query_cost(
    request: QueryCostRequest,
    conn: Any = Depends(get_db_connection),
) -> QueryCostResponse:
    """Estimate the relative cost of a statement and compare it to the budget."""
    row_counter = AsyncpgRowCounter(
        asyncio.get_running_loop(),
        settings.schema_list,
        timeout=settings.stats_timeout_seconds,
    )
    coster = FormulaQueryCoster(row_counter)

    # the row counter blocks until its query completes on this loop
    try:
        estimate: QueryCostEstimate = await asyncio.to_thread(
            coster.estimate, conn, request.sql, *request.params
        )
    except UnknownTableError as e:
        _log_failure("WARNING", "unknown_table", request, e)
        raise HTTPException(status_code=404, detail=str(e)) from e
    except QueryCostError as e:
        _log_failure("WARNING", "invalid_statement", request, e)
        raise HTTPException(status_code=400, detail=str(e)) from e
    except (asyncpg.PostgresError, OSError, asyncio.TimeoutError) as e:
        _log_failure("ERROR", "row_count.fail", request, e)
        raise HTTPException(status_code=503, detail=f"Row count statistics unavailable: {e}") from e

    allowed = estimate.cost <= settings.max_query_cost
    response = QueryCostResponse(
        status="allowed" if allowed else "rejected",
        sql=request.sql,
        query_type=estimate.query_type.kind.value,
        table_name=estimate.table_name,
        row_count=estimate.row_count,
        cost=estimate.cost,
        max_query_cost=settings.max_query_cost,
        allowed=allowed,
        error_message=None if allowed else (
            f"Estimated cost {estimate.cost} exceeds limit {settings.max_query_cost}"
        ),
    )

    SmartLogger.log(
        "INFO" if allowed else "WARNING",
        f"query_cost.router.{response.status}",
        category="query_cost.router",
        params={
            "query_type": response.query_type,
            "table_name": response.table_name,
            "row_count": response.row_count,
            "cost": response.cost,
            "max_query_cost": settings.max_query_cost,
        },
        max_inline_chars=0,
    )
    return response
