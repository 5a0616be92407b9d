"""Estimate the cost of a raw SQL statement without executing it"""
from dataclasses import dataclass
from typing import Any

from querycost.core.query_type import QueryType, classify_query
from querycost.core.row_counter import RowCounter


# Row count used for statements without a table (e.g. "SELECT 3")
EMPTY_TABLE_ROW_COUNT = 0


@dataclass(frozen=True)
class QueryCostEstimate:
    query_type: QueryType
    table_name: str
    row_count: int
    cost: int


class FormulaQueryCoster:
    """Prices statements with the per-verb formula over the table's row count"""

    def __init__(self, row_counter: RowCounter):
        self.row_counter = row_counter

    def estimate(self, tx: Any, sql: str, *args: Any) -> QueryCostEstimate:
        """
        Classify `sql`, look up its table's row count and price it.

        Args:
            tx: transaction handle, passed through to the row counter.
            sql: statement text.
            *args: bound parameters. Accepted but not used for pricing.

        Raises:
            UnknownQueryTypeError, ClauseMissingError, DeleteMinimumThreeFieldsError,
            or whatever the row counter raises (e.g. UnknownTableError).
        """
        query_type = classify_query(sql)
        table_name = query_type.table_name()

        if table_name:
            row_count = self.row_counter.row_count(tx, table_name)
        else:
            row_count = EMPTY_TABLE_ROW_COUNT

        return QueryCostEstimate(
            query_type=query_type,
            table_name=table_name,
            row_count=row_count,
            cost=query_type.calculate_cost(row_count),
        )

    def query_cost(self, tx: Any, sql: str, *args: Any) -> int:
        """Cost of `sql`; see `estimate` for arguments and errors."""
        return self.estimate(tx, sql, *args).cost
