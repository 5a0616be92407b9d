"""Per-verb cost formulas"""
from dataclasses import dataclass
from typing import Dict

from querycost.core.query_kind import QueryKind


@dataclass(frozen=True)
class CostFormula:
    """cost = base + row_count // divisor"""

    base: int
    divisor: int

    def __call__(self, row_count: int) -> int:
        if row_count < 0:
            raise ValueError(f"row_count must be non-negative, got {row_count}")
        return self.base + row_count // self.divisor


# Scan-shaped verbs grow linearly with the table, INSERT stays near constant.
FORMULAS: Dict[QueryKind, CostFormula] = {
    QueryKind.SELECT: CostFormula(base=10, divisor=100),
    QueryKind.UPDATE: CostFormula(base=20, divisor=50),
    QueryKind.DELETE: CostFormula(base=20, divisor=50),
    QueryKind.INSERT: CostFormula(base=10, divisor=10000),
}


def calculate_cost(kind: QueryKind, row_count: int) -> int:
    return FORMULAS[kind](row_count)
