"""Statement classification and table name extraction"""
from dataclasses import dataclass
from typing import Callable, Dict, List

from querycost.core.errors import (
    DeleteMinimumThreeFieldsError,
    FromStatementMissingError,
    IntoStatementMissingError,
    SetStatementMissingError,
    UnknownQueryTypeError,
)
from querycost.core.formula import calculate_cost
from querycost.core.query_kind import QueryKind


@dataclass(frozen=True)
class QueryType:
    """A classified statement. Holds the original text untouched."""

    kind: QueryKind
    sql: str

    def table_name(self) -> str:
        """
        Extract the target table from the statement text, as `table` or
        `schema.table`. Quotes are stripped; unquoted parts are lower-cased.
        Returns "" for a SELECT without FROM.
        Raises: ClauseMissingError / DeleteMinimumThreeFieldsError
        """
        return _EXTRACTORS[self.kind](_tokenize(self.sql))

    def calculate_cost(self, row_count: int) -> int:
        return calculate_cost(self.kind, row_count)


def classify_query(sql: str) -> QueryType:
    """Classify a statement by its leading keyword."""
    tokens = _tokenize(sql)
    keyword = tokens[0].lower() if tokens else ""
    try:
        kind = QueryKind(keyword)
    except ValueError:
        raise UnknownQueryTypeError(keyword) from None
    return QueryType(kind=kind, sql=sql)


def _tokenize(sql: str) -> List[str]:
    return sql.split()


def _find_keyword(tokens: List[str], keyword: str, start: int = 0) -> int:
    for i in range(start, len(tokens)):
        if tokens[i].lower() == keyword:
            return i
    return -1


def _split_outside_quotes(text: str, separator: str) -> List[str]:
    parts: List[str] = []
    current: List[str] = []
    quoted = False
    for ch in text:
        if ch == '"':
            quoted = not quoted
        elif ch == separator and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def _normalize_identifier(part: str) -> str:
    # quoted identifiers keep their case, unquoted ones fold to lower case
    if len(part) >= 2 and part.startswith('"') and part.endswith('"'):
        return part[1:-1].replace('""', '"')
    return part.strip('"').lower()


def _clean_identifier(token: str) -> str:
    """keys(a,b,c) -> keys, "1_keys" -> 1_keys, "dw"."Orders" -> dw.Orders"""
    name = _split_outside_quotes(token.rstrip(";"), "(")[0]
    return ".".join(_normalize_identifier(part) for part in _split_outside_quotes(name, "."))


def _select_table_name(tokens: List[str]) -> str:
    from_index = _find_keyword(tokens, "from")
    # constant selects such as "select 3" have no table
    if from_index == -1 or from_index + 1 >= len(tokens):
        return ""
    return _clean_identifier(tokens[from_index + 1])


def _insert_table_name(tokens: List[str]) -> str:
    into_index = _find_keyword(tokens, "into")
    if into_index == -1 or into_index + 1 >= len(tokens):
        raise IntoStatementMissingError()
    return _clean_identifier(tokens[into_index + 1])


def _update_table_name(tokens: List[str]) -> str:
    if _find_keyword(tokens, "set", start=2) == -1:
        raise SetStatementMissingError()
    return _clean_identifier(tokens[1])


def _delete_table_name(tokens: List[str]) -> str:
    if len(tokens) < 3:
        raise DeleteMinimumThreeFieldsError()
    if tokens[1].lower() != "from":
        raise FromStatementMissingError()
    return _clean_identifier(tokens[2])


_EXTRACTORS: Dict[QueryKind, Callable[[List[str]], str]] = {
    QueryKind.SELECT: _select_table_name,
    QueryKind.INSERT: _insert_table_name,
    QueryKind.UPDATE: _update_table_name,
    QueryKind.DELETE: _delete_table_name,
}
