"""Query cost error taxonomy"""


class QueryCostError(Exception):
    """Base class for errors raised while pricing a statement"""
    pass


class UnknownQueryTypeError(QueryCostError):
    """Raised when the leading keyword is not select/insert/update/delete"""

    def __init__(self, keyword: str = ""):
        self.keyword = keyword
        super().__init__(f"Unknown query type: {keyword!r}" if keyword else "Unknown query type")


class ClauseMissingError(QueryCostError):
    """Raised when a statement lacks the clause keyword its verb requires"""

    clause = ""

    def __init__(self):
        super().__init__(f"{self.clause.upper()} statement is missing")


class IntoStatementMissingError(ClauseMissingError):
    clause = "into"


class SetStatementMissingError(ClauseMissingError):
    clause = "set"


class FromStatementMissingError(ClauseMissingError):
    clause = "from"


class DeleteMinimumThreeFieldsError(QueryCostError):
    """Raised when a DELETE statement has fewer than three tokens"""

    def __init__(self):
        super().__init__("DELETE query must consist of at least 3 fields")


class UnknownTableError(QueryCostError):
    """Raised by row counters for tables they know nothing about"""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Unknown table: {table_name}")
