# tenant_guard/pipeline/guardrails/errors.py
from typing import Optional


class GuardError(Exception):
    """
    Raised when SQL violates safety or tenancy rules.
    str(error) is for operators; only `public_message` may reach an end user.
    """
    code: str = "SQL_GUARD_VIOLATION"
    public_message: str = "Query validation failed."

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def offending_identifier(self) -> Optional[str]:
        return None


class EmptyInputError(GuardError):
    code = "INVALID_SQL_INPUT"

    def __init__(self):
        super().__init__("SQL query is required")


class SQLParseError(GuardError):
    code = "SQL_PARSE_ERROR"

    def __init__(self, detail: str):
        super().__init__(f"SQL parsing failed: {detail}")
        self.detail = detail


class MultipleStatementsError(GuardError):
    code = "MULTI_STATEMENT"

    def __init__(self, statement_count: int):
        super().__init__(f"Multiple statements are not allowed (found {statement_count})")
        self.statement_count = statement_count


class DisallowedStatementError(GuardError):
    code = "INVALID_QUERY_TYPE"

    def __init__(self, statement_kind: str):
        super().__init__(f"Only SELECT or WITH queries are allowed, got: {statement_kind}")
        self.statement_kind = statement_kind

    @property
    def offending_identifier(self) -> Optional[str]:
        return self.statement_kind


class DisallowedTableError(GuardError):
    code = "DISALLOWED_TABLE"

    def __init__(self, table_name: str, reason: Optional[str] = None):
        message = f"Table '{table_name}' is not allowed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.table_name = table_name

    @property
    def offending_identifier(self) -> Optional[str]:
        return self.table_name
