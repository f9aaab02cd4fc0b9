# tenant_guard/pipeline/guardrails/sql_policy.py
from typing import Iterable, Optional

from tenant_guard.core.config import settings
from tenant_guard.pipeline.guardrails.errors import GuardError
from tenant_guard.pipeline.guardrails.row_cap import enforce_row_cap
from tenant_guard.pipeline.guardrails.statement_parser import parse_statement, validate_shape
from tenant_guard.pipeline.guardrails.table_resolver import enforce_allow_list, resolve_tables
from tenant_guard.pipeline.guardrails.tenant_filter import inject_tenant_filters
from tenant_guard.pipeline.schemas import GuardRequest, GuardResult
from tenant_guard.services.audit_log import GuardAuditLog, audit_log


class SQLGuard:
    """
    Tenant SQL Guard (The Iron Wall).
    1. Parses exactly one statement.
    2. Blocks writes and anything that isn't SELECT / WITH ... SELECT.
    3. Restricts reads to the allow-listed tables.
    4. Scopes every table reference to the caller's tenant.
    5. Caps the row count.
    Any failure aborts the whole call; no partially rewritten SQL ever escapes.
    Holds only immutable configuration, so one instance is safe to share across threads.
    """

    def __init__(self, dialect: Optional[str] = None, tenant_column: Optional[str] = None,
                 audit: Optional[GuardAuditLog] = None):
        self.dialect = dialect if dialect is not None else settings.SQL_DIALECT
        self.tenant_column = tenant_column or settings.TENANT_COLUMN
        self.audit = audit if audit is not None else audit_log

    def validate_and_fix(self, sql: str, expected_tenant_id: str,
                         max_rows: Optional[int] = None,
                         allowed_tables: Optional[Iterable[str]] = None) -> GuardResult:
        options = {"sql": sql, "expected_tenant_id": expected_tenant_id}
        if max_rows is not None:
            options["max_rows"] = max_rows
        if allowed_tables is not None:
            options["allowed_tables"] = allowed_tables
        return self.run(GuardRequest(**options))

    def run(self, request: GuardRequest) -> GuardResult:
        try:
            return self._run_pipeline(request)
        except GuardError as e:
            self.audit.record_rejection(e, request.sql)
            raise

    def _run_pipeline(self, request: GuardRequest) -> GuardResult:
        # Step 1: Parse into AST
        statement = parse_statement(request.sql, self.dialect)

        # Step 2: Read-only shape
        select = validate_shape(statement)

        # Step 3: Physical tables (CTE names excluded)
        resolved = resolve_tables(select)

        # Step 4: Allow-list
        tables_used = enforce_allow_list(resolved, request.allowed_tables)

        # Step 5: Tenant scoping
        injected = inject_tenant_filters(resolved, request.expected_tenant_id, self.tenant_column)

        # Step 6: Row cap (last mutation)
        limit_applied = enforce_row_cap(select, request.max_rows)

        # Step 7: Serialize
        return GuardResult(
            sql=select.sql(dialect=self.dialect),
            tenant_filter_injected=injected,
            row_limit_applied=limit_applied,
            tables_used=tables_used,
        )


# Global Instance
sql_guard = SQLGuard()


def guard(sql: str, expected_tenant_id: str, max_rows: Optional[int] = None,
          allowed_tables: Optional[Iterable[str]] = None) -> GuardResult:
    """Validates and rewrites one query with the default guard. Raises GuardError."""
    return sql_guard.validate_and_fix(sql, expected_tenant_id, max_rows=max_rows, allowed_tables=allowed_tables)
