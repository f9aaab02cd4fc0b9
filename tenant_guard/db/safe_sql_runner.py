import math
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from tenant_guard.pipeline.guardrails.errors import GuardError
from tenant_guard.pipeline.guardrails.sql_policy import SQLGuard, sql_guard
from tenant_guard.pipeline.schemas import GuardResult


class SafeSQLRunner:
    """
    The Single Point of Execution.
    All SQL (AI-generated or Custom) MUST pass through here.
    The executor (ClickHouse in production, the embedded engine in dev) only ever sees guarded SQL.
    """

    def __init__(self, executor: Callable[[str], Any], guard: Optional[SQLGuard] = None):
        self.executor = executor
        self.guard = guard or sql_guard

    def execute(self, sql: str, tenant_id: str, max_rows: Optional[int] = None) -> Any:
        """
        1. Validates SQL (Guardrails).
        2. Hands only the rewritten SQL to the executor.
        Raises GuardError; the executor is never called on failure.
        """
        guarded = self.guard.validate_and_fix(sql, tenant_id, max_rows=max_rows)
        return self.executor(guarded.sql)

    def execute_safe(self, sql: str, tenant_id: str, max_rows: Optional[int] = None) -> Dict[str, Any]:
        """Like execute, but returns a JSON-safe payload and never leaks guard internals."""
        try:
            guarded = self.guard.validate_and_fix(sql, tenant_id, max_rows=max_rows)
        except GuardError as e:
            # Parser text and table names help an attacker iterate; send only the generic message
            return {"type": "error", "code": e.code, "message": e.public_message}

        rows = self.executor(guarded.sql)
        return self._finalize(guarded, rows)

    def _finalize(self, guarded: GuardResult, rows: Any) -> Dict[str, Any]:
        return {
            "type": "success",
            "sql": guarded.sql,
            "data": self._json_safe(list(rows or [])),
            "tables_used": list(guarded.tables_used),
            "row_limit_applied": guarded.row_limit_applied,
            "tenant_filter_injected": guarded.tenant_filter_injected,
        }

    def _json_safe(self, obj):
        """Global safety net."""
        if obj is None: return None
        if isinstance(obj, (datetime, date)): return obj.isoformat()
        if isinstance(obj, float): return None if (math.isnan(obj) or math.isinf(obj)) else obj
        if isinstance(obj, (int, bool, str)): return obj
        if isinstance(obj, dict): return {str(k): self._json_safe(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)): return [self._json_safe(v) for v in obj]
        return str(obj)
