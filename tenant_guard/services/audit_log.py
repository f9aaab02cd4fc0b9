# tenant_guard/services/audit_log.py
import re
from typing import Callable, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from tenant_guard.core.config import settings
from tenant_guard.pipeline.guardrails.errors import GuardError

_QUOTED = re.compile(r"'(?:[^'\\]|\\.|'')*'?|\"(?:[^\"\\]|\\.)*\"?")


class GuardAuditLog:
    """
    Security telemetry for rejected queries.
    Records the error code, the offending identifier and a literal-free query
    shape, so operators can spot systematic probing without storing tenant
    data or raw SQL.
    """

    def __init__(self, sink: Callable[[str], None] = print,
                 preview_chars: Optional[int] = None, dialect: Optional[str] = None):
        self.sink = sink
        self.preview_chars = preview_chars or settings.AUDIT_PREVIEW_CHARS
        self.dialect = dialect if dialect is not None else settings.SQL_DIALECT

    def query_shape(self, sql: Optional[str]) -> str:
        """SQL with every literal replaced by `?`, truncated."""
        if not sql or not sql.strip():
            return ""
        try:
            statements = [s for s in sqlglot.parse(sql, read=self.dialect) if s is not None]
            shape = "; ".join(
                s.transform(lambda node: exp.var("?") if isinstance(node, exp.Literal) else node)
                 .sql(dialect=self.dialect)
                for s in statements
            )
        except SqlglotError:
            # Unparseable: blank out anything quoted
            shape = _QUOTED.sub("?", " ".join(sql.split()))

        if len(shape) > self.preview_chars:
            shape = shape[: self.preview_chars] + "..."
        return shape

    def record_rejection(self, error: GuardError, sql: Optional[str]) -> None:
        identifier = error.offending_identifier or "-"
        self.sink(
            f"🛡️ SQLGuard blocked [{error.code}] identifier={identifier} "
            f"shape=\"{self.query_shape(sql)}\""
        )


# Global Instance
audit_log = GuardAuditLog()
