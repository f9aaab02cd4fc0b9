from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import FrozenSet, Optional, Tuple

from tenant_guard.core.config import settings, parse_table_list


# 1. Input to every Guard invocation
class GuardRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    sql: str = Field(..., description="Exactly one SQL statement, never mutated")
    expected_tenant_id: str = Field(..., min_length=1, description="Tenant the caller is authorized to see")
    max_rows: int = Field(default_factory=lambda: settings.MAX_ROWS, gt=0, description="Upper bound on returned rows")
    allowed_tables: FrozenSet[str] = Field(
        default_factory=lambda: settings.ALLOWED_TABLES,
        description="Bare logical table names the query may read, case-insensitive",
    )

    @field_validator("allowed_tables", mode="before")
    @classmethod
    def _bare_table_names(cls, value):
        if isinstance(value, str):
            return parse_table_list(value)
        return parse_table_list(",".join(value))


# 2. A base table touched by the query
class TableReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    qualified_name: str = Field(..., description="Lowercased catalog.db.name, only the parts present")
    alias: Optional[str] = Field(None, description="Alias as written, if any")

    @property
    def qualifier(self) -> str:
        """Name used to qualify columns of this reference in its own scope."""
        return self.alias or self.qualified_name.split(".")[-1]

    def same_table(self, other: "TableReference") -> bool:
        return self.qualified_name.lower() == other.qualified_name.lower()


# 3. Output of a successful Guard invocation
class GuardResult(BaseModel):
    """
    The rewritten statement plus what the Guard did to it.
    Only `sql` may be handed to a query executor.
    """
    model_config = ConfigDict(frozen=True)

    sql: str
    tenant_filter_injected: bool
    row_limit_applied: int
    tables_used: Tuple[str, ...] = Field(default_factory=tuple)
