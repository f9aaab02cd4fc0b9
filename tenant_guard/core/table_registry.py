# tenant_guard/core/table_registry.py
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from tenant_guard.core.config import settings

# Import your tables
import tenant_guard.tables.projects as projects_table
import tenant_guard.tables.companies as companies_table
import tenant_guard.tables.addresses as addresses_table

# The DDL files are written for the production engine
DDL_DIALECT = "clickhouse"


class TableMetadata(BaseModel):
    name: str
    table_name: str
    description: str
    tenant_column: str
    columns: List[str]
    ddl: str

    @property
    def queryable_columns(self) -> List[str]:
        """Columns the model may reference; the tenant column is injected by the guard."""
        return sorted(c for c in self.columns if c != self.tenant_column)


class TableRegistry:
    _registry: Dict[str, TableMetadata] = {}
    _initialized = False

    @classmethod
    def initialize(cls):
        """
        Loads all table modules into memory and parses their DDL.
        """
        if cls._initialized:
            return

        tables = [projects_table, companies_table, addresses_table]

        print("📦 Initializing Table Registry...")

        for table in tables:
            parsed = cls._parse_ddl(table.DDL)
            if not parsed:
                print(f"⚠️ Warning: Could not parse DDL for table {table.NAME}")
                continue

            table_name, columns = parsed
            metadata = TableMetadata(
                name=table.NAME,
                table_name=table_name,
                description=table.DESCRIPTION,
                tenant_column=settings.TENANT_COLUMN,
                columns=columns,
                ddl=table.DDL,
            )

            cls._registry[table_name] = metadata
            print(f"   -> Registered: {table_name} [{len(columns)} columns]")

        cls._initialized = True

    @staticmethod
    def _parse_ddl(ddl: str) -> Optional[Tuple[str, List[str]]]:
        """Table name and column names from a CREATE TABLE statement."""
        try:
            create = sqlglot.parse_one(ddl, read=DDL_DIALECT)
        except SqlglotError:
            return None

        if not isinstance(create, exp.Create) or not isinstance(create.this, exp.Schema):
            return None

        schema = create.this
        columns = [c.name.lower() for c in schema.expressions if isinstance(c, exp.ColumnDef)]
        return schema.this.name.lower(), columns

    @classmethod
    def get_table(cls, table_name: str) -> Optional[TableMetadata]:
        return cls._registry.get(table_name.lower())

    @classmethod
    def get_all_tables(cls) -> List[str]:
        return list(cls._registry.keys())

    @classmethod
    def get_schema_summary(cls) -> str:
        """
        Prompt-ready schema description, one line per table:
        - projects(budget, city, ...)
        """
        return "\n".join(
            f"- {name}({', '.join(meta.queryable_columns)})"
            for name, meta in cls._registry.items()
        )

    @classmethod
    def get_schema_json(cls) -> Dict[str, List[str]]:
        """`{table: [columns]}` for the describe_schema tool."""
        return {name: meta.queryable_columns for name, meta in cls._registry.items()}

# Auto-initialize on import
TableRegistry.initialize()
