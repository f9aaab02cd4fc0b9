import os
from typing import FrozenSet
from dotenv import load_dotenv

load_dotenv()


def parse_table_list(raw: str) -> FrozenSet[str]:
    """
    Parses a comma separated allow-list into lowercased bare table names.
    Qualified names (schema.table) are refused so that system and catalog
    namespaces can never be allow-listed through configuration.
    """
    tables = set()
    for entry in raw.split(","):
        name = entry.strip().lower()
        if not name:
            continue
        if "." in name:
            raise ValueError(f"Allowed table '{name}' must be a bare, unqualified name")
        tables.add(name)
    if not tables:
        raise ValueError("At least one allowed table is required")
    return frozenset(tables)


class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Tenant SQL Guard")
    VERSION: str = os.getenv("VERSION", "1.0.0")

    # 1. Row Cap
    MAX_ROWS: int = int(os.getenv("GUARD_MAX_ROWS", "100"))

    # 2. Table Allow-List (bare names only)
    ALLOWED_TABLES: FrozenSet[str] = parse_table_list(
        os.getenv("GUARD_ALLOWED_TABLES", "projects,companies,addresses")
    )

    # 3. Tenancy
    TENANT_COLUMN: str = os.getenv("GUARD_TENANT_COLUMN", "org_id")

    # 4. Parser / Serializer
    # Production runs on ClickHouse; the embedded dev database reads the same text.
    SQL_DIALECT: str = os.getenv("GUARD_SQL_DIALECT", "clickhouse")

    # 5. Audit
    AUDIT_PREVIEW_CHARS: int = int(os.getenv("GUARD_AUDIT_PREVIEW_CHARS", "160"))

settings = Settings()
