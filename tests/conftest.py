import pytest
import sqlglot

from tenant_guard.pipeline.guardrails.sql_policy import SQLGuard
from tenant_guard.services.audit_log import GuardAuditLog

TEST_ORG_ID = "test-org-123"
OTHER_ORG_ID = "other-org-456"
DIALECT = "clickhouse"


@pytest.fixture
def audit_lines():
    return []


@pytest.fixture
def guard(audit_lines):
    return SQLGuard(dialect=DIALECT, tenant_column="org_id",
                    audit=GuardAuditLog(sink=audit_lines.append, dialect=DIALECT))


@pytest.fixture
def reparse():
    def _reparse(sql):
        return sqlglot.parse_one(sql, read=DIALECT)
    return _reparse
