import pytest
import sqlglot

from tenant_guard.pipeline.guardrails.row_cap import enforce_row_cap, requested_limit


def _cap(sql, max_rows):
    tree = sqlglot.parse_one(sql, read="clickhouse")
    applied = enforce_row_cap(tree, max_rows)
    return tree.sql(dialect="clickhouse"), applied


@pytest.mark.parametrize("sql, max_rows, expected", [
    ("SELECT * FROM projects", 100, 100),
    ("SELECT * FROM projects", 50, 50),
    ("SELECT * FROM projects LIMIT 1000", 100, 100),
    ("SELECT * FROM projects LIMIT 50", 100, 50),
    ("SELECT * FROM projects LIMIT 100", 100, 100),
    ("SELECT * FROM projects LIMIT 0", 100, 0),
])
def test_limit_is_inserted_clamped_or_kept(sql, max_rows, expected):
    rendered, applied = _cap(sql, max_rows)
    assert applied == expected
    assert rendered.endswith(f"LIMIT {expected}")


def test_non_literal_limit_is_replaced_by_the_cap():
    rendered, applied = _cap("SELECT * FROM projects LIMIT 10 + 5", 100)
    assert applied == 100
    assert "LIMIT 100" in rendered


def test_offset_survives_clamping():
    rendered, applied = _cap("SELECT * FROM projects LIMIT 500 OFFSET 20", 100)
    assert applied == 100
    assert "LIMIT 100" in rendered
    assert "OFFSET 20" in rendered


def test_requested_limit_reads_integer_literals_only():
    assert requested_limit(sqlglot.parse_one("SELECT 1 LIMIT 7", read="clickhouse")) == 7
    assert requested_limit(sqlglot.parse_one("SELECT 1", read="clickhouse")) is None
    assert requested_limit(sqlglot.parse_one("SELECT 1 LIMIT 2 + 3", read="clickhouse")) is None


@pytest.mark.parametrize("sql", [
    "SELECT * FROM projects ORDER BY status LIMIT 5 WITH TIES",
    "SELECT * FROM projects ORDER BY status LIMIT 500 WITH TIES",
])
def test_with_ties_is_stripped_and_capped(sql):
    rendered, applied = _cap(sql, 100)
    assert applied == 100
    assert rendered.endswith("LIMIT 100")
    assert "TIES" not in rendered.upper()


def test_fetch_first_is_replaced_by_the_cap():
    rendered, applied = _cap("SELECT * FROM projects FETCH FIRST 500 ROWS ONLY", 100)
    assert applied == 100
    assert rendered.endswith("LIMIT 100")
    assert "FETCH" not in rendered.upper()
