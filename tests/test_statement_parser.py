import pytest
from sqlglot import exp

from tenant_guard.pipeline.guardrails.errors import (
    DisallowedStatementError,
    EmptyInputError,
    MultipleStatementsError,
    SQLParseError,
)
from tenant_guard.pipeline.guardrails.statement_parser import parse_statement, validate_shape


@pytest.mark.parametrize("sql", ["", "   ", "\n\t"])
def test_blank_input_fails_fast(sql):
    with pytest.raises(EmptyInputError):
        parse_statement(sql, "clickhouse")


def test_stacked_statements_are_rejected():
    with pytest.raises(MultipleStatementsError) as info:
        parse_statement("SELECT * FROM projects; SELECT * FROM companies", "clickhouse")
    assert info.value.statement_count == 2


@pytest.mark.parametrize("sql", [
    "SELECT * FROM projects LIMIT 10; DROP TABLE projects",
    "WITH cte AS (SELECT * FROM projects) SELECT * FROM cte; DELETE FROM projects",
])
def test_trailing_destructive_statement_is_rejected(sql):
    with pytest.raises(MultipleStatementsError):
        parse_statement(sql, "clickhouse")


def test_single_trailing_semicolon_is_accepted():
    statement = parse_statement("SELECT 1;", "clickhouse")
    assert isinstance(statement, exp.Select)


def test_semicolon_inside_string_or_comment_is_not_a_separator():
    assert isinstance(parse_statement("SELECT ';' AS sep", "clickhouse"), exp.Select)
    assert isinstance(parse_statement("SELECT 1 -- ; DROP TABLE projects", "clickhouse"), exp.Select)


def test_malformed_sql_keeps_parser_detail_out_of_public_message():
    with pytest.raises(SQLParseError) as info:
        parse_statement("SELECT * FROM projects WHERE (status = 'x'", "clickhouse")
    assert info.value.detail
    assert info.value.public_message == "Query validation failed."
    assert info.value.detail not in info.value.public_message


def test_unterminated_string_is_a_parse_error():
    with pytest.raises(SQLParseError):
        parse_statement("SELECT 'abc", "clickhouse")


def test_comment_only_input_is_a_parse_error():
    with pytest.raises(SQLParseError):
        parse_statement("-- nothing to see here", "clickhouse")


@pytest.mark.parametrize("sql", [
    "INSERT INTO projects VALUES (1, 'test')",
    "UPDATE projects SET name = 'test'",
    "DELETE FROM projects",
    "DROP TABLE projects",
    "ALTER TABLE projects DROP COLUMN name",
    "CREATE TABLE stolen (id String)",
    "TRUNCATE TABLE projects",
])
def test_write_statements_fail_shape_validation(sql):
    statement = parse_statement(sql, "clickhouse")
    with pytest.raises(DisallowedStatementError):
        validate_shape(statement)


def test_union_at_the_root_is_rejected():
    statement = parse_statement("SELECT id FROM projects UNION ALL SELECT id FROM companies", "clickhouse")
    with pytest.raises(DisallowedStatementError) as info:
        validate_shape(statement)
    assert info.value.statement_kind == "UNION"


def test_select_and_with_select_pass_unchanged():
    plain = parse_statement("SELECT id FROM projects", "clickhouse")
    assert validate_shape(plain) is plain

    with_select = parse_statement("WITH r AS (SELECT id FROM projects) SELECT * FROM r", "clickhouse")
    assert validate_shape(with_select) is with_select


def test_data_modifying_cte_is_rejected():
    statement = parse_statement(
        "WITH gone AS (DELETE FROM projects RETURNING *) SELECT * FROM gone", "postgres"
    )
    with pytest.raises(DisallowedStatementError):
        validate_shape(statement)


def test_select_into_is_rejected():
    statement = parse_statement("SELECT * INTO backup FROM projects", "postgres")
    with pytest.raises(DisallowedStatementError) as info:
        validate_shape(statement)
    assert info.value.statement_kind == "SELECT INTO"


def test_root_limit_by_is_rejected():
    statement = parse_statement("SELECT * FROM projects LIMIT 1 BY id", "clickhouse")
    with pytest.raises(DisallowedStatementError) as info:
        validate_shape(statement)
    assert info.value.statement_kind == "LIMIT BY"


def test_limit_by_inside_a_subquery_is_accepted():
    statement = parse_statement("SELECT * FROM (SELECT * FROM projects LIMIT 1 BY id) AS latest", "clickhouse")
    assert validate_shape(statement) is statement


def test_scalar_with_is_rejected():
    statement = parse_statement("WITH 5 AS n SELECT * FROM projects LIMIT n", "clickhouse")
    with pytest.raises(DisallowedStatementError) as info:
        validate_shape(statement)
    assert info.value.statement_kind.startswith("WITH")
