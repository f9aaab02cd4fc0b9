# tenant_guard/pipeline/guardrails/statement_parser.py
from typing import List, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError
from sqlglot.tokens import Token, TokenType

from tenant_guard.pipeline.guardrails.errors import (
    DisallowedStatementError,
    EmptyInputError,
    MultipleStatementsError,
    SQLParseError,
)

# Nodes that write, change schema or run engine commands. None may appear anywhere in the tree.
WRITE_NODES = (
    exp.Insert, exp.Update, exp.Delete, exp.Merge,
    exp.Drop, exp.Create, exp.Command,
)


def _count_statements(tokens: List[Token]) -> int:
    """Counts non-empty token runs between semicolons. Strings and comments never yield a SEMICOLON token."""
    count = 0
    pending = False
    for token in tokens:
        if token.token_type == TokenType.SEMICOLON:
            if pending:
                count += 1
            pending = False
        else:
            pending = True
    return count + (1 if pending else 0)


def parse_statement(sql: str, dialect: Optional[str] = None) -> exp.Expression:
    """
    Turns raw SQL text into exactly one sqlglot expression tree.
    Raises EmptyInputError, MultipleStatementsError or SQLParseError.
    """
    if sql is None or not sql.strip():
        raise EmptyInputError()

    # Step 1: Tokenize, so stacked statements are caught outside string/comment context
    try:
        tokens = sqlglot.tokenize(sql, read=dialect)
    except SqlglotError as e:
        raise SQLParseError(str(e)) from e

    statement_count = _count_statements(tokens)
    if statement_count > 1:
        raise MultipleStatementsError(statement_count)

    # Step 2: Parse into AST
    try:
        expressions = sqlglot.parse(sql, read=dialect)
    except SqlglotError as e:
        raise SQLParseError(str(e)) from e

    statements = [e for e in expressions if e is not None]
    if len(statements) > 1:
        raise MultipleStatementsError(len(statements))
    if not statements:
        raise SQLParseError("no statement found")

    return statements[0]


def _statement_kind(node: exp.Expression) -> str:
    if isinstance(node, exp.Command):
        return str(node.this).upper()
    return node.key.upper()


def validate_shape(statement: exp.Expression) -> exp.Select:
    """
    Accepts a bare SELECT or a WITH ... SELECT (a Select carrying a With).
    Everything else is rejected before any table is looked at.
    ClickHouse scalar WITH (`WITH 5 AS n SELECT ...`) is rejected too: every
    CTE must be a query. A root `LIMIT n BY cols` is rejected because it caps
    rows per group and leaves no room for a global LIMIT.
    """
    # --- RULE 1: READ ONLY ROOT ---
    if not isinstance(statement, exp.Select):
        raise DisallowedStatementError(_statement_kind(statement))

    limit = statement.args.get("limit")
    if isinstance(limit, exp.Limit) and limit.expressions:
        raise DisallowedStatementError("LIMIT BY")

    # --- RULE 2: NO NESTED WRITES ---
    for node in statement.walk():
        if isinstance(node, WRITE_NODES):
            raise DisallowedStatementError(_statement_kind(node))

        if isinstance(node, exp.CTE) and not isinstance(node.this, exp.Query):
            raise DisallowedStatementError(f"WITH {_statement_kind(node.this)}")

        if isinstance(node, exp.Select):
            if node.args.get("into"):
                raise DisallowedStatementError("SELECT INTO")
            if node.args.get("settings"):
                raise DisallowedStatementError("SETTINGS")

    return statement
