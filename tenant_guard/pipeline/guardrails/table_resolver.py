# tenant_guard/pipeline/guardrails/table_resolver.py
from typing import Iterable, List, NamedTuple, Set

from sqlglot import exp
from sqlglot.errors import OptimizeError
from sqlglot.optimizer.scope import traverse_scope

from tenant_guard.pipeline.guardrails.errors import DisallowedStatementError, DisallowedTableError
from tenant_guard.pipeline.schemas import TableReference

# Row sources that are not physical tables; their own FROM clauses are walked separately.
DERIVED_SOURCES = (exp.Subquery, exp.Unnest, exp.Values, exp.Lateral)


class ResolvedTable(NamedTuple):
    reference: TableReference
    node: exp.Table


def _qualified_name(table: exp.Table) -> str:
    parts = [table.catalog, table.db, table.name]
    return ".".join(p for p in parts if p).lower()


def _cte_references(statement: exp.Expression) -> Set[int]:
    """
    ids of the Table nodes that name a CTE visible from their own SELECT.
    A non-recursive CTE is not visible inside its own body.
    """
    try:
        scopes = traverse_scope(statement)
    except OptimizeError as e:
        raise DisallowedStatementError("UNRESOLVED SCOPE") from e

    references = set()
    for scope in scopes:
        for table in scope.tables:
            if not table.db and not table.catalog and table.name in scope.cte_sources:
                references.add(id(table))
    return references


def resolve_tables(statement: exp.Expression) -> List[ResolvedTable]:
    """
    Collects every physical table the statement scans, depth first, including
    the bodies of CTEs and subqueries. References to a CTE in scope are skipped.
    One entry per reference: a self-join yields two.
    """
    # Only tables and derived sources may feed a FROM/JOIN
    for clause in statement.find_all(exp.From, exp.Join, bfs=False):
        source = clause.this
        if not isinstance(source, (exp.Table,) + DERIVED_SOURCES):
            raise DisallowedTableError(source.sql(), "unsupported row source")

    cte_references = _cte_references(statement)

    resolved: List[ResolvedTable] = []
    for table in statement.find_all(exp.Table, bfs=False):
        if not isinstance(table.this, exp.Identifier):
            # Table functions (numbers(), url(), file(), ...) can't be allow-listed
            raise DisallowedTableError(table.sql(), "table functions are not allowed")

        name = _qualified_name(table)
        if id(table) in cte_references:
            continue

        if not isinstance(table.parent, (exp.From, exp.Join)):
            raise DisallowedTableError(name, "referenced outside a FROM or JOIN clause")

        reference = TableReference(qualified_name=name, alias=table.alias or None)
        resolved.append(ResolvedTable(reference, table))

    return resolved


def enforce_allow_list(resolved: Iterable[ResolvedTable], allowed_tables: Iterable[str]) -> List[str]:
    """
    Fails closed on the first table outside the allow-list.
    Qualified names are compared whole, so `system.tables` never matches `tables`.
    Returns the de-duplicated table names in first-seen order.
    """
    allowed = {t.lower() for t in allowed_tables}
    tables_used: List[str] = []

    for item in resolved:
        name = item.reference.qualified_name
        if name not in allowed:
            raise DisallowedTableError(name)
        if name not in tables_used:
            tables_used.append(name)

    return tables_used
