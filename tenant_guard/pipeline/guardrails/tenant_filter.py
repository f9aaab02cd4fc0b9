# tenant_guard/pipeline/guardrails/tenant_filter.py
from typing import Dict, Iterable, List

from sqlglot import exp

from tenant_guard.pipeline.guardrails.table_resolver import ResolvedTable


def _source_count(scope: exp.Select) -> int:
    return sum(1 for child in scope.iter_expressions() if isinstance(child, (exp.From, exp.Join)))


def _conjuncts(condition: exp.Expression) -> List[exp.Expression]:
    """Top-level AND operands of a condition, parentheses unwrapped."""
    condition = condition.unnest()
    if isinstance(condition, exp.And):
        return [c.unnest() for c in condition.flatten()]
    return [condition]


def _is_tenant_predicate(node: exp.Expression, qualifier: str, tenant_column: str,
                         tenant_id: str, allow_unqualified: bool) -> bool:
    if not isinstance(node, exp.EQ):
        return False

    for column, value in ((node.this, node.expression), (node.expression, node.this)):
        if not isinstance(column, exp.Column) or not isinstance(value, exp.Literal):
            continue
        if column.name.lower() != tenant_column.lower():
            continue
        if not value.is_string or value.this != tenant_id:
            continue
        if column.table:
            if column.table.lower() == qualifier.lower():
                return True
        elif allow_unqualified:
            return True
    return False


def has_tenant_predicate(scope: exp.Select, qualifier: str, tenant_column: str, tenant_id: str) -> bool:
    """
    Best-effort structural match of `<qualifier>.<tenant_column> = '<tenant_id>'`
    among the WHERE conjuncts. Anything under an OR, a tautology, or another
    tenant's id does not count. May under-fire; the caller then adds a redundant
    but equal predicate.
    """
    where = scope.args.get("where")
    if not where:
        return False

    allow_unqualified = _source_count(scope) == 1
    return any(
        _is_tenant_predicate(c, qualifier, tenant_column, tenant_id, allow_unqualified)
        for c in _conjuncts(where.this)
    )


def _qualifier_identifier(table: exp.Table) -> exp.Identifier:
    alias = table.args.get("alias")
    if alias and alias.this:
        return alias.this.copy()
    return table.this.copy()


def build_tenant_predicate(table: exp.Table, tenant_column: str, tenant_id: str) -> exp.EQ:
    """`<alias-or-table>.<tenant_column> = '<tenant_id>'`, the id as an escaped string literal."""
    column = exp.Column(this=exp.to_identifier(tenant_column), table=_qualifier_identifier(table))
    return exp.EQ(this=column, expression=exp.Literal.string(tenant_id))


def add_conjunct(scope: exp.Select, predicate: exp.Expression) -> None:
    where = scope.args.get("where")
    if not where:
        scope.set("where", exp.Where(this=predicate))
        return

    existing = where.this
    # OR binds looser than AND: `a OR b AND p` would leave `a` unscoped
    if isinstance(existing, exp.Connector) and not isinstance(existing, exp.And):
        existing = exp.Paren(this=existing)
    where.set("this", exp.And(this=existing, expression=predicate))


def inject_tenant_filters(resolved: Iterable[ResolvedTable], tenant_id: str, tenant_column: str) -> bool:
    """
    Ensures every table reference is scoped to the tenant inside the SELECT that owns it.
    One predicate per alias, so both sides of a self-join are filtered.
    Returns True if at least one predicate was added.
    """
    scopes: Dict[int, exp.Select] = {}
    by_scope: Dict[int, List[ResolvedTable]] = {}
    for item in resolved:
        scope = item.node.parent_select
        scopes.setdefault(id(scope), scope)
        by_scope.setdefault(id(scope), []).append(item)

    injected = False
    for key, items in by_scope.items():
        scope = scopes[key]
        for item in items:
            qualifier = item.reference.qualifier
            if has_tenant_predicate(scope, qualifier, tenant_column, tenant_id):
                continue
            add_conjunct(scope, build_tenant_predicate(item.node, tenant_column, tenant_id))
            injected = True

    return injected
