# tenant_guard/pipeline/guardrails/row_cap.py
from typing import Optional

from sqlglot import exp


def requested_limit(select: exp.Select) -> Optional[int]:
    """
    The integer LIMIT written in the query, or None if absent or not a plain integer.
    A LIMIT carrying WITH TIES or PERCENT is not plain.
    """
    limit = select.args.get("limit")
    if not isinstance(limit, exp.Limit) or limit.args.get("limit_options"):
        return None
    value = limit.expression
    if isinstance(value, exp.Literal) and value.is_int:
        return int(value.this)
    return None


def enforce_row_cap(select: exp.Select, max_rows: int) -> int:
    """
    Inserts LIMIT max_rows when missing, clamps a larger one, keeps a smaller one.
    Expressions, parameters, limit options and FETCH FIRST are replaced by the cap. OFFSET is kept.
    Must be the last mutation before serialization.
    """
    requested = requested_limit(select)
    applied = max_rows if requested is None else min(requested, max_rows)

    limit = select.args.get("limit")
    if isinstance(limit, exp.Limit):
        limit.set("expression", exp.Literal.number(applied))
        limit.set("limit_options", None)
    else:
        select.set("limit", exp.Limit(expression=exp.Literal.number(applied)))

    return applied
