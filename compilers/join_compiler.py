import logging
from .identifiers import sanitize_identifier
from .query_spec import (
    JOIN_LOGIC,
    JOIN_OPERATORS,
    ColumnPairCondition,
    CompositeCondition,
    JoinType,
    RawExpression,
    parse_join,
    parse_join_condition,
)


def _column_ref_sql(ref):
    return f"{sanitize_identifier(ref.table)}.{sanitize_identifier(ref.column)}"


def compile_join_condition(condition):
    """Compile a join condition tree into SQL text ('' when unresolvable)"""
    condition = parse_join_condition(condition)
    if condition is None:
        return ''

    if isinstance(condition, ColumnPairCondition):
        operator = condition.operator if condition.operator in JOIN_OPERATORS else '='
        return f"{_column_ref_sql(condition.left)} {operator} {_column_ref_sql(condition.right)}"

    # Caller-supplied SQL, emitted as is
    if isinstance(condition, RawExpression):
        return condition.expression

    if isinstance(condition, CompositeCondition):
        logic = condition.logic if condition.logic in JOIN_LOGIC else 'AND'
        parts = [compile_join_condition(c) for c in condition.conditions]
        return f" {logic} ".join(p for p in parts if p)

    return ''


def compile_join(join):
    """Compile a single join into its SQL fragment"""
    table = sanitize_identifier(join.table)

    if join.type is JoinType.CROSS:
        return f" CROSS JOIN {table}"
    if join.type is JoinType.NATURAL:
        return f" NATURAL JOIN {table}"

    if join.type is JoinType.SELF:
        alias = f" AS {sanitize_identifier(join.alias)}" if join.alias else ''
        clause = f" INNER JOIN {table}{alias}"
    else:
        clause = f" {join.type.value} JOIN {table}"

    condition = compile_join_condition(join.on)
    if condition:
        clause += f" ON {condition}"
    elif join.on is not None:
        logging.debug(f"Join on '{table}' has an empty condition, emitting it without ON")

    return clause


def compile_joins(joins):
    """Compile joins in order; later ON clauses may reference earlier joined tables"""
    if not joins:
        return ''

    fragments = []
    for raw in joins:
        join = parse_join(raw)
        if join is not None:
            fragments.append(compile_join(join))

    return ''.join(fragments)
