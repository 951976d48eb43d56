import logging
from .identifiers import qualify_identifier
from .query_spec import (
    ComparisonCondition,
    InCondition,
    LikeCondition,
    NullCheckCondition,
    parse_condition,
)


def resolve_condition_column(condition):
    """Resolve the SQL column reference for a condition, or None if it has none"""
    column = condition.column
    if column is None or str(column).strip() == '':
        return None
    return qualify_identifier(column, condition.table)


def compile_condition(condition, params):
    """Compile one condition, appending its bound values to params"""
    col = resolve_condition_column(condition)
    if col is None:
        logging.debug(f"Dropping condition without a column: {condition}")
        return None

    if isinstance(condition, InCondition):
        placeholders = ', '.join('?' for _ in condition.values)
        params.extend(condition.values)
        return f"{col} IN ({placeholders})"

    if isinstance(condition, LikeCondition):
        pattern = condition.pattern
        params.append(str(pattern) if pattern is not None else None)
        return f"{col} LIKE ?"

    if isinstance(condition, NullCheckCondition):
        return f"{col} IS NOT NULL" if condition.negated else f"{col} IS NULL"

    if isinstance(condition, ComparisonCondition):
        op = condition.operator
        if condition.value is not None:
            params.append(condition.value)
            return f"{col} {op} ?"

        # Null comparisons
        if op == '=':
            return f"{col} IS NULL"
        if op == '!=':
            return f"{col} IS NOT NULL"

        logging.warning(f"Binding NULL to '{col} {op} ?'; the comparison never matches")
        params.append(None)
        return f"{col} {op} ?"

    return None


def compile_where(conditions):
    """Compile filter conditions into a WHERE clause and positional parameters"""
    if not conditions:
        return '', []

    params = []
    parts = []

    for raw in conditions:
        condition = parse_condition(raw)
        if condition is None:
            continue

        part = compile_condition(condition, params)
        if part is not None:
            parts.append(part)

    if not parts:
        return '', []

    return f" WHERE {' AND '.join(parts)}", params
