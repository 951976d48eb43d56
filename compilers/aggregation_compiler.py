from .identifiers import qualify_identifier, sanitize_identifier
from .query_spec import parse_aggregation


def _parse_all(aggregations):
    parsed = (parse_aggregation(a) for a in aggregations or [])
    return [a for a in parsed if a is not None]


def compile_aggregation(aggregation):
    """Render one aggregation as a select-list expression"""
    alias = f" AS {sanitize_identifier(aggregation.alias)}" if aggregation.alias else ''

    if aggregation.counts_rows:
        return f"COUNT(*){alias}"

    if aggregation.column in ('*', 'COUNT(*)'):
        column = '*'
    else:
        column = qualify_identifier(aggregation.column)

    return f"{aggregation.fn.value}({column}){alias}"


def compile_aggregations(aggregations):
    """Render every aggregation, in input order"""
    return [compile_aggregation(a) for a in _parse_all(aggregations)]


def grouping_columns(columns, aggregations):
    """Selected plain columns that are neither '*' nor an aggregation's column"""
    aggregated = {a.column for a in _parse_all(aggregations)}
    return [c for c in columns or [] if c != '*' and c not in aggregated]


def compile_group_by(columns, aggregations):
    """Infer the GROUP BY clause from the selected columns and aggregations"""
    if not _parse_all(aggregations):
        return ''

    group_by_cols = [qualify_identifier(c) for c in grouping_columns(columns, aggregations)]
    if not group_by_cols:
        return ''

    return f" GROUP BY {', '.join(group_by_cols)}"
