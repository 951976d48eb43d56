import logging
import sqlparse
from .aggregation_compiler import compile_aggregations, compile_group_by
from .identifiers import qualify_identifier, sanitize_identifier
from .join_compiler import compile_joins
from .predicate_compiler import compile_where
from .query_spec import QuerySpec


class QueryValidationError(ValueError):
    """Raised when a query description cannot be compiled at all"""


class MissingTableError(QueryValidationError):
    """Raised when a query description has no base table"""


def _as_spec(spec):
    if isinstance(spec, QuerySpec):
        return spec
    return QuerySpec.from_dict(spec)


def build_select(spec):
    """Assemble a parameterized SELECT statement from a query description"""
    spec = _as_spec(spec)

    base_table = sanitize_identifier(spec.table)
    select_cols = [qualify_identifier(c) for c in spec.columns] or ['*']
    agg_cols = compile_aggregations(spec.aggregations)

    all_select = ', '.join(select_cols + agg_cols)
    join_sql = compile_joins(spec.joins)
    where_sql, params = compile_where(spec.where)
    group_by_sql = compile_group_by(spec.columns, spec.aggregations)

    sql = f"SELECT {all_select} FROM {base_table}{join_sql}{where_sql}{group_by_sql};"

    logging.debug(f"Compiled query on '{spec.table}' -> {sql} params={params}")

    return {'sql': sql, 'params': params}


def compile_query(schema, spec):
    """Compile a query description against a schema into SQL text and parameters"""
    spec = _as_spec(spec)
    if not spec.table:
        raise MissingTableError("table is required")
    return build_select(spec)


def validate_query_spec(schema, spec):
    """Cross-check a query's table and plain columns against a schema"""
    spec = _as_spec(spec)
    problems = []

    if not spec.table:
        return ["table is required"]

    tables = {sanitize_identifier(name): columns for name, columns in (schema or {}).items()}
    base_table = sanitize_identifier(spec.table)

    if base_table not in tables:
        problems.append(f"Table '{spec.table}' does not exist")
        return problems

    joined = {sanitize_identifier(j.table) for j in spec.joins}
    known_columns = {
        sanitize_identifier(c['name'] if isinstance(c, dict) else c.name)
        for c in tables[base_table]
    }

    for column in spec.columns:
        if column == '*' or '.' in column:
            continue
        if sanitize_identifier(column) not in known_columns and not joined:
            problems.append(f"Column '{column}' does not exist in table '{spec.table}'")

    for table in joined:
        if table not in tables:
            problems.append(f"Table '{table}' does not exist")

    return problems


def format_sql(sql):
    """Pretty-print SQL for display"""
    return sqlparse.format(sql, reindent=True, keyword_case='upper')
