from .identifiers import qualify_identifier, sanitize_identifier
from .predicate_compiler import compile_where
from .join_compiler import compile_join_condition, compile_joins
from .aggregation_compiler import compile_aggregations, compile_group_by
from .query_builder import (
    MissingTableError,
    QueryValidationError,
    build_select,
    compile_query,
    format_sql,
    validate_query_spec,
)
from .query_spec import QuerySpec
