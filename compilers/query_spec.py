"""
Typed query descriptions.

Requests arrive as loosely shaped JSON. The ``from_dict`` helpers here do the
shape-sniffing once and turn each filter, join and aggregation into a tagged
variant, so the compilers only ever dispatch on type.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union


class JoinType(str, enum.Enum):
    INNER = 'INNER'
    LEFT = 'LEFT'
    RIGHT = 'RIGHT'
    FULL = 'FULL'
    LEFT_OUTER = 'LEFT OUTER'
    RIGHT_OUTER = 'RIGHT OUTER'
    FULL_OUTER = 'FULL OUTER'
    CROSS = 'CROSS'
    NATURAL = 'NATURAL'
    SELF = 'SELF'


class AggregateFunction(str, enum.Enum):
    SUM = 'SUM'
    COUNT = 'COUNT'
    AVG = 'AVG'
    MIN = 'MIN'
    MAX = 'MAX'
    STDDEV = 'STDDEV'
    VARIANCE = 'VARIANCE'
    DISTINCT = 'DISTINCT'
    TOTAL = 'TOTAL'
    GROUP_CONCAT = 'GROUP_CONCAT'


COMPARISON_OPERATORS = ('=', '!=', '>', '>=', '<', '<=')
JOIN_OPERATORS = ('=', '!=', '<>', '<', '<=', '>', '>=')
JOIN_LOGIC = ('AND', 'OR')


# ---------------------------------------------------------------------------
# WHERE conditions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ComparisonCondition:
    column: str
    operator: str = '='
    value: Any = None
    table: Optional[str] = None


@dataclass(frozen=True)
class LikeCondition:
    column: str
    pattern: Any = None
    table: Optional[str] = None


@dataclass(frozen=True)
class InCondition:
    column: str
    values: Tuple[Any, ...] = ()
    table: Optional[str] = None


@dataclass(frozen=True)
class NullCheckCondition:
    column: str
    negated: bool = False
    table: Optional[str] = None


Condition = Union[ComparisonCondition, LikeCondition, InCondition, NullCheckCondition]
CONDITION_TYPES = (ComparisonCondition, LikeCondition, InCondition, NullCheckCondition)


def parse_condition(raw):
    """Build a condition variant from a request dict, or None if unusable"""
    if not isinstance(raw, dict):
        return raw if isinstance(raw, CONDITION_TYPES) else None

    column = raw.get('column') or ''
    table = raw.get('table') or None
    operator = ' '.join(str(raw.get('operator') or '=').upper().split())
    value = raw.get('value')

    if operator == 'IN':
        values = value if isinstance(value, (list, tuple)) else [value]
        return InCondition(column, tuple(values), table)
    if operator == 'LIKE':
        return LikeCondition(column, value, table)
    if operator in ('IS NULL', 'IS NOT NULL'):
        return NullCheckCondition(column, operator == 'IS NOT NULL', table)
    if operator in COMPARISON_OPERATORS:
        return ComparisonCondition(column, operator, value, table)

    logging.debug(f"Dropping condition on '{column}' with unsupported operator '{operator}'")
    return None


# ---------------------------------------------------------------------------
# JOIN conditions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnRef:
    table: str
    column: str


@dataclass(frozen=True)
class ColumnPairCondition:
    left: ColumnRef
    right: ColumnRef
    operator: str = '='


@dataclass(frozen=True)
class RawExpression:
    expression: str


@dataclass(frozen=True)
class CompositeCondition:
    conditions: Tuple[Any, ...] = ()
    logic: str = 'AND'


JoinCondition = Union[ColumnPairCondition, RawExpression, CompositeCondition]
JOIN_CONDITION_TYPES = (ColumnPairCondition, RawExpression, CompositeCondition)


def _parse_column_ref(raw):
    if isinstance(raw, ColumnRef):
        return raw
    if isinstance(raw, dict):
        return ColumnRef(raw.get('table') or '', raw.get('column') or '')
    return None


def parse_join_condition(raw):
    """Build a (possibly nested) join condition from a request dict"""
    if not raw:
        return None
    if isinstance(raw, JOIN_CONDITION_TYPES):
        return raw
    if not isinstance(raw, dict):
        return None

    if raw.get('left') and raw.get('right'):
        left = _parse_column_ref(raw['left'])
        right = _parse_column_ref(raw['right'])
        if left and right:
            return ColumnPairCondition(left, right, str(raw.get('operator') or '=').strip())

    if raw.get('expression'):
        return RawExpression(str(raw['expression']))

    if isinstance(raw.get('conditions'), list):
        children = tuple(parse_join_condition(c) for c in raw['conditions'])
        return CompositeCondition(
            tuple(c for c in children if c is not None),
            str(raw.get('logic') or 'AND').strip().upper(),
        )

    return None


@dataclass(frozen=True)
class Join:
    table: str
    type: JoinType = JoinType.INNER
    on: Optional[Any] = None
    alias: Optional[str] = None


def _parse_join_type(raw_type):
    if isinstance(raw_type, JoinType):
        return raw_type
    name = ' '.join(str(raw_type or 'INNER').upper().split())
    try:
        return JoinType(name)
    except ValueError:
        logging.warning(f"Unknown join type '{raw_type}', using INNER")
        return JoinType.INNER


def parse_join(raw):
    """Build a Join from a request dict"""
    if isinstance(raw, Join):
        return raw
    if not isinstance(raw, dict) or not raw.get('table'):
        return None
    return Join(
        table=raw['table'],
        type=_parse_join_type(raw.get('type')),
        on=parse_join_condition(raw.get('on')),
        alias=raw.get('alias') or None,
    )


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Aggregation:
    fn: AggregateFunction
    column: str = '*'
    alias: Optional[str] = None

    @property
    def counts_rows(self):
        return self.fn is AggregateFunction.COUNT and self.column in ('*', 'COUNT(*)')


def parse_aggregation(raw):
    """Build an Aggregation from a request dict, or None if unusable"""
    if isinstance(raw, Aggregation):
        return raw
    if not isinstance(raw, dict):
        return None

    try:
        fn = AggregateFunction(str(raw.get('fn') or '').strip().upper())
    except ValueError:
        logging.debug(f"Dropping aggregation with unsupported function '{raw.get('fn')}'")
        return None

    column = raw.get('column')
    if not column:
        if fn is not AggregateFunction.COUNT:
            return None
        column = '*'

    return Aggregation(fn, str(column), raw.get('as') or raw.get('alias') or None)


# ---------------------------------------------------------------------------
# Whole query
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QuerySpec:
    table: Optional[str]
    columns: Tuple[str, ...] = ()
    where: Tuple[Any, ...] = ()
    joins: Tuple[Join, ...] = ()
    aggregations: Tuple[Aggregation, ...] = ()

    @classmethod
    def from_dict(cls, payload):
        """Parse an untrusted request body into a QuerySpec"""
        payload = payload or {}

        columns = payload.get('columns') or []
        if isinstance(columns, str):
            columns = [columns]

        where = [parse_condition(c) for c in payload.get('where') or []]
        joins = [parse_join(j) for j in payload.get('joins') or []]
        aggregations = [parse_aggregation(a) for a in payload.get('aggregations') or []]

        return cls(
            table=payload.get('table') or None,
            columns=tuple(str(c) for c in columns if c is not None and str(c) != ''),
            where=tuple(c for c in where if c is not None),
            joins=tuple(j for j in joins if j is not None),
            aggregations=tuple(a for a in aggregations if a is not None),
        )
