import math
import re
from dataclasses import dataclass
from typing import Any, Optional

NUMERIC_TYPES = ('INTEGER', 'REAL', 'FLOAT', 'DOUBLE')
BOOLEAN_VALUES = (True, False, 'true', 'false', 1, 0)

_FK_SUFFIX = re.compile(r'_id$|id$', re.IGNORECASE)
_UNDERSCORE_ID_SUFFIX = re.compile(r'_id$', re.IGNORECASE)


@dataclass(frozen=True)
class Column:
    """A single column as read from the store's schema"""
    name: str
    type: str = ''
    primary_key: bool = False
    not_null: bool = False
    default_value: Optional[Any] = None

    @classmethod
    def from_dict(cls, raw):
        return cls(
            name=raw['name'],
            type=raw.get('type') or '',
            primary_key=bool(raw.get('primaryKey', raw.get('primary_key', False))),
            not_null=bool(raw.get('notNull', raw.get('not_null', False))),
            default_value=raw.get('defaultValue', raw.get('default_value')),
        )

    def to_dict(self):
        return {
            'name': self.name,
            'type': self.type,
            'primaryKey': self.primary_key,
            'notNull': self.not_null,
            'defaultValue': self.default_value,
        }

    @property
    def base_type(self):
        """Declared type without size arguments, e.g. VARCHAR(255) -> VARCHAR"""
        return (self.type or '').split('(')[0].strip().upper()

    @property
    def is_numeric(self):
        return self.base_type in NUMERIC_TYPES

    @property
    def is_text(self):
        return 'text' in (self.type or '').lower()


def schema_from_dict(raw_schema):
    """Build a schema (table -> [Column]) from a JSON-style mapping"""
    return {
        table: [c if isinstance(c, Column) else Column.from_dict(c) for c in columns]
        for table, columns in (raw_schema or {}).items()
    }


def schema_to_dict(schema):
    return {table: [c.to_dict() for c in columns] for table, columns in schema.items()}


def is_blank(value):
    """None, empty string and NaN count as missing"""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ''
    if isinstance(value, float):
        return math.isnan(value)
    return False


def is_null(value):
    return value is None or (isinstance(value, float) and math.isnan(value))


def to_number(value):
    """Coerce a cell to a float, or None when it is not numeric"""
    if is_blank(value):
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def numeric_values(rows, column_name):
    """Non-blank values of a column that coerce to numbers, in row order"""
    values = (to_number(row.get(column_name)) for row in rows)
    return [v for v in values if v is not None]


def is_valid_type(value, expected_type):
    """Permissive check that a value fits a declared column type"""
    if value is None:
        return True

    base_type = (expected_type or '').split('(')[0].strip().upper()

    if base_type in ('INTEGER', 'INT'):
        number = to_number(value)
        return number is not None and math.isfinite(number) and number == int(number)
    if base_type in ('REAL', 'FLOAT', 'DOUBLE'):
        return to_number(value) is not None
    if base_type in ('TEXT', 'VARCHAR', 'STRING'):
        return isinstance(value, str)
    if base_type == 'BOOLEAN':
        return any(value is v or (type(value) is type(v) and value == v) for v in BOOLEAN_VALUES)

    # Unknown types are accepted
    return True


def referenced_table(column_name, schema, underscore_only=False):
    """Table named by a *_id / *id column, if that table is in the schema"""
    lowered = column_name.lower()
    if underscore_only:
        if not lowered.endswith('_id'):
            return None
        prefix = _UNDERSCORE_ID_SUFFIX.sub('', column_name)
    else:
        if not lowered.endswith('id'):
            return None
        prefix = _FK_SUFFIX.sub('', column_name)

    return prefix if prefix and prefix in schema else None
