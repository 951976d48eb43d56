from compilers.identifiers import sanitize_identifier
from .schema import is_blank, is_valid_type


def validate_constraints(schema, data):
    """Check sampled rows against primary-key, NOT NULL and declared-type constraints"""
    violations = []
    data = data or {}

    for table_name, columns in schema.items():
        rows = data.get(table_name) or []

        # Primary key (first key column only)
        primary_keys = [c for c in columns if c.primary_key]
        if primary_keys:
            pk_column = primary_keys[0].name
            seen = set()

            for row_index, row in enumerate(rows):
                pk_value = row.get(pk_column)
                if is_blank(pk_value):
                    violations.append({
                        'table': table_name,
                        'column': pk_column,
                        'row': row_index,
                        'type': 'PRIMARY_KEY_NULL',
                        'message': 'Primary key cannot be null or empty'
                    })
                elif pk_value in seen:
                    violations.append({
                        'table': table_name,
                        'column': pk_column,
                        'row': row_index,
                        'type': 'PRIMARY_KEY_DUPLICATE',
                        'message': f"Duplicate primary key value: {pk_value}"
                    })
                else:
                    seen.add(pk_value)

        # NOT NULL
        for column in columns:
            if not column.not_null:
                continue
            for row_index, row in enumerate(rows):
                if is_blank(row.get(column.name)):
                    violations.append({
                        'table': table_name,
                        'column': column.name,
                        'row': row_index,
                        'type': 'NOT_NULL_VIOLATION',
                        'message': 'NOT NULL constraint violated'
                    })

        # Declared types
        for column in columns:
            for row_index, row in enumerate(rows):
                value = row.get(column.name)
                if is_blank(value) or is_valid_type(value, column.type):
                    continue
                violations.append({
                    'table': table_name,
                    'column': column.name,
                    'row': row_index,
                    'type': 'TYPE_MISMATCH',
                    'message': f"Value '{value}' does not match expected type {column.type}"
                })

    return violations


def generate_constraint_sql(violations):
    """Illustrative (never executed) SQL describing how each violation type could be fixed"""
    by_type = {}
    for violation in violations:
        by_type.setdefault(violation['type'], []).append(violation)

    sql_statements = []

    for violation_type, type_violations in by_type.items():
        if violation_type == 'PRIMARY_KEY_DUPLICATE':
            lines = [f"-- Row {v['row']}: {_column_sql(v)} = {v['message']}" for v in type_violations]
            sql_statements.append({
                'type': 'CONSTRAINT',
                'description': 'Fix duplicate primary key values',
                'sql': '\n'.join(['-- Remove duplicate primary key values',
                                  '-- You may need to manually resolve these conflicts'] + lines)
            })

        elif violation_type == 'NOT_NULL_VIOLATION':
            lines = []
            for v in type_violations:
                table = sanitize_identifier(v['table'])
                column = sanitize_identifier(v['column'])
                statement = f"UPDATE {table} SET {column} = 'default_value' WHERE {column} IS NULL;"
                if statement not in lines:
                    lines.append(statement)
            sql_statements.append({
                'type': 'CONSTRAINT',
                'description': 'Fix NOT NULL constraint violations',
                'sql': '\n'.join(['-- Update NULL values to satisfy NOT NULL constraints'] + lines)
            })

        elif violation_type == 'TYPE_MISMATCH':
            lines = [f"-- Row {v['row']}: Convert {_column_sql(v)} value" for v in type_violations]
            sql_statements.append({
                'type': 'CONSTRAINT',
                'description': 'Fix data type mismatches',
                'sql': '\n'.join(['-- Convert values to correct data types'] + lines)
            })

    return sql_statements


def _column_sql(violation):
    return f"{sanitize_identifier(violation['table'])}.{sanitize_identifier(violation['column'])}"
