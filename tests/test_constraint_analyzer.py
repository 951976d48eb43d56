from collections import Counter
import pytest
from analyzers.constraint_analyzer import generate_constraint_sql, validate_constraints
from analyzers.schema import Column


@pytest.fixture
def schema():
    return {
        'users': [
            Column('id', 'INTEGER', primary_key=True),
            Column('email', 'TEXT', not_null=True),
            Column('age', 'INTEGER'),
        ]
    }


@pytest.fixture
def rows():
    return [
        {'id': 1, 'email': 'ann@example.com', 'age': 30},
        {'id': 1, 'email': '', 'age': 'old'},
        {'id': None, 'email': None, 'age': 2.5},
    ]


def test_violation_types(schema, rows):
    violations = validate_constraints(schema, {'users': rows})
    assert Counter(v['type'] for v in violations) == {
        'PRIMARY_KEY_DUPLICATE': 1,
        'PRIMARY_KEY_NULL': 1,
        'NOT_NULL_VIOLATION': 2,
        'TYPE_MISMATCH': 2,
    }


def test_primary_key_checks_come_first(schema, rows):
    violations = validate_constraints(schema, {'users': rows})
    assert violations[0] == {
        'table': 'users',
        'column': 'id',
        'row': 1,
        'type': 'PRIMARY_KEY_DUPLICATE',
        'message': 'Duplicate primary key value: 1',
    }
    assert violations[1]['type'] == 'PRIMARY_KEY_NULL'
    assert violations[1]['row'] == 2


def test_type_mismatches_name_the_value(schema, rows):
    mismatches = [v for v in validate_constraints(schema, {'users': rows}) if v['type'] == 'TYPE_MISMATCH']
    assert [(v['column'], v['row']) for v in mismatches] == [('age', 1), ('age', 2)]
    assert mismatches[0]['message'] == "Value 'old' does not match expected type INTEGER"


def test_clean_rows_have_no_violations(schema):
    assert validate_constraints(schema, {'users': [{'id': 1, 'email': 'a@b.c', 'age': 20}]}) == []
    assert validate_constraints(schema, {}) == []


def test_constraint_sql(schema, rows):
    statements = generate_constraint_sql(validate_constraints(schema, {'users': rows}))
    assert [s['description'] for s in statements] == [
        'Fix duplicate primary key values',
        'Fix NOT NULL constraint violations',
        'Fix data type mismatches',
    ]
    assert all(s['type'] == 'CONSTRAINT' for s in statements)

    update = "UPDATE users SET email = 'default_value' WHERE email IS NULL;"
    assert statements[1]['sql'].count(update) == 1
    assert '-- Row 1: Convert users.age value' in statements[2]['sql']


def test_no_violations_no_sql():
    assert generate_constraint_sql([]) == []
