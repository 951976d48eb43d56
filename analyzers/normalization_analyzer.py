import logging
from compilers.identifiers import sanitize_identifier
from .schema import referenced_table

PARTIAL_DEPENDENCY_HINTS = ('name', 'description')
TRANSITIVE_DEPENDENCY_HINTS = ('city', 'state')


class NormalizationAnalyzer:
    """Heuristic 1NF/2NF/3NF checks over a schema and sampled rows"""

    def analyze(self, schema, data):
        """Run every normal-form check and collect suggestions"""
        data = data or {}
        analysis = {
            'first_normal_form': self.analyze_first_normal_form(schema, data),
            'second_normal_form': self.analyze_second_normal_form(schema),
            'third_normal_form': self.analyze_third_normal_form(schema),
            'foreign_keys': detect_foreign_keys(schema),
            'suggestions': []
        }

        if not analysis['first_normal_form']['is_valid']:
            analysis['suggestions'].append({
                'level': '1NF',
                'issue': 'First Normal Form violations detected',
                'description': 'Table contains repeating groups or non-atomic values',
                'recommendations': analysis['first_normal_form']['recommendations']
            })

        if not analysis['second_normal_form']['is_valid']:
            analysis['suggestions'].append({
                'level': '2NF',
                'issue': 'Second Normal Form violations detected',
                'description': 'Table has partial dependencies on composite primary key',
                'recommendations': analysis['second_normal_form']['recommendations']
            })

        if not analysis['third_normal_form']['is_valid']:
            analysis['suggestions'].append({
                'level': '3NF',
                'issue': 'Third Normal Form violations detected',
                'description': 'Table has transitive dependencies',
                'recommendations': analysis['third_normal_form']['recommendations']
            })

        logging.info(f"Normalization analysis: {len(analysis['suggestions'])} normal form(s) violated")

        return analysis

    def analyze_first_normal_form(self, schema, data):
        """Flag string cells holding comma-separated (non-atomic) values"""
        violations = []
        recommendations = []
        table_violations = {}

        for table_name, columns in schema.items():
            rows = data.get(table_name) or []

            for column in columns:
                for row_index, row in enumerate(rows):
                    value = row.get(column.name)
                    if isinstance(value, str) and ',' in value:
                        violation = {
                            'table': table_name,
                            'column': column.name,
                            'row': row_index,
                            'issue': 'Non-atomic value detected',
                            'value': value
                        }
                        violations.append(violation)
                        self._record(table_violations, table_name, violation)

                        recommendation = (f"Split column '{column.name}' in table "
                                          f"'{table_name}' into separate atomic values")
                        if recommendation not in recommendations:
                            recommendations.append(recommendation)

        return self._result(violations, recommendations, table_violations)

    def analyze_second_normal_form(self, schema):
        """Flag descriptive columns in tables keyed by a composite primary key"""
        violations = []
        table_violations = {}

        for table_name, columns in schema.items():
            primary_keys = [c for c in columns if c.primary_key]
            if len(primary_keys) <= 1:
                continue

            for column in columns:
                if column.primary_key:
                    continue
                name = column.name.lower()
                if any(hint in name for hint in PARTIAL_DEPENDENCY_HINTS):
                    violation = {
                        'table': table_name,
                        'column': column.name,
                        'issue': 'Potential partial dependency on composite key',
                        'description': 'Column may depend on only part of the composite key'
                    }
                    violations.append(violation)
                    self._record(table_violations, table_name, violation)

        recommendations = (['Consider splitting table with composite key into separate tables']
                           if violations else [])
        return self._result(violations, recommendations, table_violations)

    def analyze_third_normal_form(self, schema):
        """Flag location-like columns that usually depend on another non-key column"""
        violations = []
        table_violations = {}

        for table_name, columns in schema.items():
            for column in columns:
                if column.primary_key:
                    continue
                name = column.name.lower()
                if any(hint in name for hint in TRANSITIVE_DEPENDENCY_HINTS):
                    violation = {
                        'table': table_name,
                        'column': column.name,
                        'issue': 'Potential transitive dependency',
                        'description': 'Column may depend on another non-key column'
                    }
                    violations.append(violation)
                    self._record(table_violations, table_name, violation)

        recommendations = (['Consider extracting transitive dependencies into separate tables']
                           if violations else [])
        return self._result(violations, recommendations, table_violations)

    def _record(self, table_violations, table_name, violation):
        entry = table_violations.setdefault(table_name, {'count': 0, 'issues': []})
        entry['count'] += 1
        entry['issues'].append(violation)

    def _result(self, violations, recommendations, table_violations):
        return {
            'is_valid': len(violations) == 0,
            'violations': violations,
            'recommendations': recommendations,
            'table_violations': table_violations
        }


def detect_foreign_keys(schema):
    """Columns named *_id / *id whose prefix is the name of a table"""
    foreign_keys = []

    for table_name, columns in schema.items():
        for column in columns:
            target = referenced_table(column.name, schema)
            if target:
                foreign_keys.append({
                    'table': table_name,
                    'column': column.name,
                    'referenced_table': target,
                    'referenced_column': 'id',
                    'confidence': 'high'
                })

    return foreign_keys


def generate_normalization_sql(analysis):
    """Illustrative (never executed) SQL for each violated normal form"""
    sql_statements = []
    levels = {s['level'] for s in analysis.get('suggestions', [])}

    if '1NF' in levels:
        seen = set()
        for violation in analysis['first_normal_form']['violations']:
            table = sanitize_identifier(violation['table'])
            column = sanitize_identifier(violation['column'])
            if (table, column) in seen:
                continue
            seen.add((table, column))

            sql_statements.append({
                'type': '1NF',
                'description': f"Create normalized table for {table}.{column}",
                'sql': (f"-- Create new table for normalized {column} values\n"
                        f"CREATE TABLE {table}_{column}_normalized (\n"
                        f"  id INTEGER PRIMARY KEY,\n"
                        f"  {table}_id INTEGER,\n"
                        f"  {column}_value TEXT,\n"
                        f"  FOREIGN KEY ({table}_id) REFERENCES {table}(id)\n"
                        f");")
            })

    if '2NF' in levels:
        tables = ', '.join(sanitize_identifier(t) for t in analysis['second_normal_form']['table_violations'])
        sql_statements.append({
            'type': '2NF',
            'description': 'Split table to eliminate partial dependencies',
            'sql': (f"-- Create separate tables to eliminate partial dependencies in: {tables}\n"
                    "-- (Specific SQL depends on the actual table structure)")
        })

    if '3NF' in levels:
        tables = ', '.join(sanitize_identifier(t) for t in analysis['third_normal_form']['table_violations'])
        sql_statements.append({
            'type': '3NF',
            'description': 'Extract transitive dependencies',
            'sql': (f"-- Create separate tables for transitive dependencies in: {tables}\n"
                    "-- (Specific SQL depends on the actual table structure)")
        })

    return sql_statements
