import logging
from .normalization_analyzer import detect_foreign_keys
from .schema import is_blank, is_null, referenced_table


class RelationshipAnalyzer:
    """Analyzer for foreign-key candidates, cardinality and referential integrity between tables"""

    def analyze_relationships(self, schema, data):
        """Analyze relationships between the sampled tables"""
        data = data or {}
        results = {
            'foreign_keys': detect_foreign_keys(schema),
            'potential_relationships': self._detect_potential_relationships(schema),
            'cardinality': self._analyze_cardinality(schema, data),
            'referential_integrity': self._check_referential_integrity(schema, data)
        }

        return results

    def _detect_potential_relationships(self, schema):
        """*_id columns whose prefix names another table"""
        relationships = []

        for table_name, columns in schema.items():
            for column in columns:
                target = referenced_table(column.name, schema, underscore_only=True)
                if target:
                    relationships.append({
                        'from_table': table_name,
                        'from_column': column.name,
                        'to_table': target,
                        'to_column': 'id',
                        'type': 'POTENTIAL_FOREIGN_KEY',
                        'confidence': 'HIGH'
                    })

        return relationships

    def _analyze_cardinality(self, schema, data):
        """Distinct/total ratio of non-null values per column"""
        cardinality = {}

        for table_name, columns in schema.items():
            rows = data.get(table_name) or []
            table_cardinality = {
                'row_count': len(rows),
                'estimated_cardinality': len(rows),
                'unique_values': {}
            }

            for column in columns:
                values = [row.get(column.name) for row in rows]
                values = [v for v in values if not is_null(v)]
                unique_count = len(set(values))

                table_cardinality['unique_values'][column.name] = {
                    'total': len(values),
                    'unique': unique_count,
                    'cardinality': unique_count / len(values) if values else 0
                }

            cardinality[table_name] = table_cardinality

        return cardinality

    def _check_referential_integrity(self, schema, data):
        """Find *_id values missing from the referenced table's sampled ids"""
        integrity = {}

        for table_name, columns in schema.items():
            rows = data.get(table_name) or []
            integrity[table_name] = {
                'orphaned_records': [],
                'referential_issues': []
            }

            for column in columns:
                target = referenced_table(column.name, schema, underscore_only=True)
                if not target:
                    continue

                referenced_ids = {row.get('id') for row in data.get(target) or []}

                orphan_count = 0
                for index, row in enumerate(rows):
                    value = row.get(column.name)
                    if not is_blank(value) and value not in referenced_ids:
                        integrity[table_name]['orphaned_records'].append({
                            'row': index,
                            'column': column.name,
                            'value': value,
                            'referenced_table': target
                        })
                        orphan_count += 1

                if orphan_count:
                    integrity[table_name]['referential_issues'].append({
                        'column': column.name,
                        'referenced_table': target,
                        'orphan_count': orphan_count,
                        'issue': f"{orphan_count} value(s) in {table_name}.{column.name} "
                                 f"have no matching id in {target}"
                    })
                    logging.info(f"Found {orphan_count} orphaned references from {table_name}.{column.name}")

        return integrity
