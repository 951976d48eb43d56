import numpy as np
import pandas as pd
from .schema import is_blank, is_valid_type, numeric_values

MIN_OUTLIER_SAMPLE = 4
LENGTH_VARIANCE_THRESHOLD = 100


def calculate_quartiles(values):
    """Quartiles by index truncation on the sorted values (no interpolation)"""
    ordered = sorted(values)
    n = len(ordered)
    return {
        'q1': ordered[int(n * 0.25)],
        'q2': ordered[int(n * 0.5)],
        'q3': ordered[int(n * 0.75)]
    }


def detect_outliers(values):
    """Values outside [Q1 - 1.5*IQR, Q3 + 1.5*IQR], in their original order"""
    if len(values) < MIN_OUTLIER_SAMPLE:
        return []

    quartiles = calculate_quartiles(values)
    iqr = quartiles['q3'] - quartiles['q1']
    lower_bound = quartiles['q1'] - 1.5 * iqr
    upper_bound = quartiles['q3'] + 1.5 * iqr

    return [v for v in values if v < lower_bound or v > upper_bound]


def calculate_length_stats(values):
    """Mean/min/max/variance of string lengths, rounded to 2 places"""
    if not values:
        return {'average': 0, 'min': 0, 'max': 0, 'variance': 0}

    lengths = np.array([len(str(v)) for v in values])
    return {
        'average': round(float(lengths.mean()), 2),
        'min': int(lengths.min()),
        'max': int(lengths.max()),
        'variance': round(float(lengths.var()), 2)
    }


def describe_numeric(values):
    """Distribution statistics for a non-empty list of numbers"""
    data = np.array(values, dtype=float)

    return {
        'count': len(values),
        'mean': float(data.mean()),
        'median': float(np.median(data)),
        'mode': pd.Series(values).mode().tolist(),
        'min': float(data.min()),
        'max': float(data.max()),
        'range': float(data.max() - data.min()),
        'standard_deviation': float(data.std()),
        'variance': float(data.var()),
        'quartiles': calculate_quartiles(values),
        'outliers': detect_outliers(values)
    }


def analyze_data_quality(schema, data):
    """Per-column completeness, uniqueness, text consistency and type validity"""
    quality = {}
    data = data or {}

    for table_name, columns in schema.items():
        rows = data.get(table_name) or []
        metrics = {
            'completeness': {},
            'uniqueness': {},
            'consistency': {},
            'validity': {}
        }

        for column in columns:
            values = [row.get(column.name) for row in rows]
            non_null = [v for v in values if not is_blank(v)]
            null_count = len(values) - len(non_null)

            # An empty sample has nothing missing
            metrics['completeness'][column.name] = {
                'total_rows': len(values),
                'non_null_rows': len(non_null),
                'completeness_rate': (len(non_null) / len(values) * 100) if values else 100.0,
                'null_count': null_count
            }

            unique_count = len(set(non_null))
            metrics['uniqueness'][column.name] = {
                'unique_count': unique_count,
                'total_non_null_count': len(non_null),
                'uniqueness_rate': (unique_count / len(non_null) * 100) if non_null else 0.0,
                'is_unique': unique_count == len(non_null) and len(non_null) > 0
            }

            if column.is_text:
                length_stats = calculate_length_stats([v for v in non_null if isinstance(v, str)])
                metrics['consistency'][column.name] = {
                    'average_length': length_stats['average'],
                    'min_length': length_stats['min'],
                    'max_length': length_stats['max'],
                    'length_variance': length_stats['variance'],
                    'has_inconsistent_length': length_stats['variance'] > LENGTH_VARIANCE_THRESHOLD
                }

            valid_count = sum(1 for v in non_null if is_valid_type(v, column.type))
            metrics['validity'][column.name] = {
                'valid_type_count': valid_count,
                'invalid_type_count': len(non_null) - valid_count,
                'validity_rate': (valid_count / len(non_null) * 100) if non_null else 0.0
            }

        quality[table_name] = metrics

    return quality


def perform_statistical_analysis(schema, data):
    """Distribution statistics for every numeric column with at least one value"""
    statistics = {}
    data = data or {}

    for table_name, columns in schema.items():
        rows = data.get(table_name) or []
        statistics[table_name] = {}

        for column in columns:
            if not column.is_numeric:
                continue
            values = numeric_values(rows, column.name)
            if values:
                statistics[table_name][column.name] = describe_numeric(values)

    return statistics


def estimate_table_size(rows, columns):
    """Rough byte size from the average value length of the first rows"""
    sample = rows[:10]
    avg_row_size = 0

    for column in columns:
        lengths = [len(str(row.get(column.name))) if not is_blank(row.get(column.name)) else 0
                   for row in sample]
        avg_length = sum(lengths) / len(lengths) if lengths else 0
        avg_row_size += avg_length or 10

    estimated_bytes = len(rows) * avg_row_size
    return {
        'estimated_bytes': estimated_bytes,
        'estimated_mb': estimated_bytes / (1024 * 1024)
    }


def generate_table_overview(schema, data):
    """Row/column counts, key counts and type mix per table"""
    overview = {}
    data = data or {}

    for table_name, columns in schema.items():
        rows = data.get(table_name) or []
        types = [(c.type or '').lower() for c in columns]

        overview[table_name] = {
            'row_count': len(rows),
            'column_count': len(columns),
            'primary_keys': sum(1 for c in columns if c.primary_key),
            'foreign_keys': sum(1 for c in columns if c.name.lower().endswith('_id')),
            'nullable_columns': sum(1 for c in columns if not c.not_null),
            'data_types': {
                'text': sum(1 for t in types if 'text' in t),
                'numeric': sum(1 for c in columns if c.is_numeric),
                'boolean': sum(1 for t in types if 'bool' in t),
                'date': sum(1 for t in types if 'date' in t)
            },
            'size_estimate': estimate_table_size(rows, columns)
        }

    return overview
