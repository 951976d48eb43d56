import logging
import numpy as np
from scipy import stats
from .schema import to_number, numeric_values
from .statistics_profiler import detect_outliers

CORRELATION_THRESHOLD = 0.7
STRONG_CORRELATION_THRESHOLD = 0.9
TIME_SERIES_HINTS = ('date', 'time')


class PatternAnalyzer:
    """Analyzer for duplicate rows, numeric anomalies, time columns and correlations"""

    def analyze(self, rows, columns):
        """Perform pattern analysis on one table's sampled rows"""
        rows = rows or []
        results = {
            'duplicates': self._detect_duplicate_rows(rows),
            'anomalies': self._detect_anomalies(rows, columns),
            'trends': self._detect_trends(columns),
            'correlations': self._analyze_correlations(rows, columns)
        }

        return results

    def _detect_duplicate_rows(self, rows):
        """Rows structurally equal (key order included) to an earlier row"""
        seen = set()
        # Rows holding unhashable values are compared one by one
        seen_unhashable = []
        duplicates = []

        for index, row in enumerate(rows):
            row_key = tuple(row.items())
            try:
                is_duplicate = row_key in seen
            except TypeError:
                is_duplicate = row_key in seen_unhashable
                if not is_duplicate:
                    seen_unhashable.append(row_key)
            else:
                if not is_duplicate:
                    seen.add(row_key)

            if is_duplicate:
                duplicates.append({'index': index, 'row': row})

        return duplicates

    def _detect_anomalies(self, rows, columns):
        """Numeric outliers surfaced per column"""
        anomalies = []

        for column in columns:
            if not column.is_numeric:
                continue

            for outlier in detect_outliers(numeric_values(rows, column.name)):
                anomalies.append({
                    'column': column.name,
                    'value': outlier,
                    'type': 'NUMERICAL_OUTLIER'
                })

        return anomalies

    def _detect_trends(self, columns):
        """Flag date/time-named columns as time-series candidates"""
        trends = []

        for column in columns:
            name = column.name.lower()
            if any(hint in name for hint in TIME_SERIES_HINTS):
                trends.append({
                    'column': column.name,
                    'type': 'TIME_SERIES_DETECTED',
                    'suggestion': 'Consider time-series analysis'
                })

        return trends

    def _analyze_correlations(self, rows, columns):
        """Pearson correlation for every pair of numeric columns"""
        correlations = []
        numeric_columns = [c for c in columns if c.is_numeric]

        for i, col1 in enumerate(numeric_columns):
            for col2 in numeric_columns[i + 1:]:
                r = self._pearson(rows, col1.name, col2.name)
                if r is None or abs(r) <= CORRELATION_THRESHOLD:
                    continue

                correlations.append({
                    'column1': col1.name,
                    'column2': col2.name,
                    'correlation': r,
                    'strength': 'STRONG' if abs(r) > STRONG_CORRELATION_THRESHOLD else 'MODERATE'
                })

        return correlations

    def _pearson(self, rows, name1, name2):
        """Correlation over rows where both columns are numeric; None when undefined"""
        pairs = [(to_number(row.get(name1)), to_number(row.get(name2))) for row in rows]
        pairs = [(x, y) for x, y in pairs if x is not None and y is not None]

        if len(pairs) < 2:
            return None

        x = np.array([p[0] for p in pairs])
        y = np.array([p[1] for p in pairs])

        # Correlation is undefined for a constant column
        if np.ptp(x) == 0 or np.ptp(y) == 0:
            return None

        try:
            r, _ = stats.pearsonr(x, y)
        except ValueError as e:
            logging.warning(f"Correlation failed for {name1} vs {name2}: {str(e)}")
            return None

        return float(r)


def detect_data_patterns(schema, data):
    """Pattern analysis for every table in the schema"""
    analyzer = PatternAnalyzer()
    data = data or {}
    return {table_name: analyzer.analyze(data.get(table_name), columns)
            for table_name, columns in schema.items()}
