from datetime import date
import pytest
from analyzers.pattern_analyzer import PatternAnalyzer, detect_data_patterns
from analyzers.schema import Column


def test_duplicates_keep_first_occurrence():
    rows = [{'a': 1, 'b': 2}, {'a': 1, 'b': 2}, {'a': 1, 'b': 3}, {'a': 1, 'b': 2}]
    duplicates = PatternAnalyzer().analyze(rows, [])['duplicates']
    assert [d['index'] for d in duplicates] == [1, 3]
    assert duplicates[0]['row'] == {'a': 1, 'b': 2}


def test_duplicate_keys_depend_on_key_order():
    rows = [{'a': 1, 'b': 2}, {'b': 2, 'a': 1}]
    assert PatternAnalyzer().analyze(rows, [])['duplicates'] == []


def test_duplicates_need_equal_values_not_equal_text():
    rows = [{'d': date(2024, 1, 2)}, {'d': '2024-01-02'}]
    assert PatternAnalyzer().analyze(rows, [])['duplicates'] == []


def test_duplicates_use_value_equality():
    rows = [{'n': 1, 'tags': ['a']}, {'n': 1.0, 'tags': ['a']}, {'n': 1, 'tags': ['b']}]
    assert [d['index'] for d in PatternAnalyzer().analyze(rows, [])['duplicates']] == [1]


def test_anomalies_come_from_numeric_outliers():
    rows = [{'v': v, 'label': 'x'} for v in [1, 2, 3, 4, 5, 100]]
    columns = [Column('v', 'REAL'), Column('label', 'TEXT')]
    assert PatternAnalyzer().analyze(rows, columns)['anomalies'] == [
        {'column': 'v', 'value': 100.0, 'type': 'NUMERICAL_OUTLIER'}
    ]


def test_trends_from_column_names():
    columns = [Column('created_date', 'TEXT'), Column('UpdatedTime', 'TEXT'), Column('name', 'TEXT')]
    trends = PatternAnalyzer().analyze([], columns)['trends']
    assert [t['column'] for t in trends] == ['created_date', 'UpdatedTime']
    assert all(t['type'] == 'TIME_SERIES_DETECTED' for t in trends)


def test_strong_correlation():
    rows = [{'x': x, 'y': 2 * x + 1} for x in range(1, 6)]
    columns = [Column('x', 'INTEGER'), Column('y', 'INTEGER')]
    correlations = PatternAnalyzer().analyze(rows, columns)['correlations']
    assert len(correlations) == 1
    assert correlations[0]['column1'] == 'x'
    assert correlations[0]['column2'] == 'y'
    assert correlations[0]['correlation'] == pytest.approx(1.0)
    assert correlations[0]['strength'] == 'STRONG'


def test_correlation_uses_rows_where_both_values_exist():
    rows = [{'x': 1, 'y': 2}, {'x': 2, 'y': 4}, {'x': 3, 'y': None}, {'x': None, 'y': 100}, {'x': 4, 'y': 8}]
    columns = [Column('x', 'REAL'), Column('y', 'REAL')]
    correlations = PatternAnalyzer().analyze(rows, columns)['correlations']
    assert correlations[0]['correlation'] == pytest.approx(1.0)


def test_no_correlation_for_constant_or_short_columns():
    columns = [Column('x', 'REAL'), Column('y', 'REAL')]
    constant = [{'x': x, 'y': 5} for x in range(5)]
    assert PatternAnalyzer().analyze(constant, columns)['correlations'] == []
    assert PatternAnalyzer().analyze([{'x': 1, 'y': 2}], columns)['correlations'] == []


def test_weak_correlation_is_not_reported():
    rows = [{'x': x, 'y': y} for x, y in [(1, 3), (2, 1), (3, 4), (4, 1), (5, 3)]]
    columns = [Column('x', 'REAL'), Column('y', 'REAL')]
    assert PatternAnalyzer().analyze(rows, columns)['correlations'] == []


def test_patterns_for_every_table(shop_schema, shop_data):
    patterns = detect_data_patterns(shop_schema, shop_data)
    assert set(patterns) == {'customers', 'orders'}
    assert patterns['customers']['duplicates'] == []

    missing = detect_data_patterns(shop_schema, {})
    assert missing['orders'] == {'duplicates': [], 'anomalies': [], 'trends': [], 'correlations': []}


def test_two_identical_rows_yield_one_duplicate():
    rows = [{'id': 1, 'name': 'Ann'}, {'id': 1, 'name': 'Ann'}]
    assert len(PatternAnalyzer().analyze(rows, [])['duplicates']) == 1
