import csv
import json
import pytest
from utils import ExportUtils

RESULTS = {
    'insights': {
        'table_overview': {'people': {'row_count': 3, 'column_count': 4}},
        'recommendations': [{
            'type': 'DATA_QUALITY',
            'priority': 'HIGH',
            'table': 'people',
            'column': 'age',
            'issue': 'Low completeness rate',
            'description': 'Column age has only 50.0% completeness',
        }],
        'relationship_analysis': {'potential_relationships': []},
    },
    'normalization': {
        'constraint_violations': [{
            'table': 'people',
            'column': 'id',
            'row': 2,
            'type': 'PRIMARY_KEY_DUPLICATE',
            'message': 'Duplicate primary key value: 1',
        }],
        'analysis': {'suggestions': []},
    },
}


def test_json_export(tmp_path):
    path = ExportUtils(str(tmp_path)).export(RESULTS, 'JSON', 'demo')
    assert path.endswith('.json')
    with open(path, encoding='utf-8') as f:
        assert json.load(f) == RESULTS


def test_csv_export_has_one_row_per_finding(tmp_path):
    path = ExportUtils(str(tmp_path)).export(RESULTS, 'csv', 'demo')
    with open(path, newline='', encoding='utf-8') as f:
        rows = list(csv.DictReader(f))
    assert [r['analysis_type'] for r in rows] == ['recommendation', 'constraint_violation']
    assert rows[1]['category'] == 'PRIMARY_KEY_DUPLICATE'


def test_text_export(tmp_path):
    path = ExportUtils(str(tmp_path)).export(RESULTS, 'txt', 'demo')
    with open(path, encoding='utf-8') as f:
        report = f.read()
    assert 'DATA ANALYSIS REPORT' in report
    assert '[HIGH] people: Column age has only 50.0% completeness' in report


def test_unsupported_format(tmp_path):
    with pytest.raises(ValueError, match='Unsupported export format: pdf'):
        ExportUtils(str(tmp_path)).export(RESULTS, 'pdf', 'demo')
