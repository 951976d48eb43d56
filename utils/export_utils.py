import json
import os
import logging
from datetime import datetime
import pandas as pd
from models import make_json_serializable


class ExportUtils:
    """Utility class for exporting analysis results in various formats"""

    def __init__(self, export_dir="exports"):
        self.export_dir = export_dir
        os.makedirs(self.export_dir, exist_ok=True)

    def export(self, results, format_type, session_name):
        """Export analysis results in specified format"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{session_name}_{timestamp}"

        if format_type.lower() == 'json':
            return self._export_json(results, filename)
        elif format_type.lower() == 'csv':
            return self._export_csv(results, filename)
        elif format_type.lower() == 'txt':
            return self._export_text(results, filename)
        else:
            raise ValueError(f"Unsupported export format: {format_type}")

    def _export_json(self, results, filename):
        """Export results as JSON"""
        filepath = os.path.join(self.export_dir, f"{filename}.json")

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(make_json_serializable(results), f, indent=2, ensure_ascii=False)

        return filepath

    def _export_csv(self, results, filename):
        """Export results as CSV (one row per finding)"""
        filepath = os.path.join(self.export_dir, f"{filename}.csv")

        flattened_data = self._flatten_results_for_csv(results)
        logging.info(f"Exporting {len(flattened_data)} finding(s) to {filepath}")

        pd.DataFrame(flattened_data).to_csv(filepath, index=False, encoding='utf-8')

        return filepath

    def _export_text(self, results, filename):
        """Export results as plain text report"""
        filepath = os.path.join(self.export_dir, f"{filename}.txt")

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(self._generate_text_report(results, filename))

        return filepath

    def _flatten_results_for_csv(self, results):
        """Flatten recommendations, violations and relationships into rows"""
        flattened = []

        insights = results.get('insights', {})
        normalization = results.get('normalization', {})

        for rec in insights.get('recommendations', []):
            flattened.append({
                'analysis_type': 'recommendation',
                'category': rec.get('type', ''),
                'priority': rec.get('priority', ''),
                'table': rec.get('table', ''),
                'column': rec.get('column', ''),
                'issue': rec.get('issue', ''),
                'details': rec.get('description', '')
            })

        for violation in normalization.get('constraint_violations', []):
            flattened.append({
                'analysis_type': 'constraint_violation',
                'category': violation.get('type', ''),
                'table': violation.get('table', ''),
                'column': violation.get('column', ''),
                'row': violation.get('row', ''),
                'details': violation.get('message', '')
            })

        for suggestion in normalization.get('analysis', {}).get('suggestions', []):
            flattened.append({
                'analysis_type': 'normalization',
                'category': suggestion.get('level', ''),
                'issue': suggestion.get('issue', ''),
                'details': '; '.join(suggestion.get('recommendations', []))
            })

        relationships = insights.get('relationship_analysis', {})
        for rel in relationships.get('potential_relationships', []):
            flattened.append({
                'analysis_type': 'relationship',
                'category': rel.get('type', ''),
                'table': rel.get('from_table', ''),
                'column': rel.get('from_column', ''),
                'details': f"{rel.get('to_table', '')}.{rel.get('to_column', '')}"
            })

        return flattened

    def _generate_text_report(self, results, filename):
        """Generate plain text report"""
        report = f"""
DATA ANALYSIS REPORT
{'=' * 50}

Session: {filename}
Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

"""

        overview = results.get('insights', {}).get('table_overview', {})
        if overview:
            report += f"TABLES\n{'-' * 20}\n"
            report += f"{'Table':<30} {'Rows':<8} {'Columns':<8}\n"
            for table_name, info in overview.items():
                report += f"{table_name:<30} {info.get('row_count', 0):<8} {info.get('column_count', 0):<8}\n"
            report += "\n"

        recommendations = results.get('insights', {}).get('recommendations', [])
        if recommendations:
            report += f"RECOMMENDATIONS\n{'-' * 20}\n"
            for rec in recommendations:
                report += f"[{rec.get('priority', '')}] {rec.get('table', '')}: {rec.get('description', '')}\n"
            report += "\n"

        violations = results.get('normalization', {}).get('constraint_violations', [])
        if violations:
            report += f"CONSTRAINT VIOLATIONS\n{'-' * 20}\n"
            for violation in violations:
                report += f"{violation.get('type', '')}: {violation.get('message', '')}\n"

        return report
