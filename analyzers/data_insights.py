import logging
from .constraint_analyzer import generate_constraint_sql, validate_constraints
from .normalization_analyzer import NormalizationAnalyzer, generate_normalization_sql
from .pattern_analyzer import detect_data_patterns
from .relationship_analyzer import RelationshipAnalyzer
from .schema import schema_from_dict
from .statistics_profiler import (
    analyze_data_quality,
    generate_table_overview,
    perform_statistical_analysis,
)

COMPLETENESS_THRESHOLD = 80
UNIQUENESS_THRESHOLD = 95
UNIQUENESS_MIN_SAMPLE = 10


class DataInsights:
    """Utility class for turning analyzer findings into prioritized recommendations"""

    @staticmethod
    def generate_recommendations(data_quality, statistical_analysis, pattern_detection):
        """Flatten quality, statistical and pattern findings into recommendations"""
        recommendations = []

        # Data quality
        for table_name, quality in data_quality.items():
            for column_name, metrics in quality['completeness'].items():
                if metrics['completeness_rate'] < COMPLETENESS_THRESHOLD:
                    recommendations.append({
                        'type': 'DATA_QUALITY',
                        'priority': 'HIGH',
                        'table': table_name,
                        'column': column_name,
                        'issue': 'Low completeness rate',
                        'description': f"Column {column_name} has only "
                                       f"{metrics['completeness_rate']:.1f}% completeness",
                        'suggestion': 'Consider data cleaning or investigating missing values'
                    })

            for column_name, metrics in quality['uniqueness'].items():
                if (metrics['uniqueness_rate'] < UNIQUENESS_THRESHOLD
                        and metrics['total_non_null_count'] > UNIQUENESS_MIN_SAMPLE):
                    recommendations.append({
                        'type': 'DATA_QUALITY',
                        'priority': 'MEDIUM',
                        'table': table_name,
                        'column': column_name,
                        'issue': 'Low uniqueness rate',
                        'description': f"Column {column_name} has "
                                       f"{metrics['uniqueness_rate']:.1f}% uniqueness",
                        'suggestion': 'Consider if this should be a unique constraint '
                                      'or if duplicates are expected'
                    })

        # Statistical
        for table_name, columns in statistical_analysis.items():
            for column_name, column_stats in columns.items():
                if column_stats['outliers']:
                    recommendations.append({
                        'type': 'STATISTICAL',
                        'priority': 'MEDIUM',
                        'table': table_name,
                        'column': column_name,
                        'issue': 'Outliers detected',
                        'description': f"Found {len(column_stats['outliers'])} outliers in {column_name}",
                        'suggestion': 'Review outliers for data quality issues or business logic'
                    })

        # Patterns
        for table_name, patterns in pattern_detection.items():
            if patterns['duplicates']:
                recommendations.append({
                    'type': 'PATTERN',
                    'priority': 'HIGH',
                    'table': table_name,
                    'issue': 'Duplicate rows detected',
                    'description': f"Found {len(patterns['duplicates'])} duplicate rows",
                    'suggestion': 'Consider adding unique constraints or removing duplicates'
                })

        return recommendations


def _as_schema(schema):
    return schema_from_dict(schema)


def extract_data_insights(schema, data):
    """Overview, quality, statistics, patterns, relationships and recommendations"""
    schema = _as_schema(schema)
    data = data or {}

    data_quality = analyze_data_quality(schema, data)
    statistical_analysis = perform_statistical_analysis(schema, data)
    pattern_detection = detect_data_patterns(schema, data)

    insights = {
        'table_overview': generate_table_overview(schema, data),
        'data_quality': data_quality,
        'statistical_analysis': statistical_analysis,
        'pattern_detection': pattern_detection,
        'relationship_analysis': RelationshipAnalyzer().analyze_relationships(schema, data),
        'recommendations': DataInsights.generate_recommendations(
            data_quality, statistical_analysis, pattern_detection
        )
    }

    logging.info(f"Extracted insights for {len(schema)} table(s), "
                 f"{len(insights['recommendations'])} recommendation(s)")

    return insights


def analyze_normalization_report(schema, data):
    """Normal-form analysis and constraint validation with illustrative fix-up SQL"""
    schema = _as_schema(schema)
    data = data or {}

    analysis = NormalizationAnalyzer().analyze(schema, data)
    constraint_violations = validate_constraints(schema, data)

    return {
        'analysis': analysis,
        'sql_statements': generate_normalization_sql(analysis),
        'foreign_keys': analysis['foreign_keys'],
        'constraint_violations': constraint_violations,
        'constraint_sql': generate_constraint_sql(constraint_violations)
    }


def analyze(schema, data):
    """Full analysis report for a schema and its sampled rows"""
    return {
        'normalization': analyze_normalization_report(schema, data),
        'insights': extract_data_insights(schema, data)
    }
