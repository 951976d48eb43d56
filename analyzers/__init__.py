from .schema import Column, schema_from_dict, schema_to_dict
from .data_insights import analyze, analyze_normalization_report, extract_data_insights
