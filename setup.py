"""
Data Query Analyzer Setup Instructions

To run this application on your local system:

1. Install Python 3.11+ if not already installed

2. Create a virtual environment:
   python -m venv data_analysis_env

3. Activate the virtual environment:
   - Windows: data_analysis_env\\Scripts\\activate
   - Mac/Linux: source data_analysis_env/bin/activate

4. Install the package and its dependencies (declared in pyproject.toml):
   pip install -e .
   pip install -e ".[test]"       # pytest
   pip install -e ".[postgres]"   # psycopg2-binary, for DATABASE_URL=postgresql://...

5. Set environment variables (optional):
   - SESSION_SECRET=your-secret-key-here
   - DATABASE_URL=sqlite:///data_analysis.db (default)
   - LOG_LEVEL=DEBUG (default)
   - UPLOAD_FOLDER=uploads, EXPORT_FOLDER=exports
   - NORMALIZATION_SAMPLE_ROWS=100, INSIGHTS_SAMPLE_ROWS=1000

6. Run the application:
   python main.py

   Or with gunicorn:
   gunicorn --bind 0.0.0.0:5000 --reuse-port --reload main:app

7. Run the tests:
   pytest

File Structure:
├── main.py                       # Entry point
├── app.py                        # Flask app configuration
├── models.py                     # Database models
├── routes.py                     # JSON API routes
├── compilers/
│   ├── identifiers.py            # Identifier sanitizing
│   ├── query_spec.py             # Query description types
│   ├── predicate_compiler.py     # WHERE clauses
│   ├── join_compiler.py          # JOIN clauses
│   ├── aggregation_compiler.py   # Aggregates and GROUP BY
│   └── query_builder.py          # SELECT assembly and validation
├── analyzers/
│   ├── schema.py                 # Schema model and value helpers
│   ├── normalization_analyzer.py # 1NF/2NF/3NF checks
│   ├── constraint_analyzer.py    # Constraint validation
│   ├── statistics_profiler.py    # Data quality and statistics
│   ├── pattern_analyzer.py       # Duplicates, anomalies, trends
│   ├── relationship_analyzer.py  # Table relationships
│   └── data_insights.py          # Insight aggregation
├── storage/
│   └── session_store.py          # Per-session in-memory SQLite
├── parsers/
│   ├── file_parser.py            # Base parser
│   ├── csv_parser.py             # CSV parser
│   └── excel_parser.py           # Excel parser
├── utils/
│   └── export_utils.py           # Export functionality
└── tests/
"""
from setuptools import setup

setup()
