import json
from datetime import datetime, timezone
import numpy as np
import pandas as pd
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _utcnow():
    return datetime.now(timezone.utc)


def make_json_serializable(obj):
    """Convert numpy types and other non-serializable objects to JSON-compatible types"""
    if isinstance(obj, dict):
        return {key: make_json_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple, set)):
        return [make_json_serializable(item) for item in obj]
    elif isinstance(obj, (np.bool_, bool)):
        return bool(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return None if np.isnan(obj) else float(obj)
    elif isinstance(obj, float):
        return None if np.isnan(obj) else obj
    elif isinstance(obj, np.ndarray):
        return [make_json_serializable(item) for item in obj.tolist()]
    elif obj is None or isinstance(obj, (str, int)):
        return obj
    elif pd.isna(obj):
        return None
    elif hasattr(obj, 'isoformat'):  # datetime objects
        return obj.isoformat()
    elif hasattr(obj, 'item'):  # numpy scalars
        return obj.item()
    else:
        return obj


class AnalysisSession(db.Model):
    """Model to store analysis sessions and results"""
    id = db.Column(db.Integer, primary_key=True)
    session_name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow)
    file_count = db.Column(db.Integer, default=0)
    analysis_results = db.Column(db.Text)  # JSON string of results

    def set_results(self, results_dict):
        """Store analysis results as JSON"""
        self.analysis_results = json.dumps(make_json_serializable(results_dict))

    def get_results(self):
        """Retrieve analysis results as dictionary"""
        if self.analysis_results:
            return json.loads(self.analysis_results)
        return {}

    def to_dict(self):
        return {
            'id': self.id,
            'session_name': self.session_name,
            'file_count': self.file_count,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


class UploadedFile(db.Model):
    """Model to track uploaded files and the tables loaded from them"""
    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    file_type = db.Column(db.String(10), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('analysis_session.id'), nullable=False)
    uploaded_at = db.Column(db.DateTime, default=_utcnow)
    file_size = db.Column(db.Integer)
    table_names = db.Column(db.Text, default='[]')  # JSON list of loaded tables

    session = db.relationship('AnalysisSession',
                              backref=db.backref('files', lazy=True, cascade='all, delete-orphan'))

    @property
    def tables(self):
        return json.loads(self.table_names or '[]')

    @tables.setter
    def tables(self, names):
        self.table_names = json.dumps(list(names))

    def to_dict(self):
        return {
            'id': self.id,
            'filename': self.filename,
            'file_type': self.file_type,
            'file_size': self.file_size,
            'tables': self.tables
        }
