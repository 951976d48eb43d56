import os
import logging
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix
from storage import SessionStoreRegistry

# Configure logging
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "DEBUG").upper())


def create_app(test_config=None):
    """Application factory pattern"""
    app = Flask(__name__)
    app.secret_key = os.environ.get("SESSION_SECRET", "dev-secret-key-change-in-production")
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    # Configure the database
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///data_analysis.db")
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
        "pool_recycle": 300,
        "pool_pre_ping": True,
    }

    # Configure upload settings
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get("MAX_CONTENT_LENGTH", 50 * 1024 * 1024))  # 50MB
    app.config['UPLOAD_FOLDER'] = os.environ.get("UPLOAD_FOLDER", 'uploads')
    app.config['EXPORT_FOLDER'] = os.environ.get("EXPORT_FOLDER", 'exports')

    # Row caps for sampled analysis
    app.config['NORMALIZATION_SAMPLE_ROWS'] = int(os.environ.get("NORMALIZATION_SAMPLE_ROWS", 100))
    app.config['INSIGHTS_SAMPLE_ROWS'] = int(os.environ.get("INSIGHTS_SAMPLE_ROWS", 1000))

    if test_config:
        app.config.update(test_config)

    # Create upload directory if it doesn't exist
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    # Initialize extensions
    from models import db
    db.init_app(app)
    app.extensions['session_stores'] = SessionStoreRegistry()

    # Register routes
    from routes import register_routes
    register_routes(app)

    with app.app_context():
        # Create all database tables
        db.create_all()

    return app
