import os
import logging
from flask import request, jsonify, send_file, current_app
from sqlalchemy.exc import OperationalError
from werkzeug.utils import secure_filename
from models import db, AnalysisSession, UploadedFile, make_json_serializable
from parsers.file_parser import FileParserFactory
from analyzers import analyze_normalization_report, extract_data_insights, schema_to_dict
from compilers import compile_query, format_sql, sanitize_identifier, validate_query_spec
from utils.export_utils import ExportUtils

ALLOWED_EXTENSIONS = {'csv', 'xls', 'xlsx'}


def allowed_file(filename):
    """Check if file extension is allowed"""
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def error_response(message, status):
    return jsonify({
        'status': 'error',
        'message': message
    }), status


def classify_execution_error(error):
    """Turn a SQLite execution failure into a user-facing message"""
    message = str(getattr(error, 'orig', None) or error)

    if 'no such column' in message:
        return f"Column not found: {message}"
    if 'no such table' in message:
        return f"Table not found: {message}"
    if 'syntax error' in message:
        return f"SQL syntax error: {message}"
    return message


def session_stores():
    return current_app.extensions['session_stores']


def register_routes(app):
    """Register all routes with the Flask app"""

    def load_session(session_id):
        return db.session.get(AnalysisSession, session_id)

    def load_store(session_id):
        """Session record and its store, or an error response"""
        session = load_session(session_id)
        if not session:
            return None, None, error_response('Session not found', 404)

        store = session_stores().get(session_id)
        if store is None:
            return session, None, error_response('No data loaded for this session', 404)

        return session, store, None

    @app.route('/api/health')
    def api_health():
        """Liveness check"""
        return jsonify({'status': 'success', 'ok': True})

    @app.route('/api/sessions')
    def api_get_sessions():
        """Get recent analysis sessions"""
        recent_sessions = db.session.execute(
            db.select(AnalysisSession).order_by(AnalysisSession.created_at.desc()).limit(5)
        ).scalars().all()
        return jsonify({
            'status': 'success',
            'sessions': [session.to_dict() for session in recent_sessions]
        })

    @app.route('/api/upload', methods=['POST'])
    def api_upload_files():
        """Upload CSV/Excel files and load them as tables into the session's store"""
        try:
            files = request.files.getlist('files[]')

            if not files or all(file.filename == '' for file in files):
                return error_response('No files selected', 400)

            session_id = request.form.get('session_id', type=int)
            if session_id is not None:
                session = load_session(session_id)
                if not session:
                    return error_response('Session not found', 404)
            else:
                session = AnalysisSession(session_name=request.form.get('session_name', 'Unnamed Session'))
                db.session.add(session)
                db.session.commit()

            store = session_stores().get_or_create(session.id)
            file_parser = FileParserFactory()

            uploaded_files = []
            invalid_files = []
            tables = []

            for file in files:
                if not (file and file.filename and allowed_file(file.filename)):
                    invalid_files.append(file.filename)
                    continue

                filename = secure_filename(file.filename)
                file_path = os.path.join(current_app.config['UPLOAD_FOLDER'], f"{session.id}_{filename}")
                file.save(file_path)
                file_type = filename.rsplit('.', 1)[1].lower()

                try:
                    parser = file_parser.get_parser(file_type)
                    parsed = parser.parse_tables(file_path, os.path.splitext(filename)[0])
                    loaded = [store.load_dataframe(name, df) for name, df in parsed.items()]
                except Exception as e:
                    logging.warning(f"Could not load {filename}: {str(e)}")
                    if os.path.exists(file_path):
                        os.remove(file_path)
                    invalid_files.append(file.filename)
                    continue

                uploaded_file = UploadedFile(
                    filename=filename,
                    file_type=file_type,
                    file_path=file_path,
                    session_id=session.id,
                    file_size=os.path.getsize(file_path)
                )
                uploaded_file.tables = loaded
                db.session.add(uploaded_file)
                uploaded_files.append(uploaded_file)
                tables.extend(loaded)

            session.file_count = (session.file_count or 0) + len(uploaded_files)
            db.session.commit()

            if not uploaded_files:
                return jsonify({
                    'status': 'error',
                    'message': 'No valid files were uploaded',
                    'session_id': session.id,
                    'invalid_files': invalid_files
                }), 400

            return jsonify({
                'status': 'success',
                'message': f'Successfully uploaded {len(uploaded_files)} files',
                'session_id': session.id,
                'uploaded_files': [f.filename for f in uploaded_files],
                'tables': tables,
                'invalid_files': invalid_files
            })

        except Exception as e:
            logging.error(f"Upload error: {str(e)}")
            db.session.rollback()
            return error_response(f'Upload failed: {str(e)}', 500)

    @app.route('/api/session/<int:session_id>')
    def api_get_session(session_id):
        """API endpoint to get session details"""
        session = load_session(session_id)
        if not session:
            return error_response('Session not found', 404)

        details = session.to_dict()
        details['files'] = [f.to_dict() for f in session.files]
        details['has_data'] = session_id in session_stores()

        return jsonify({
            'status': 'success',
            'session': details,
            'results': session.get_results()
        })

    @app.route('/api/session/<int:session_id>/schema')
    def api_get_schema(session_id):
        """Tables and columns of the session's store"""
        session, store, error = load_store(session_id)
        if error:
            return error

        try:
            schema = store.read_schema()
            return jsonify({
                'status': 'success',
                'tables': list(schema),
                'schema': make_json_serializable(schema_to_dict(schema))
            })
        except Exception as e:
            logging.error(f"Schema error: {str(e)}")
            return error_response(str(e), 500)

    @app.route('/api/session/<int:session_id>/query', methods=['POST'])
    def api_run_query(session_id):
        """Compile a query description and run it against the session's store"""
        session, store, error = load_store(session_id)
        if error:
            return error

        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return error_response('Query must be a JSON object', 400)

        table = body.get('table')
        if not table:
            return error_response('table is required', 400)

        try:
            schema = store.read_schema()
            if sanitize_identifier(table) not in schema:
                return error_response(f"Table '{table}' does not exist", 400)

            built = compile_query(schema, body)
            logging.info(f"Executing SQL: {built['sql']} params: {built['params']}")

            rows = store.execute(built['sql'], built['params'])

            return jsonify({
                'status': 'success',
                'sql': built['sql'],
                'formatted_sql': format_sql(built['sql']),
                'params': make_json_serializable(built['params']),
                'warnings': validate_query_spec(schema, body),
                'rows': make_json_serializable(rows)
            })

        except OperationalError as e:
            logging.error(f"Query error: {str(e)}")
            return error_response(classify_execution_error(e), 500)

        except Exception as e:
            logging.error(f"Query error: {str(e)}")
            return error_response(str(e), 500)

    @app.route('/api/session/<int:session_id>/normalization')
    def api_normalization(session_id):
        """Normal-form and constraint analysis over a bounded sample of each table"""
        session, store, error = load_store(session_id)
        if error:
            return error

        try:
            schema = store.read_schema()
            data = store.sample_all(schema, current_app.config['NORMALIZATION_SAMPLE_ROWS'])
            report = make_json_serializable(analyze_normalization_report(schema, data))

            results = session.get_results()
            results['normalization'] = report
            session.set_results(results)
            db.session.commit()

            return jsonify({'status': 'success', **report})

        except Exception as e:
            logging.error(f"Normalization analysis error: {str(e)}")
            db.session.rollback()
            return error_response(str(e), 500)

    @app.route('/api/session/<int:session_id>/insights')
    def api_insights(session_id):
        """Statistical, pattern and relationship insights over a bounded sample"""
        session, store, error = load_store(session_id)
        if error:
            return error

        try:
            schema = store.read_schema()
            data = store.sample_all(schema, current_app.config['INSIGHTS_SAMPLE_ROWS'])
            insights = make_json_serializable(extract_data_insights(schema, data))

            results = session.get_results()
            results['insights'] = insights
            session.set_results(results)
            db.session.commit()

            return jsonify({'status': 'success', **insights})

        except Exception as e:
            logging.error(f"Data insights error: {str(e)}")
            db.session.rollback()
            return error_response(str(e), 500)

    @app.route('/api/session/<int:session_id>/export/<format>')
    def api_export_results(session_id, format):
        """API endpoint for export analysis results"""
        session = load_session(session_id)
        if not session:
            return error_response('Session not found', 404)

        results = session.get_results()
        if not results:
            return error_response('No analysis results to export', 400)

        try:
            export_utils = ExportUtils(current_app.config['EXPORT_FOLDER'])
            file_path = export_utils.export(results, format, secure_filename(session.session_name) or 'session')
            return send_file(os.path.abspath(file_path), as_attachment=True)

        except ValueError as e:
            return error_response(str(e), 400)

        except Exception as e:
            logging.error(f"Export error: {str(e)}")
            return error_response(f'Export failed: {str(e)}', 500)

    @app.route('/api/session/<int:session_id>', methods=['DELETE'])
    def api_delete_session(session_id):
        """Tear down a session's store, uploaded files and record"""
        session = load_session(session_id)
        if not session:
            return error_response('Session not found', 404)

        try:
            store_destroyed = session_stores().destroy(session_id)

            deleted_files = []
            for uploaded_file in session.files:
                try:
                    if os.path.exists(uploaded_file.file_path):
                        os.remove(uploaded_file.file_path)
                        deleted_files.append(uploaded_file.filename)
                except OSError as e:
                    logging.warning(f"Could not delete file {uploaded_file.file_path}: {str(e)}")

            session_name = session.session_name
            db.session.delete(session)
            db.session.commit()

            return jsonify({
                'status': 'success',
                'message': 'Session deleted successfully',
                'session_name': session_name,
                'deleted_files': deleted_files,
                'store_destroyed': store_destroyed
            })

        except Exception as e:
            logging.error(f"Delete session error: {str(e)}")
            db.session.rollback()
            return error_response(f'Delete failed: {str(e)}', 500)
