"""
demodb REST API Server
Serves a demo server store over the same contract the SQL client expects
from a real backend
"""

import logging
import traceback

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS

from demodb import __version__
from demodb.config import settings
from demodb.session import DemoSession
from demodb.storage import ServerStore

logger = logging.getLogger(__name__)

def create_app(store: ServerStore = None) -> Flask:
    """Build the API app around a server store"""
    app = Flask(__name__)
    CORS(app)
    app.config['STORE'] = store or ServerStore()

    _register_routes(app)
    _register_error_handlers(app)
    return app

def _store() -> ServerStore:
    return current_app.config['STORE']

def _not_found(message: str):
    return jsonify({
        'success': False,
        'error': message
    }), 404

def _register_routes(app: Flask):

    # ==================== CONNECTION & QUERY ENDPOINTS ====================

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'version': __version__,
            'database_count': len(_store().list_databases())
        })

    @app.route('/connect', methods=['POST'])
    def connect():
        """Open a demo connection; every new connection starts from the seed"""
        _store().reset()
        return jsonify({
            'connected': True,
            'message': 'Connection successful',
            'databases': _store().list_databases()
        })

    @app.route('/query', methods=['POST'])
    def execute_query():
        """Execute one statement"""
        data = request.get_json(silent=True)
        if not data:
            return jsonify({
                'success': False,
                'error': 'Request body required'
            }), 400

        query = (data.get('query') or '').strip()
        if not query:
            return jsonify({
                'success': False,
                'error': 'Query required'
            }), 400

        connection = data.get('connection') or {}
        session = DemoSession(_store(), database=connection.get('database'), latency=0)
        result = session.execute(query)
        return jsonify(result.to_dict())

    @app.route('/script', methods=['POST'])
    def execute_script():
        """Execute a ';'-separated script, following USE statements"""
        data = request.get_json(silent=True)
        if not data:
            return jsonify({
                'success': False,
                'error': 'Request body required'
            }), 400

        script = data.get('script') or ''
        if not script.strip():
            return jsonify({
                'success': False,
                'error': 'Script required'
            }), 400

        connection = data.get('connection') or {}
        session = DemoSession(
            _store(),
            database=connection.get('database'),
            stop_on_error=bool(data.get('stop_on_error', False)),
            latency=0,
        )
        results = [r.to_dict() for r in session.execute_script(script)]
        return jsonify({
            'success': all(r['success'] for r in results),
            'results': results,
            'count': len(results)
        })

    # ==================== SERVER STATE ENDPOINTS ====================

    @app.route('/state', methods=['GET'])
    def server_state():
        """Snapshot of the whole demo server"""
        return jsonify({
            'success': True,
            'state': _store().get_snapshot()
        })

    @app.route('/reset', methods=['POST'])
    def reset_state():
        _store().reset()
        return jsonify({
            'success': True,
            'message': 'Server state reset.'
        })

    # ==================== BROWSING ENDPOINTS ====================

    @app.route('/databases', methods=['GET'])
    def list_databases():
        """Get list of all databases"""
        databases = _store().list_databases()
        return jsonify({
            'success': True,
            'databases': databases,
            'count': len(databases)
        })

    @app.route('/databases/<db_name>/tables', methods=['GET'])
    def list_tables(db_name):
        """List tables in a database"""
        store = _store()
        if not store.database_exists(db_name):
            return _not_found(f"Database '{db_name}' not found")

        tables = store.list_tables(db_name)
        return jsonify({
            'success': True,
            'tables': tables,
            'count': len(tables)
        })

    @app.route('/databases/<db_name>/tables/<table_name>/schema', methods=['GET'])
    def get_table_schema(db_name, table_name):
        """Get table schema and stats"""
        store = _store()
        if not store.database_exists(db_name):
            return _not_found(f"Database '{db_name}' not found")

        table_key = store.resolve_table(db_name, table_name)
        if table_key is None:
            return _not_found(f"Table '{table_name}' not found in database '{db_name}'")

        table = store.get_snapshot()[store.resolve_database(db_name)][table_key]

        return jsonify({
            'success': True,
            'table': table_key,
            'schema': table['schema'],
            'stats': {
                'row_count': table['rows'],
                'columns': len(table['schema']),
                'engine': table['engine'],
                'collation': table['collation']
            }
        })

def _register_error_handlers(app: Flask):

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors"""
        return jsonify({
            'success': False,
            'error': 'Endpoint not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors"""
        return jsonify({
            'success': False,
            'error': 'Method not allowed'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors"""
        logger.error("Internal server error: %s", error)
        return jsonify({
            'success': False,
            'error': 'Internal server error',
            'traceback': traceback.format_exc() if app.debug else None
        }), 500

app = create_app()

def run(host: str = None, port: int = None, debug: bool = None):
    """Run the API server"""
    host = host or settings.host
    port = port or settings.port
    debug = settings.debug if debug is None else debug
    logger.info("demodb API server on http://%s:%d", host, port)
    app.run(debug=debug, port=port, host=host, use_reloader=False)

if __name__ == '__main__':
    run()
