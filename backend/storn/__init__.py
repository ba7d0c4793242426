"""
Storn Flask Application Factory
"""
import logging

from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS

from storn.core.data_processing import sanitize_for_json

__version__ = '1.0.0'

DEFAULT_CONFIG = {
    'MAX_CONTENT_LENGTH': 100 * 1024 * 1024,  # 100MB uploads
    'CORS_ORIGINS': [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
        'http://localhost:5000',
        'http://127.0.0.1:5000',
    ],
    'DETECTION_SAMPLE_SIZE': 100,
    'FORECAST_HORIZON_DAYS': 30,
    'MAX_FORECAST_HORIZON': 365,
    'LOG_LEVEL': 'INFO',
}


class SafeJSONProvider(DefaultJSONProvider):
    """JSON provider that turns NaN/Inf and numpy/pandas values into plain JSON"""
    ensure_ascii = False  # Arabic column names and values stay readable

    def dumps(self, obj, **kwargs):
        return super().dumps(sanitize_for_json(obj), **kwargs)


def configure_logging(level):
    logging.basicConfig(format='[%(levelname)s] %(name)s: %(message)s')
    logging.getLogger('storn').setLevel(level)


def create_app(test_config=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)
    app.json = SafeJSONProvider(app)

    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env()
    if test_config is not None:
        app.config.from_mapping(test_config)

    configure_logging(str(app.config['LOG_LEVEL']).upper())

    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    # Register blueprints
    from storn.api.analytics_routes import analytics_bp
    from storn.api.upload_routes import upload_bp

    app.register_blueprint(upload_bp)
    app.register_blueprint(analytics_bp)

    # Basic routes
    @app.route('/', methods=['GET'])
    def root():
        """Root endpoint - API information"""
        return jsonify({
            'message': 'Storn Analytics API',
            'version': __version__,
            'endpoints': {
                'health': '/api/health',
                'upload': '/api/upload',
                'analyze': '/api/analyze',
                'analyze_batch': '/api/analyze/batch',
                'analysis_types': '/api/analysis-types',
            }
        })

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'message': 'Storn Analytics API is running'
        })

    return app
