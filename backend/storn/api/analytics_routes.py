"""
Analysis API routes
"""
import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request

from storn.core.dispatch import ANALYSIS_TYPES, list_analysis_types, run_analysis
from storn.core.forecasting import clamp_horizon

logger = logging.getLogger(__name__)

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api')


def ok(data: Dict[str, Any]) -> Dict[str, Any]:
    """Standard success response"""
    return {'success': True, **data}


def err(message: str, status_code: int = 400) -> Tuple[Dict[str, Any], int]:
    """Standard error response"""
    return {'success': False, 'error': message}, status_code


def _validate_payload(payload):
    """Return an error message for a malformed analysis request, or None"""
    if not isinstance(payload, dict):
        return 'Request body must be a JSON object'
    records = payload.get('records')
    if not isinstance(records, list):
        return 'records must be a list of objects'
    if any(not isinstance(row, dict) for row in records):
        return 'records must be a list of objects'
    hints = payload.get('roleHints')
    if hints is not None and not isinstance(hints, dict):
        return 'roleHints must be an object mapping roles to column names'
    return None


def _options(payload):
    config = current_app.config
    return {
        'role_hints': payload.get('roleHints'),
        'horizon': clamp_horizon(
            payload.get('horizon'),
            default=config['FORECAST_HORIZON_DAYS'],
            maximum=config['MAX_FORECAST_HORIZON'],
        ),
        'sample_size': config['DETECTION_SAMPLE_SIZE'],
    }


@analytics_bp.route('/analysis-types', methods=['GET'])
def get_analysis_types():
    """List the available analysis types"""
    return jsonify({'analysisTypes': list_analysis_types()})


@analytics_bp.route('/analyze', methods=['POST'])
def analyze():
    """Run one analysis over the posted records"""
    try:
        payload = request.get_json(silent=True)
        problem = _validate_payload(payload)
        if problem:
            return err(problem)

        analysis_type = payload.get('analysisType')
        if not isinstance(analysis_type, str) or analysis_type not in ANALYSIS_TYPES:
            return err('Unknown analysis type: {}'.format(analysis_type))

        logger.info("Running %s over %d records", analysis_type, len(payload['records']))
        analysis = run_analysis(payload['records'], analysis_type, **_options(payload))
        return jsonify(ok({'analysis': analysis}))

    except Exception as e:
        logger.exception("Error running analysis")
        return jsonify({'error': str(e)}), 500


@analytics_bp.route('/analyze/batch', methods=['POST'])
def analyze_batch():
    """Run several analyses over the same records; each result stands alone"""
    try:
        payload = request.get_json(silent=True)
        problem = _validate_payload(payload)
        if problem:
            return err(problem)

        analysis_types = payload.get('analysisTypes')
        if not isinstance(analysis_types, list) or not analysis_types \
                or not all(isinstance(t, str) for t in analysis_types):
            return err('analysisTypes must be a non-empty list of strings')

        options = _options(payload)
        results = {}
        for analysis_type in analysis_types:
            logger.info("Running analysis: %s", analysis_type)
            results[analysis_type] = run_analysis(payload['records'], analysis_type, **options)

        failed = [name for name, result in results.items() if 'error' in result]
        logger.info("Batch finished: %d analyses, %d with errors", len(results), len(failed))
        return jsonify(ok({
            'results': results,
            'totalAnalyses': len(results),
            'completed': len(results) - len(failed),
        }))

    except Exception as e:
        logger.exception("Error running batch analysis")
        return jsonify({'error': str(e)}), 500
