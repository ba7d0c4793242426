"""
Upload API routes
"""
import logging
import os
import zipfile

from flask import Blueprint, current_app, jsonify, request
from werkzeug.utils import secure_filename

from storn.core.cleaning import clean_records
from storn.core.columns import detect_columns
from storn.core.data_processing import SUPPORTED_EXTENSIONS, frame_to_records, load_data_file
from storn.core.statistics import analyze_dataset

logger = logging.getLogger(__name__)

upload_bp = Blueprint('upload', __name__)


@upload_bp.route('/api/upload', methods=['POST'])
def upload_file():
    """Parse an uploaded CSV/Excel file into detected, cleaned records"""
    try:
        if 'file' not in request.files:
            return jsonify({'error': 'No file provided'}), 400

        file = request.files['file']
        if not file or file.filename == '':
            return jsonify({'error': 'No file selected'}), 400

        filename = secure_filename(file.filename) or 'upload'
        # secure_filename drops non-ASCII names, so the extension comes from the raw name
        extension = os.path.splitext(file.filename)[1].lower()
        if extension not in SUPPORTED_EXTENSIONS:
            return jsonify({'error': 'Unsupported file type. Please upload CSV or Excel files.'}), 400

        try:
            df = load_data_file(file.stream, file.filename)
        except (ValueError, UnicodeDecodeError, zipfile.BadZipFile) as e:
            logger.warning("Could not parse %s: %s", filename, e)
            return jsonify({'error': 'Could not read file: {}'.format(e)}), 400

        records = frame_to_records(df)
        role_map = detect_columns(records, sample_size=current_app.config['DETECTION_SAMPLE_SIZE'])
        cleaned = clean_records(records, role_map)
        logger.info("Parsed %s: %d rows, %d columns", filename, len(df), len(df.columns))

        return jsonify({
            'success': True,
            'filename': filename,
            'rowCount': len(cleaned),
            'columns': [str(c) for c in df.columns],
            'detectedColumns': role_map,
            'records': cleaned,
            'summary': analyze_dataset(cleaned),
        })

    except Exception as e:
        logger.exception("Error processing upload")
        return jsonify({'error': str(e)}), 500
