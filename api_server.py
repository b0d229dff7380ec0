#!/usr/bin/env python3
"""
CyberShield Scan API Server
Enhances uploaded screenshots for OCR and asks the AI classifier for a scam verdict.
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, Response
from flask_cors import CORS
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

# Import services and models
from models.errors import DecodeError, InputMissingError, RenderContextError
from models.upload import Upload
from pipeline.scan_content import scan_content
from services.classification_service import ClassificationService
from services.error_classification_service import classify_error
from services.history_service import HistoryService
from services.image_enhancement_service import ImageEnhancementService

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024
app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

# Initialize services
enhancement_service = ImageEnhancementService()
classification_service = ClassificationService()
history_service = HistoryService()

logger = logging.getLogger(__name__)

# HTTP status per AppError type
ERROR_STATUS = {
    'validation': 400,
    'quota': 429,
    'network': 502,
    'safety': 502,
    'system': 500,
}


def read_upload(field: str = 'file'):
    """Return an Upload for the multipart field, or None if no file was sent."""
    file = request.files.get(field)
    if file is None or file.filename == '':
        return None
    return Upload(
        data=file.read(),
        filename=secure_filename(file.filename) or 'upload',
        mime_type=file.mimetype or 'application/octet-stream',
    )


def read_json_text() -> str:
    """Return the `text` field of a JSON body; anything but an object with a string is a validation error."""
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise InputMissingError("JSON body must be an object")
    text = body.get('text', '')
    if text is None:
        text = ''
    if not isinstance(text, str):
        raise InputMissingError("'text' must be a string")
    return text


@app.route('/health', methods=['GET'])
def health():
    return jsonify({
        'status': 'healthy',
        'services': {
            'enhancement': True,
            'classifier_configured': bool(classification_service.api_key),
            'classifier_model': classification_service.model,
        }
    })


@app.route('/api/enhance', methods=['POST'])
def enhance_image():
    """Run the OCR enhancement pipeline on one uploaded image."""
    upload = read_upload()
    if upload is None:
        return jsonify({'success': False, 'message': 'No image provided'}), 400

    try:
        enhanced = enhancement_service.enhance(upload.data, upload.mime_type)
    except DecodeError as e:
        logger.warning(f"Enhance rejected {upload.filename}: {e}")
        return jsonify({'success': False, 'message': str(e)}), 422
    except RenderContextError as e:
        logger.error(f"Enhance failed for {upload.filename}: {e}")
        return jsonify({'success': False, 'message': str(e)}), 500

    if request.args.get('format') == 'json':
        return jsonify({
            'success': True,
            'image': enhanced.to_data_url(),
            'mime_type': enhanced.mime_type,
            'width': enhanced.width,
            'height': enhanced.height,
        })
    return Response(enhanced.data, mimetype=enhanced.mime_type)


@app.route('/api/analyze', methods=['POST'])
def analyze():
    """Scan text and/or an uploaded file and record the verdict."""
    try:
        if request.is_json:
            text = read_json_text()
            upload = None
        else:
            text = request.form.get('text', '')
            upload = read_upload()

        result, item = scan_content(
            text,
            upload,
            enhancement_service=enhancement_service,
            classification_service=classification_service,
            history_service=history_service,
        )
    except Exception as e:
        app_error = classify_error(e)
        logger.error(f"Analysis error ({app_error.type}): {e}")
        return jsonify({'success': False, 'error': app_error.to_dict()}), ERROR_STATUS[app_error.type]

    return jsonify({
        'success': True,
        'result': result.to_dict(),
        'history_item': item.to_dict(),
    })


@app.route('/api/history', methods=['GET'])
def list_history():
    items = history_service.list()
    return jsonify({'success': True, 'count': len(items), 'items': [i.to_dict() for i in items]})


@app.route('/api/history/<item_id>', methods=['GET'])
def get_history_item(item_id: str):
    item = history_service.get(item_id)
    if item is None:
        return jsonify({'success': False, 'message': 'Scan not found'}), 404
    return jsonify({'success': True, 'item': item.to_dict()})


@app.route('/api/history', methods=['DELETE'])
def clear_history():
    history_service.clear()
    return jsonify({'success': True, 'message': 'History cleared'})


@app.errorhandler(413)
def too_large(_e):
    return jsonify({
        'success': False,
        'message': f'File exceeds {MAX_CONTENT_LENGTH // (1024 * 1024)} MB upload limit'
    }), 413


if __name__ == '__main__':
    port = int(os.getenv("PORT", "5000"))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"
    logger.info(f"Starting CyberShield API server on port {port}")
    app.run(host='0.0.0.0', port=port, debug=debug)
