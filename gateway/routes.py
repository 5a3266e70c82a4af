"""
HTTP routes for the Inference Gateway.
Parses JSON bodies, hands them to the gateway, and shapes the HTTP response.
"""

import logging
from typing import Any, Dict
from flask import Blueprint, Response, request, jsonify, current_app

from utils.error_handlers import ValidationError
from .inference import InferenceGateway

# Setup logging
logger = logging.getLogger(__name__)

# Create blueprint
inference_bp = Blueprint('inference', __name__)

EXTENSION_KEY = 'inference_gateway'

def get_gateway() -> InferenceGateway:
    """Return the gateway bound to the current application."""
    return current_app.extensions[EXTENSION_KEY]

def get_json_body() -> Dict[str, Any]:
    """
    Parse the request body as a JSON object.

    Raises:
        ValidationError: body missing, not JSON, or not an object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data

def describe_request(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Describe request data for safe logging (no prompt or text content).
    """
    described = {'model_index': data.get('modelIndex', 0)}
    for field in ('text', 'prompt', 'query'):
        value = data.get(field)
        if isinstance(value, str):
            described[f'{field}_length'] = len(value)
    return described

@inference_bp.route('/summarize', methods=['POST'])
def summarize():
    """
    Summarize text.

    Expected JSON:
        {
            "text": "Long article ...",
            "modelIndex": 0  // optional
        }

    Returns:
        200: {"model": "...", "summary": "..."}
        400: Missing text or invalid modelIndex
        500: Provider error, with upstream payload in "details"
    """
    data = get_json_body()
    logger.info(f"Summarize request: {describe_request(data)}")

    result = get_gateway().summarize(data.get('text'), data.get('modelIndex'))
    return jsonify(result), 200

@inference_bp.route('/detect-ai', methods=['POST'])
def detect_ai():
    """
    Score text for machine authorship.

    Expected JSON:
        {"text": "..."}

    Returns:
        200: {"model": "...", "confidence": 0-100, "verdict": "..."}
        400: Missing text
        500: Provider error
    """
    data = get_json_body()
    logger.info(f"Detect request: {describe_request(data)}")

    result = get_gateway().detect_ai(data.get('text'))
    return jsonify(result), 200

def _prompt(data: Dict[str, Any]) -> Any:
    # "query" is the field name older clients send
    prompt = data.get('prompt')
    return prompt if prompt is not None else data.get('query')

@inference_bp.route('/generate', methods=['POST'])
def generate():
    """
    Generate an image and return its bytes.

    Expected JSON:
        {
            "prompt": "A lighthouse at dusk",
            "modelIndex": 0  // optional
        }

    Returns:
        200: Image bytes with the provider's Content-Type
        400: Missing prompt or invalid modelIndex
        500: Provider error
        503: Model still loading; retry after "retry_after" seconds
    """
    data = get_json_body()
    logger.info(f"Generate request: {describe_request(data)}")

    image = get_gateway().generate_image(_prompt(data), data.get('modelIndex'))

    response = Response(image.content, status=200, content_type=image.content_type)
    response.headers['Content-Length'] = image.content_length
    response.headers['X-Model-Id'] = image.model
    return response

@inference_bp.route('/generate-image', methods=['POST'])
def generate_image_data_url():
    """
    Generate an image and return it as a base64 data URL.

    Expected JSON:
        {"prompt": "...", "modelIndex": 0}  // "query" accepted for "prompt"

    Returns:
        200: {"model": "...", "image": "data:image/png;base64,..."}
        400, 500, 503: as for /generate
    """
    data = get_json_body()
    logger.info(f"Generate (data URL) request: {describe_request(data)}")

    image = get_gateway().generate_image(_prompt(data), data.get('modelIndex'))
    return jsonify({
        'model': image.model,
        'image': image.to_data_url()
    }), 200
