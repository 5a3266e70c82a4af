"""
Standardized error handling utilities for the Inference Gateway.
Provides consistent error responses across all endpoints.
"""

import logging
from typing import Dict, Any, Optional, Tuple
from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
import traceback

# Setup logging
logger = logging.getLogger(__name__)

class APIError(Exception):
    """
    Custom API exception with standardized error format.

    Attributes:
        error_code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details (any JSON value)
    """

    def __init__(self, error_code: str, message: str, status_code: int = 400, details: Any = None):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            'error': self.message,
            'code': self.error_code
        }

        if self.details is not None:
            error_dict['details'] = self.details

        return error_dict

    def headers(self) -> Dict[str, str]:
        """Extra response headers for this error."""
        return {}

class ValidationError(APIError):
    """Client input error (400)"""
    def __init__(self, message: str, details: Any = None):
        super().__init__('validation_error', message, 400, details)

class UpstreamError(APIError):
    """Provider transport, authorization or response error (500)"""
    def __init__(self, message: str, details: Any = None):
        super().__init__('upstream_error', message, 500, details)

class ModelLoadingError(APIError):
    """Provider model is still initializing; caller should retry (503)"""
    def __init__(self, message: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__('model_loading', message, 503)

    def to_dict(self) -> Dict[str, Any]:
        error_dict = super().to_dict()
        error_dict['status'] = 'loading'
        if self.retry_after is not None:
            error_dict['retry_after'] = self.retry_after
        return error_dict

    def headers(self) -> Dict[str, str]:
        if self.retry_after is None:
            return {}
        return {'Retry-After': str(self.retry_after)}

def handle_api_error(error: APIError) -> Tuple[Dict[str, Any], int]:
    """
    Handle custom API errors.

    Args:
        error: APIError instance

    Returns:
        Tuple of (error_dict, status_code)
    """
    if error.status_code >= 500:
        logger.error(f"API Error {error.status_code}: {error.error_code} - {error.message}")
    else:
        logger.warning(f"API Error {error.status_code}: {error.error_code} - {error.message}")
    return error.to_dict(), error.status_code

def handle_http_exception(error: HTTPException) -> Tuple[Dict[str, Any], int]:
    """
    Handle standard HTTP exceptions.

    Args:
        error: HTTPException instance

    Returns:
        Tuple of (error_dict, status_code)
    """
    logger.warning(f"HTTP Exception {error.code}: {error.description}")

    # Map common HTTP errors to our format
    error_map = {
        400: ('bad_request', 'Bad request'),
        404: ('not_found', 'Resource not found'),
        405: ('method_not_allowed', 'Method not allowed'),
        413: ('payload_too_large', 'Request body too large'),
        415: ('unsupported_media_type', 'Unsupported media type'),
        500: ('internal_error', 'Internal server error'),
    }

    error_code, default_message = error_map.get(error.code, ('http_error', 'HTTP error'))

    return {
        'error': error.description or default_message,
        'code': error_code
    }, error.code

def handle_generic_exception(error: Exception) -> Tuple[Dict[str, Any], int]:
    """
    Handle unexpected exceptions.

    Args:
        error: Exception instance

    Returns:
        Tuple of (error_dict, status_code)
    """
    # Log the full traceback for debugging
    logger.error(f"Unexpected error: {str(error)}", exc_info=True)

    # Don't expose internal error details in production
    if current_app.config.get('DEBUG', False):
        message = f"Internal error: {str(error)}"
        details = {'traceback': traceback.format_exc()}
    else:
        message = "An unexpected error occurred"
        details = None

    error_dict = {
        'error': message,
        'code': 'internal_error'
    }

    if details:
        error_dict['details'] = details

    return error_dict, 500

def register_error_handlers(app):
    """
    Register error handlers with Flask application.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(APIError)
    def handle_api_error_route(error):
        response_data, status_code = handle_api_error(error)
        return jsonify(response_data), status_code, error.headers()

    @app.errorhandler(HTTPException)
    def handle_http_exception_route(error):
        response_data, status_code = handle_http_exception(error)
        return jsonify(response_data), status_code

    @app.errorhandler(Exception)
    def handle_generic_exception_route(error):
        response_data, status_code = handle_generic_exception(error)
        return jsonify(response_data), status_code
