#!/usr/bin/env python3
"""
Inference Gateway
Flask application that relays summarization, AI-detection and image
generation requests to third-party inference providers.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Dict, Any
from flask import Flask, jsonify
from flask_cors import CORS

from config import get_config, validate_config, get_config_summary
from config.monitoring import init_monitoring
from gateway import init_gateway
from utils.error_handlers import register_error_handlers

logger = logging.getLogger(__name__)

def configure_logging(app: Flask) -> None:
    """Configure root logging from the app's LOG_LEVEL / LOG_FILE settings."""
    # Already configured by an earlier app or the host process
    if logging.getLogger().handlers:
        return

    handlers = [logging.StreamHandler()]
    if app.config.get('LOG_FILE'):
        handlers.append(logging.FileHandler(app.config['LOG_FILE']))

    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format=app.config.get('LOG_FORMAT'),
        handlers=handlers
    )

def create_app(config: Dict[str, Any] = None, http=None) -> Flask:
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config: Optional configuration overrides; an ``ENVIRONMENT`` key picks
            the configuration class
        http: Optional ``requests``-compatible client for outbound calls

    Returns:
        Configured Flask application instance

    Raises:
        ValueError: if required configuration is missing
    """
    app = Flask(__name__)

    # Load configuration
    load_config(app, config)
    configure_logging(app)

    # Initialize monitoring and error handling
    init_monitoring(app)
    register_error_handlers(app)

    # Initialize extensions
    init_extensions(app)

    # Register routes
    init_gateway(app, http=http)
    register_health(app)

    logger.info(f"Inference Gateway initialized: {get_config_summary(app.config)}")
    return app

def load_config(app: Flask, config: Dict[str, Any] = None) -> None:
    """Load environment-specific configuration and fail fast on missing settings."""
    environment = (config or {}).get('ENVIRONMENT')
    app.config.from_object(get_config(environment))

    # Override with provided config
    if config:
        app.config.update(config)

    status = validate_config(app.config)
    for warning in status['warnings']:
        logger.warning(warning)

    if not status['valid']:
        raise ValueError(f"Invalid configuration: {'; '.join(status['issues'])}")

def init_extensions(app: Flask) -> None:
    """Initialize Flask extensions."""
    # CORS for the single configured frontend origin
    CORS(
        app,
        origins=[app.config['CORS_ORIGIN']],
        methods=app.config['CORS_METHODS'],
        allow_headers=app.config['CORS_ALLOW_HEADERS'],
    )

def register_health(app: Flask) -> None:
    """Register the liveness endpoint."""

    @app.route('/health')
    def health():
        """Health check endpoint for load balancers."""
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'service': app.config.get('APP_NAME'),
            'version': app.config.get('APP_VERSION')
        })

if __name__ == '__main__':
    app = create_app()

    port = int(os.getenv('PORT', 3000))
    debug = app.config.get('DEBUG', False)

    logger.info(f"Starting Inference Gateway on port {port}")
    logger.info(f"Environment: {app.config.get('ENV')}")
    logger.info(f"Debug mode: {debug}")

    app.run(host='0.0.0.0', port=port, debug=debug, threaded=True)
