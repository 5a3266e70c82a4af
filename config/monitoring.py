"""
Monitoring and observability configuration for the Inference Gateway.
Integrates Sentry error tracking and per-request logging.
"""

import logging
import time
import uuid
from typing import Dict, Any, Optional
from flask import Flask, request, g

import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

logger = logging.getLogger(__name__)

# Endpoints that are polled by load balancers and not worth logging
QUIET_ENDPOINTS = ('health',)

def filter_sentry_event(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Filter and sanitize Sentry events.

    Args:
        event: Sentry event data
        hint: Sentry hint data

    Returns:
        Filtered event data or None to drop the event
    """
    request_data = event.get('request') or {}

    # Don't send health check errors
    if request_data.get('url', '').endswith('/health'):
        return None

    # Never forward credentials
    headers = request_data.get('headers') or {}
    for name in list(headers):
        if name.lower() == 'authorization':
            headers[name] = '[Filtered]'

    # Prompts and texts are user content
    data = request_data.get('data')
    if isinstance(data, dict):
        for key in ('text', 'prompt', 'query'):
            if key in data:
                data[key] = '[Filtered]'

    return event

def init_sentry(app: Flask) -> bool:
    """
    Initialize Sentry error tracking when SENTRY_DSN is configured.

    Returns:
        True if Sentry was initialized
    """
    sentry_dsn = app.config.get('SENTRY_DSN')

    if not sentry_dsn:
        logger.info("SENTRY_DSN not configured, skipping Sentry initialization")
        return False

    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            FlaskIntegration(
                transaction_style='endpoint'
            ),
        ],
        traces_sample_rate=0.1,  # 10% of transactions
        send_default_pii=False,
        environment=app.config.get('ENV', 'development'),
        release=app.config.get('APP_VERSION', 'unknown'),
        before_send=filter_sentry_event,
    )

    logger.info("Sentry error tracking initialized")
    return True

def setup_request_tracking(app: Flask) -> None:
    """Setup request/response logging and tracing headers."""

    @app.before_request
    def track_request_start():
        """Track request start time and id."""
        g.start_time = time.time()
        g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())[:8]

        if request.endpoint in QUIET_ENDPOINTS:
            return

        logger.info(f"Request: {request.method} {request.path} from {request.remote_addr} [{g.request_id}]")

    @app.after_request
    def track_request_end(response):
        """Add tracing headers and log the response."""
        if hasattr(g, 'start_time'):
            response_time = (time.time() - g.start_time) * 1000
            response.headers['X-Response-Time'] = f"{response_time:.2f}ms"

        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id

        if request.endpoint not in QUIET_ENDPOINTS:
            logger.info(f"Response: {response.status_code} for {request.method} {request.path} [{g.get('request_id')}]")

        return response

def init_monitoring(app: Flask) -> None:
    """
    Initialize monitoring with Flask app.

    Args:
        app: Flask application instance
    """
    init_sentry(app)
    setup_request_tracking(app)

    logger.info("Monitoring system initialized")
