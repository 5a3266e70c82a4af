"""
Gateway module for the Inference Gateway.
Handles request proxying to third-party inference providers.
"""

from flask import Flask

from .inference import InferenceGateway
from .routes import inference_bp, EXTENSION_KEY

def init_gateway(app: Flask, http=None) -> InferenceGateway:
    """
    Create the inference gateway for ``app`` and register its routes.

    Args:
        app: Flask application instance
        http: Optional ``requests``-compatible client (tests pass a stub)

    Returns:
        The gateway stored in ``app.extensions``
    """
    gateway = InferenceGateway.from_config(app.config, http=http)
    app.extensions[EXTENSION_KEY] = gateway
    app.register_blueprint(inference_bp)
    return gateway

__all__ = ['InferenceGateway', 'init_gateway', 'inference_bp']
