"""
Environment configuration for the Inference Gateway.
Handles environment variables, provider credentials, and deployment settings.
"""

import os
from typing import Dict, Any, List


# Environment variable holding the bearer credential for each provider
PROVIDER_CREDENTIALS = {
    'huggingface': 'HUGGINGFACE_API_KEY',
    'openai': 'OPENAI_API_KEY',
    'gemini': 'GEMINI_API_KEY',
}


class Config:
    """Base configuration class."""

    ENV = 'development'
    DEBUG = os.environ.get('DEBUG', 'false').lower() == 'true'
    TESTING = False

    # Application Configuration
    APP_NAME = os.environ.get('APP_NAME', 'inference-gateway')
    APP_VERSION = os.environ.get('APP_VERSION', '1.0.0')
    ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')

    # CORS Configuration (single origin)
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN', 'http://localhost:3000')
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization']
    CORS_METHODS = ['GET', 'POST', 'OPTIONS']

    # Request body limit
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 1048576))  # 1MB

    # Provider Configuration
    HUGGINGFACE_API_KEY = os.environ.get('HUGGINGFACE_API_KEY')
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
    GEMINI_PROJECT_ID = os.environ.get('GEMINI_PROJECT_ID')

    # Outbound call behaviour
    INFERENCE_TIMEOUT = float(os.environ.get('INFERENCE_TIMEOUT', 60))
    IMAGE_RETRY_AFTER_SECONDS = int(os.environ.get('IMAGE_RETRY_AFTER_SECONDS', 20))

    # Monitoring Configuration
    SENTRY_DSN = os.environ.get('SENTRY_DSN')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class DevelopmentConfig(Config):
    """Development configuration."""

    ENV = 'development'

    # More verbose logging in development
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration."""

    ENV = 'testing'
    TESTING = True
    DEBUG = False

    # Never talk to real providers from tests
    HUGGINGFACE_API_KEY = 'hf_test'
    OPENAI_API_KEY = 'sk-test'
    GEMINI_API_KEY = 'gemini-test'
    GEMINI_PROJECT_ID = 'test-project'
    SENTRY_DSN = None
    LOG_FILE = None

    CORS_ORIGIN = 'http://localhost:3000'
    INFERENCE_TIMEOUT = 5.0


class ProductionConfig(Config):
    """Production configuration."""

    ENV = 'production'
    DEBUG = False
    TESTING = False


class StagingConfig(ProductionConfig):
    """Staging configuration (like production but with debug logging)."""

    ENV = 'staging'
    LOG_LEVEL = 'DEBUG'


# Configuration mapping
config_mapping = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'staging': StagingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(environment: str = None) -> type:
    """
    Get configuration class based on environment.

    Args:
        environment: Environment name (defaults to $ENVIRONMENT)

    Returns:
        Configuration class
    """
    if environment is None:
        environment = os.environ.get('ENVIRONMENT', 'development')

    return config_mapping.get(environment.lower(), DevelopmentConfig)


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a loaded configuration mapping and return status.

    Missing provider credentials are hard issues in production and staging,
    warnings everywhere else.

    Args:
        config: Configuration mapping (usually ``app.config``)

    Returns:
        Dictionary with validation results
    """
    issues: List[str] = []
    warnings: List[str] = []

    strict = config.get('ENV') in ('production', 'staging')

    for provider, env_name in PROVIDER_CREDENTIALS.items():
        if not config.get(env_name):
            message = f"Missing credential for provider '{provider}': {env_name}"
            (issues if strict else warnings).append(message)

    if not config.get('GEMINI_PROJECT_ID'):
        message = "Missing GEMINI_PROJECT_ID, Gemini image generation is unavailable"
        (issues if strict else warnings).append(message)

    cors_origin = config.get('CORS_ORIGIN') or ''
    if not cors_origin:
        issues.append("CORS_ORIGIN must be set")
    elif cors_origin == '*':
        warnings.append("CORS_ORIGIN should name a single origin, not '*'")
    elif strict and not cors_origin.startswith('https://'):
        warnings.append("CORS_ORIGIN should use HTTPS in production")

    timeout = config.get('INFERENCE_TIMEOUT') or 0
    if timeout <= 0:
        issues.append(f"INFERENCE_TIMEOUT must be > 0, got {timeout}")

    if strict and not config.get('SENTRY_DSN'):
        warnings.append("Missing recommended environment variable: SENTRY_DSN")

    return {
        'valid': len(issues) == 0,
        'issues': issues,
        'warnings': warnings
    }


def get_config_summary(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get configuration summary (without sensitive values).

    Returns:
        Dictionary with configuration summary
    """
    return {
        'environment': config.get('ENV'),
        'debug': bool(config.get('DEBUG')),
        'cors_origin': config.get('CORS_ORIGIN'),
        'inference_timeout': config.get('INFERENCE_TIMEOUT'),
        'providers_configured': {
            provider: bool(config.get(env_name))
            for provider, env_name in PROVIDER_CREDENTIALS.items()
        },
        'sentry_configured': bool(config.get('SENTRY_DSN')),
    }
