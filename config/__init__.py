"""
Configuration package for the Inference Gateway.
"""

from .settings import (
    Config,
    DevelopmentConfig,
    TestingConfig,
    StagingConfig,
    ProductionConfig,
    PROVIDER_CREDENTIALS,
    get_config,
    validate_config,
    get_config_summary,
)

__all__ = [
    'Config',
    'DevelopmentConfig',
    'TestingConfig',
    'StagingConfig',
    'ProductionConfig',
    'PROVIDER_CREDENTIALS',
    'get_config',
    'validate_config',
    'get_config_summary',
]
