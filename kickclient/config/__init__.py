"""Configuration loading for the Kick integration client."""

from .settings import GlobalConfig, KickCredentials, load_global_config, validate_config

__all__ = [
    'GlobalConfig',
    'KickCredentials',
    'load_global_config',
    'validate_config'
]
