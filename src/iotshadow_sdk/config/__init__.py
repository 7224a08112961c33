"""
Configuration management for IoT Shadow Python SDK

This module loads endpoint, credential and device shadow settings from JSON,
files, environment variables and the OS keyring.
"""

from .publisher_config import (
    IotShadowConfig,
    PublisherConfig,
    ShadowConfig,
    resolve_secret_key,
    is_valid_thing_name,
    KEYRING_SERVICE_NAME,
    DEFAULT_SERVICE_NAME,
)

__all__ = [
    'IotShadowConfig',
    'PublisherConfig',
    'ShadowConfig',
    'resolve_secret_key',
    'is_valid_thing_name',
    'KEYRING_SERVICE_NAME',
    'DEFAULT_SERVICE_NAME',
]
