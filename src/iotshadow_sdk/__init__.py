"""
IoT Shadow Python SDK
AWS Signature Version 4 request signing for the IoT Core device shadow REST API
"""

import logging
from typing import Any, Dict, Union

from .version import __version__
from .exceptions import (
    IotShadowSDKError,
    ValidationError,
    UnsupportedPlatformError,
    ConfigurationError,
    ServerCommunicationError,
)
from .signing import (
    # Core signing functionality
    SigV4Signer,
    create_signer,
    sign_request,
    derive_signing_key,
    build_canonical_request,
    assemble_headers,
    build_authorization_header,
    generate_auth_headers,
    # Context
    create_signing_context,
    # Types
    SigningContext,
    SignatureResult,
    SigningOutcome,
    SigningError,
    SigningErrorCodes,
    HttpMethod,
    # Utilities
    check_platform_compatibility,
)
from .config import (
    IotShadowConfig,
    PublisherConfig,
    ShadowConfig,
)
from .shadow import (
    StatePublisher,
    build_desired_state,
)

# Library logging stays silent unless the application configures it
logging.getLogger(__name__).addHandler(logging.NullHandler())


def initialize_sdk(log_level: Union[int, str] = logging.WARNING) -> Dict[str, Any]:
    """
    Configure SDK logging and report platform compatibility.

    Args:
        log_level: Level for the iotshadow_sdk logger

    Returns:
        dict: Platform compatibility information
    """
    logger = logging.getLogger(__name__)
    if isinstance(log_level, str):
        log_level = log_level.upper()
    logger.setLevel(log_level)

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        logger.addHandler(handler)

    compatibility = check_platform_compatibility()
    if not compatibility['hmac_sha256_supported']:
        logger.warning("HMAC-SHA256 is not available; request signing will fail")
    return compatibility


__all__ = [
    '__version__',
    'initialize_sdk',
    # Exceptions
    'IotShadowSDKError',
    'ValidationError',
    'UnsupportedPlatformError',
    'ConfigurationError',
    'ServerCommunicationError',
    # Signing
    'SigV4Signer',
    'create_signer',
    'sign_request',
    'derive_signing_key',
    'build_canonical_request',
    'assemble_headers',
    'build_authorization_header',
    'generate_auth_headers',
    'create_signing_context',
    'SigningContext',
    'SignatureResult',
    'SigningOutcome',
    'SigningError',
    'SigningErrorCodes',
    'HttpMethod',
    'check_platform_compatibility',
    # Configuration
    'IotShadowConfig',
    'PublisherConfig',
    'ShadowConfig',
    # Shadow publishing
    'StatePublisher',
    'build_desired_state',
]
